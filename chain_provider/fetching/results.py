"""Tagged result of one backend request: success payload or structured error."""

from dataclasses import dataclass
from typing import Any, Union

NOT_FOUND = 404
BAD_REQUEST = 400


@dataclass(frozen=True)
class ApiSuccess:
    payload: Any


@dataclass(frozen=True)
class ApiError:
    status_code: int
    error: str
    message: str = ""

    @property
    def is_not_found(self) -> bool:
        return self.status_code == NOT_FOUND

    def __str__(self) -> str:
        return f"{self.status_code} {self.error}: {self.message}" if self.message else f"{self.status_code} {self.error}"


ApiResult = Union[ApiSuccess, ApiError]

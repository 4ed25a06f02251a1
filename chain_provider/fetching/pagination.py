"""Walk numbered pages of a list endpoint."""

import logging
from typing import Any, Dict, List, Literal, Optional, Protocol

from chain_provider.errors import BackendError
from .results import ApiError, ApiResult

logger = logging.getLogger(__name__)

Order = Literal["asc", "desc"]


class PageSource(Protocol):
    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResult: ...


async def fetch_all_pages(
    source: PageSource,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    order: Order = "asc",
    to_page: Optional[int] = None,
) -> List[Any]:
    """
    Fetch pages 1, 2, ... and concatenate their items.

    Stops on an empty page or after ``to_page`` pages. A 404 on any page
    means the resource does not exist and gives []. Any other error raises
    BackendError. Either way nothing accumulated so far is returned.
    """
    items: List[Any] = []
    page = 1
    while True:
        query = dict(params or {})
        query.update(order=order, page=page)
        result = await source.get(path, query)
        if isinstance(result, ApiError):
            if result.is_not_found:
                logger.debug(f"{path} page {page}: not found")
                return []
            raise BackendError(f"Could not fetch {path} page {page}: {result}", result.status_code)
        if not isinstance(result.payload, list):
            raise BackendError(f"Expected a list from {path} page {page}, got {type(result.payload).__name__}")

        items.extend(result.payload)
        logger.debug(f"{path} page {page}: {len(result.payload)} items")
        if not result.payload or page == to_page:
            break
        page += 1
    return items

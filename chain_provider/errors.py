"""Provider exceptions."""

from typing import Optional


class ProviderError(Exception):
    """Base exception for chain provider errors."""


class BackendUnavailable(ProviderError):
    """Transport-level failure talking to the backend."""


class BackendError(ProviderError):
    """Backend answered with a structured error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class NotFound(ProviderError):
    """Requested entity does not exist on the backend."""


class DatumNotFound(NotFound):
    def __init__(self, datum_hash: str):
        super().__init__(f"No datum found for datum hash: {datum_hash}")
        self.datum_hash = datum_hash


class AmbiguousHolder(ProviderError):
    """Unit is held by more than one address or output."""

    def __init__(self, unit: str):
        super().__init__(f"Unit {unit} needs to be an NFT or only held by one address")
        self.unit = unit


class NativeScriptUnsupported(ProviderError):
    """Reference script is a native script."""

    def __init__(self, script_hash: str):
        super().__init__(f"Native script ref not supported: {script_hash}")
        self.script_hash = script_hash


class SubmissionError(ProviderError):
    """Transaction submission failed."""


class MalformedSubmission(SubmissionError):
    """Backend rejected the transaction as invalid. Message is the backend's."""


class UnsupportedDatumShape(ProviderError, ValueError):
    """Datum JSON node matches none of int/bytes/map/list/constructor."""

"""Chain data fetching."""

from .client import ChainProvider
from .pagination import fetch_all_pages, PageSource
from .results import ApiError, ApiResult, ApiSuccess

__all__ = ["ChainProvider", "fetch_all_pages", "PageSource", "ApiError", "ApiResult", "ApiSuccess"]

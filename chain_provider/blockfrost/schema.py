"""
Blockfrost response schema.

Every HTTP response is decoded once into ``ApiSuccess`` or ``ApiError`` so the
rest of the backend never sniffs arbitrary JSON for an ``error`` key.
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from chain_provider.fetching.results import ApiError, ApiResult, ApiSuccess
from chain_provider.types import Assets


def decode_response(response: httpx.Response) -> ApiResult:
    """Classify a raw HTTP response as success payload or structured error."""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None
        if response.is_success:
            return ApiError(response.status_code, "Invalid JSON", response.text[:200])

    if isinstance(payload, dict) and "error" in payload:
        status = payload.get("status_code")
        return ApiError(
            status_code=status if isinstance(status, int) else response.status_code,
            error=str(payload["error"]),
            message=str(payload.get("message") or ""),
        )
    if response.is_error:
        return ApiError(response.status_code, response.reason_phrase, response.text[:200])
    return ApiSuccess(payload)


def parse_amounts(amounts: Optional[List[Dict[str, str]]]) -> Assets:
    """[{"unit": ..., "quantity": "..."}] -> Assets."""
    assets: Assets = {}
    for am in amounts or []:
        assets[am["unit"]] = int(am["quantity"])
    return assets


def optional_int(value: Any) -> Optional[int]:
    """Absent or empty -> None (unset), otherwise int."""
    if value is None or value == "":
        return None
    return int(value)

"""Async HTTP client for the Blockfrost REST API."""

import logging
from typing import Any, Dict, Optional, Union

import httpx

from chain_provider.errors import BackendUnavailable
from .schema import ApiResult, ApiSuccess, decode_response

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://cardano-mainnet.blockfrost.io/api/v0"


class BlockfrostClient:
    """Thin transport: auth headers, request dispatch, response classification."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        project_id: Optional[str] = None,
        client_version: str = "0.1.0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.project_id = project_id or ""
        self.client_version = client_version
        self._http = httpx.AsyncClient(
            base_url=self.url,
            headers=self._get_headers(),
            timeout=timeout,
            transport=transport,
        )

    def _get_headers(self) -> Dict[str, str]:
        return {
            "project_id": self.project_id,
            "User-Agent": f"chain-provider/{self.client_version}",
        }

    async def close(self):
        await self._http.aclose()
        logger.info(f"Closed Blockfrost client for {self.url}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _send_request(self, method: str, path: str, **kwargs: Any) -> ApiResult:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise BackendUnavailable(f"{method} {path} failed: {e}") from e
        result = decode_response(response)
        logger.debug(f"{method} {path} -> {response.status_code}")
        return result

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResult:
        return await self._send_request("GET", path, params=params)

    async def post_cbor(self, path: str, body: Union[bytes, bytearray]) -> ApiResult:
        return await self._send_request(
            "POST", path, content=bytes(body), headers={"Content-Type": "application/cbor"},
        )

    async def health_check(self) -> Dict[str, Any]:
        try:
            result = await self.get("/health")
        except BackendUnavailable as e:
            return {"status": "unhealthy", "connected": False, "error": str(e)}
        if isinstance(result, ApiSuccess) and isinstance(result.payload, dict) and result.payload.get("is_healthy"):
            return {"status": "healthy", "connected": True}
        return {"status": "unhealthy", "connected": True, "error": str(result)}

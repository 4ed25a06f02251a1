"""Shared fixtures: a scriptable fake Blockfrost behind httpx.MockTransport."""

from typing import Any, Callable, Dict, List, Union

import httpx
import pytest

from chain_provider import BlockfrostProvider

BASE_URL = "https://blockfrost.test/api/v0"
PREFIX = "/api/v0"

Route = Union[Any, Callable[[httpx.Request], Any]]


def not_found() -> httpx.Response:
    return httpx.Response(404, json={"status_code": 404, "error": "Not Found", "message": "The requested component has not been found."})


def server_error() -> httpx.Response:
    return httpx.Response(500, json={"status_code": 500, "error": "Internal Server Error", "message": "boom"})


class FakeBlockfrost:
    """
    Routes requests by path (without the /api/v0 prefix).

    A route is a JSON payload, an httpx.Response, or a callable taking the
    request and returning either. Unknown paths answer 404.
    """

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, route: Route) -> "FakeBlockfrost":
        self.routes[path] = route
        return self

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path[len(PREFIX):] == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path[len(PREFIX):])
        if route is None:
            return not_found()
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)


@pytest.fixture
def fake() -> FakeBlockfrost:
    return FakeBlockfrost()


@pytest.fixture
def provider(fake: FakeBlockfrost) -> BlockfrostProvider:
    return BlockfrostProvider.create(
        BASE_URL, project_id="testproj", client_version="9.9.9",
        transport=httpx.MockTransport(fake.handler),
    )


def paged(pages: List[List[Any]]) -> Callable[[httpx.Request], Any]:
    """Route serving pages[page - 1], empty list past the end."""
    def route(request: httpx.Request) -> Any:
        page = int(request.url.params.get("page", "1"))
        return pages[page - 1] if page <= len(pages) else []
    return route


def utxo_record(tx_hash: str, index: int, address: str = "addr_test1qz", lovelace: int = 2_000_000, **extra) -> Dict[str, Any]:
    record = {
        "tx_hash": tx_hash,
        "output_index": index,
        "address": address,
        "amount": [{"unit": "lovelace", "quantity": str(lovelace)}],
        "block": "b" * 64,
        "data_hash": None,
        "inline_datum": None,
        "reference_script_hash": None,
    }
    record.update(extra)
    return record

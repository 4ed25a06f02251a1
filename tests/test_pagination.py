"""Tests for the paginated fetcher."""

from typing import Any, Dict, List, Optional

import pytest

from chain_provider.errors import BackendError
from chain_provider.fetching import ApiError, ApiSuccess, fetch_all_pages


class StubSource:
    """Serves scripted results per page and records the query of each request."""

    def __init__(self, pages: List[Any]):
        self.pages = pages
        self.queries: List[Dict[str, Any]] = []

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None):
        self.queries.append(dict(params or {}))
        page = params["page"]
        result = self.pages[page - 1] if page <= len(self.pages) else []
        return result if isinstance(result, ApiError) else ApiSuccess(result)


@pytest.mark.asyncio
async def test_collects_until_empty_page():
    source = StubSource([list(range(100)), list(range(100, 200)), []])
    items = await fetch_all_pages(source, "/addresses/x/utxos")
    assert items == list(range(200))
    assert len(source.queries) == 3
    assert [q["page"] for q in source.queries] == [1, 2, 3]
    assert all(q["order"] == "asc" for q in source.queries)


@pytest.mark.asyncio
async def test_stops_at_page_bound():
    source = StubSource([[1], [2], [3]])
    items = await fetch_all_pages(source, "/assets/u/transactions", order="desc", to_page=2)
    assert items == [1, 2]
    assert len(source.queries) == 2
    assert source.queries[0]["order"] == "desc"


@pytest.mark.asyncio
async def test_not_found_is_empty():
    source = StubSource([ApiError(404, "Not Found")])
    assert await fetch_all_pages(source, "/addresses/x/utxos") == []
    assert len(source.queries) == 1


@pytest.mark.asyncio
async def test_not_found_on_later_page_is_empty():
    source = StubSource([[1, 2], ApiError(404, "Not Found")])
    assert await fetch_all_pages(source, "/addresses/x/utxos") == []
    assert len(source.queries) == 2


@pytest.mark.asyncio
async def test_other_error_aborts_without_partial_result():
    source = StubSource([[1, 2], ApiError(500, "Internal Server Error")])
    with pytest.raises(BackendError) as exc:
        await fetch_all_pages(source, "/addresses/x/utxos")
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_keeps_base_params():
    source = StubSource([[]])
    await fetch_all_pages(source, "/x", params={"count": 2})
    assert source.queries == [{"count": 2, "order": "asc", "page": 1}]


@pytest.mark.asyncio
async def test_non_list_payload_is_error():
    source = StubSource([{"not": "a list"}])
    with pytest.raises(BackendError):
        await fetch_all_pages(source, "/x")

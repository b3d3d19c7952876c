"""Tests for the feed client."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from solrfeed.api.app import create_app
from solrfeed.api.deps import set_service
from solrfeed.client.client import AsyncFeedClient, FeedClient, fill_template
from solrfeed.config.settings import Settings
from solrfeed.core.service import FeedService
from tests.conftest import FakeAdapter

TEMPLATE = "http://x/v1/search?q={searchTerms}&start={startIndex?}&count={count?}&sort={sfdc:sortField?}"


@pytest.fixture
def app(settings: Settings, fake_adapter: FakeAdapter) -> FastAPI:
    app = create_app(settings)
    set_service(FeedService(settings, fake_adapter))
    yield app
    set_service(None)


@pytest.fixture
def async_client(app: FastAPI) -> AsyncFeedClient:
    return AsyncFeedClient("http://testserver", transport=httpx.ASGITransport(app=app))


# ── Template filling ─────────────────────────────────────────────────────────


class TestFillTemplate:
    def test_all_parameters(self) -> None:
        url = fill_template(TEMPLATE, {"searchTerms": "dog", "startIndex": 10, "count": 5, "sortField": "date asc"})
        assert url == "http://x/v1/search?q=dog&start=10&count=5&sort=date%20asc"

    def test_unfilled_optional_parameters_are_empty(self) -> None:
        assert fill_template(TEMPLATE, {"searchTerms": "dog"}) == "http://x/v1/search?q=dog&start=&count=&sort="

    def test_search_terms_are_quoted(self) -> None:
        url = fill_template(TEMPLATE, {"searchTerms": "a&b c"})
        assert url.startswith("http://x/v1/search?q=a%26b%20c&")

    def test_missing_required_parameter(self) -> None:
        with pytest.raises(ValueError, match="searchTerms"):
            fill_template(TEMPLATE, {"count": 10})


# ── Async client ─────────────────────────────────────────────────────────────


class TestAsyncFeedClient:
    async def test_description(self, async_client: AsyncFeedClient) -> None:
        async with async_client as client:
            info = await client.description()
        assert info.index_offset == 0
        assert info.short_name == "TestSolr"
        assert "{searchTerms}" in info.template

    async def test_description_is_cached(self, async_client: AsyncFeedClient) -> None:
        async with async_client as client:
            first = await client.description()
            assert await client.description() is first
            assert await client.description(refresh=True) is not first

    async def test_first_page_starts_at_index_offset(
        self, async_client: AsyncFeedClient, fake_adapter: FakeAdapter
    ) -> None:
        async with async_client as client:
            page = await client.search("message")
        assert page.start_index == 0
        assert page.total_results == 25
        assert [e.id for e in page.entries] == [f"msg-{n:03d}" for n in range(10)]
        assert fake_adapter.calls[-1]["start"] == 0

    async def test_sorted_search(self, async_client: AsyncFeedClient, fake_adapter: FakeAdapter) -> None:
        async with async_client as client:
            await client.search("message", count=5, sort="date desc")
        assert fake_adapter.calls[-1] == {"query": "message", "start": 0, "rows": 5, "sort": "date desc"}

    async def test_iter_entries_pages_through_all_results(
        self, async_client: AsyncFeedClient, fake_adapter: FakeAdapter
    ) -> None:
        async with async_client as client:
            ids = [e.id async for e in client.iter_entries("message", count=10)]
        assert ids == [f"msg-{n:03d}" for n in range(25)]
        assert [c["start"] for c in fake_adapter.calls] == [0, 10, 20]

    async def test_iter_entries_limit(self, async_client: AsyncFeedClient, fake_adapter: FakeAdapter) -> None:
        async with async_client as client:
            ids = [e.id async for e in client.iter_entries("message", count=4, limit=6)]
        assert ids == [f"msg-{n:03d}" for n in range(6)]
        assert len(fake_adapter.calls) == 2

    async def test_upstream_failure_raises(self, settings: Settings) -> None:
        app = create_app(settings)
        set_service(FeedService(settings, FakeAdapter(fail=True)))
        try:
            async with AsyncFeedClient("http://testserver", transport=httpx.ASGITransport(app=app)) as client:
                with pytest.raises(httpx.HTTPStatusError) as exc_info:
                    await client.search("message")
        finally:
            set_service(None)
        assert exc_info.value.response.status_code == 502


# ── Sync client ──────────────────────────────────────────────────────────────


class TestFeedClient:
    def test_search(self, app: FastAPI) -> None:
        client = FeedClient("http://testserver", transport=httpx.ASGITransport(app=app))
        page = client.search("message", start=20)
        assert page.start_index == 20
        assert len(page.entries) == 5

    def test_iter_entries(self, app: FastAPI) -> None:
        client = FeedClient("http://testserver", transport=httpx.ASGITransport(app=app))
        assert len(list(client.iter_entries("message", count=7))) == 25

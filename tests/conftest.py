"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any

import pytest

from solrfeed.adapters.base.adapter import AdapterHealth, SearchAdapter
from solrfeed.adapters.base.exceptions import QueryError
from solrfeed.config.settings import Settings
from solrfeed.models.record import Record, SearchResult

SCIENTIST_RECEIVERS = [
    "wmartin@example.org",
    "hillmichael@example.com",
    "ashley94@example.net",
    "nicholas22@example.org",
    "ucarter@example.com",
]
SCIENTIST_TAGS = ["work", "urgent", "science", "finance", "personal"]


class FakeAdapter(SearchAdapter):
    """In-memory query executor that pages over a fixed record list."""

    def __init__(self, records: list[Record] | None = None, *, fail: bool = False) -> None:
        self.records = records or []
        self.fail = fail
        self.calls: list[dict[str, Any]] = []
        self.initialized = False

    @property
    def name(self) -> str:
        return "fake"

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.initialized = False

    async def search(
        self,
        query: str,
        *,
        start: int = 0,
        rows: int = 10,
        sort: str | None = None,
    ) -> SearchResult:
        self.calls.append({"query": query, "start": start, "rows": rows, "sort": sort})
        if self.fail:
            raise QueryError("Solr query failed: connection reset")
        return SearchResult(
            total_matches=len(self.records),
            start_offset=start,
            page_size=rows,
            query=query,
            records=self.records[start : start + rows],
        )

    async def health_check(self) -> AdapterHealth:
        return AdapterHealth(status="healthy", message="fake backend")


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        description={"public_url": "http://testserver", "short_name": "TestSolr"},
    )


@pytest.fixture
def scientist_record() -> Record:
    """The single record matching the query 'scientist'."""
    return Record(
        id="b3249981-1c2e-4b52-9a53-5d7f3f0f8a11",
        subject="Congress dog determine relate admit win trade.",
        sender="james70@example.net",
        body="Wall scientist whose hope. Board during quality wear bring.",
        date="2024-09-14T23:16:18Z",
        receivers=list(SCIENTIST_RECEIVERS),
        tags=list(SCIENTIST_TAGS),
    )


@pytest.fixture
def scientist_result(scientist_record: Record) -> SearchResult:
    """SearchResult for the end-to-end 'scientist' scenario."""
    return SearchResult(
        total_matches=1,
        start_offset=0,
        page_size=10,
        query="scientist",
        records=[scientist_record],
    )


def make_record(n: int, **overrides: Any) -> Record:
    """Build a complete numbered record."""
    data: dict[str, Any] = {
        "id": f"msg-{n:03d}",
        "subject": f"Subject {n}",
        "sender": f"sender{n}@example.com",
        "body": f"Body of message {n}",
        "date": f"2024-01-{(n % 28) + 1:02d}T08:00:00Z",
        "receivers": [f"to{n}@example.com"],
        "tags": [f"tag{n}"],
    }
    data.update(overrides)
    return Record(**data)


@pytest.fixture
def records() -> list[Record]:
    """Twenty-five complete records."""
    return [make_record(n) for n in range(25)]


@pytest.fixture
def record_factory() -> Any:
    """Expose ``make_record`` to tests."""
    return make_record


@pytest.fixture
def fake_adapter(records: list[Record]) -> FakeAdapter:
    return FakeAdapter(records)

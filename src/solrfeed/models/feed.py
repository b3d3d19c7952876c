"""Feed models — Immutable output of the result-to-feed translator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FeedEntry(BaseModel):
    """One record rendered into feed form.

    ``title``/``summary`` and ``updated``/``email_date`` are populated from the
    same source values; generic Atom readers use the standard elements while
    Salesforce reads the vendor extension elements.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    summary: str
    updated: str
    record_type: str
    sender: str
    receivers: str = ""
    subject: str
    body: str
    email_date: str
    tags: str = ""


class FeedDocument(BaseModel):
    """A translated page of search results with OpenSearch paging metadata."""

    model_config = ConfigDict(frozen=True)

    total_results: int = Field(description="Upstream total match count")
    start_index: int = Field(description="Zero-based index of the first entry")
    items_per_page: int = Field(description="Upstream page size")
    search_terms: str = Field(description="Query echoed verbatim")
    entries: tuple[FeedEntry, ...] = Field(default=(), description="Entries in input order")
    skipped: tuple[int, ...] = Field(
        default=(),
        description="Positions of input records dropped in lenient mode",
    )

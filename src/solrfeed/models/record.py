"""Search result models — Native query output handed to the translator.

A ``SearchResult`` is what the Query Executor (the Solr adapter) returns for
one query execution.  Scalar record fields are optional here so that a
missing value survives as ``None`` and can be rejected by the translator as
a data error instead of failing during model construction.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator


class Record(BaseModel):
    """One matched document with its stored field values."""

    id: str | None = Field(default=None, description="Unique document identifier")
    subject: str | None = Field(default=None, description="Message subject")
    body: str | None = Field(default=None, description="Message body")
    sender: str | None = Field(default=None, description="Sender address")
    date: str | None = Field(default=None, description="Timezone-qualified ISO-8601 timestamp")
    receivers: list[str] = Field(default_factory=list, description="Receiver addresses, in order")
    tags: list[str] = Field(default_factory=list, description="Tags, in order")

    @field_validator("receivers", "tags", mode="before")
    @classmethod
    def _coerce_sequence(cls, v: object) -> object:
        """Accept ``None`` or a bare string for multi-valued fields."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class SearchResult(BaseModel):
    """One page of results for a single query execution."""

    total_matches: int = Field(ge=0, description="Total number of matching records server-side")
    start_offset: int = Field(default=0, ge=0, description="Zero-based index of the first record in this page")
    page_size: int = Field(ge=1, description="Requested page size")
    query: str = Field(description="Original search terms")
    records: list[Record] = Field(default_factory=list, description="Page contents in relevance order")

    @model_validator(mode="after")
    def _check_page_bounds(self) -> SearchResult:
        if len(self.records) > self.page_size:
            raise ValueError(
                f"page holds {len(self.records)} records but page_size is {self.page_size}"
            )
        if self.start_offset + len(self.records) > self.total_matches:
            raise ValueError(
                f"start_offset {self.start_offset} + {len(self.records)} records "
                f"exceeds total_matches {self.total_matches}"
            )
        return self

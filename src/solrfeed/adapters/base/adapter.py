"""Base search adapter — Abstract interface for query executors.

An adapter is the only I/O-bound step between an incoming feed request and
the translated feed.  It is responsible for:
  1. Executing paginated queries against the backend
  2. Mapping native documents into ``Record`` values via the mapping profile
  3. Reporting health status

Timeouts belong here; the translator downstream never retries or times out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from solrfeed.models.record import SearchResult


class AdapterHealth(BaseModel):
    """Health status of a search adapter."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class SearchAdapter(ABC):
    """Abstract base class for query executors.

    All adapters must implement:
      - search(): Execute one paginated query and return a SearchResult
      - health_check(): Report adapter health status

    Adapters should be stateless and safe for concurrent use once initialized.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'solr')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the adapter (connections, pools, etc.).

        Called once during application startup.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Gracefully shut down the adapter and release connections."""

    @abstractmethod
    async def search(
        self,
        query: str,
        *,
        start: int = 0,
        rows: int = 10,
        sort: str | None = None,
    ) -> SearchResult:
        """Execute a search query against the backend.

        Args:
            query: Free-text search terms.
            start: Zero-based offset of the first record to return.
            rows: Page size.
            sort: Optional sort clause, e.g. ``"date desc"``.

        Returns:
            One page of results.

        Raises:
            QueryError: If the backend query fails.
            ConnectionError: If the adapter is not connected.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check the health of the search backend."""

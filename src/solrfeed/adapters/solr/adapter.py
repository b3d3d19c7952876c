"""Apache Solr adapter — Paginated full-text search via Solr's JSON Request API.

Connects to Apache Solr (v8+) using ``httpx`` (async).  Stored fields are
requested by their native names from the mapping profile and turned into
``Record`` values; the translator decides afterwards whether a record is
complete enough to publish.

Usage::

    adapter = SolrAdapter(
        base_url="http://localhost:8983/solr",
        collection="emails",
    )
    await adapter.initialize()
    result = await adapter.search("scientist", start=0, rows=10)
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from solrfeed.adapters.base.adapter import AdapterHealth, SearchAdapter
from solrfeed.adapters.base.exceptions import ConfigurationError, ConnectionError, QueryError
from solrfeed.core.mapping import RECORD_FIELDS, MappingProfile
from solrfeed.models.record import Record, SearchResult

logger = logging.getLogger(__name__)

_SORT_DIRECTIONS = {"asc", "desc"}


class SolrAdapter(SearchAdapter):
    """Search adapter for Apache Solr (v8+).

    Communicates with Solr via its `JSON Request API`_ over HTTP.

    .. _JSON Request API: https://solr.apache.org/guide/solr/latest/query-guide/json-request-api.html

    Args:
        base_url: Solr base URL, e.g. ``"http://localhost:8983/solr"``.
        collection: Solr collection/core name.
        profile: Mapping profile supplying native field names.
        username: Optional basic-auth username.
        password: Optional basic-auth password.
        timeout: HTTP request timeout in seconds.
        query_fields: edismax ``qf`` parameter.
        default_operator: edismax ``q.op`` parameter.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8983/solr",
        collection: str = "emails",
        profile: MappingProfile | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
        query_fields: str = "subject^2 body sender",
        default_operator: str = "AND",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._collection = collection
        self._profile = profile or MappingProfile()
        self._username = username
        self._password = password
        self._timeout = timeout
        self._query_fields = query_fields
        self._default_operator = default_operator
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "solr"

    async def initialize(self) -> None:
        """Create an ``httpx.AsyncClient`` and ping the Solr admin API."""
        auth = None
        if self._username and self._password:
            auth = httpx.BasicAuth(self._username, self._password)

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            auth=auth,
        )

        try:
            resp = await self._client.get(f"/{self._collection}/admin/ping")
            resp.raise_for_status()
            logger.info(
                "Connected to Solr collection '%s' at %s",
                self._collection,
                self._base_url,
            )
        except httpx.HTTPError as e:
            raise ConnectionError(f"Failed to connect to Solr: {e}") from e

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Search ───────────────────────────────────────────────────────────

    def build_request(self, query: str, start: int, rows: int, sort: str | None = None) -> dict[str, Any]:
        """Build the JSON request body for Solr's ``/select`` handler."""
        body: dict[str, Any] = {
            "query": query,
            "offset": start,
            "limit": rows,
            "fields": self._profile.fields.native_fields(),
            "params": {
                "defType": "edismax",
                "qf": self._query_fields,
                "q.op": self._default_operator,
            },
        }
        if sort:
            body["sort"] = self._native_sort(sort)
        return body

    async def search(
        self,
        query: str,
        *,
        start: int = 0,
        rows: int = 10,
        sort: str | None = None,
    ) -> SearchResult:
        """Execute one paginated query against Solr."""
        if not self._client:
            raise ConnectionError("Solr client not initialized.")

        body = self.build_request(query, start, rows, sort)
        try:
            began = time.monotonic()
            resp = await self._client.post(f"/{self._collection}/select", json=body)
            resp.raise_for_status()
            took_ms = int((time.monotonic() - began) * 1000)
            data = resp.json()
        except httpx.HTTPError as e:
            raise QueryError(f"Solr query failed: {e}") from e
        except ValueError as e:
            raise QueryError("Solr returned a non-JSON response") from e

        response_section = data.get("response", {})
        docs = response_section.get("docs", [])[:rows]
        records = [self.map_record(doc) for doc in docs]

        # Keep the page invariants even if Solr reports a stale numFound
        total = max(int(response_section.get("numFound", 0)), start + len(records))

        logger.debug(
            "Solr returned %d of %d docs for %r (start=%d, qtime=%s ms, took=%d ms)",
            len(records),
            total,
            query,
            start,
            data.get("responseHeader", {}).get("QTime"),
            took_ms,
        )

        return SearchResult(
            total_matches=total,
            start_offset=start,
            page_size=rows,
            query=query,
            records=records,
        )

    # ── Schema mapping ───────────────────────────────────────────────────

    def map_record(self, doc: dict[str, Any]) -> Record:
        """Map a Solr document to a ``Record`` using the profile's field names.

        Single-valued fields may come back as one-element lists and are
        unwrapped.  Absent fields stay ``None`` for the translator to judge.
        """
        fields = self._profile.fields
        return Record(
            id=self._scalar(doc.get(fields.id)),
            subject=self._scalar(doc.get(fields.subject)),
            body=self._scalar(doc.get(fields.body)),
            sender=self._scalar(doc.get(fields.sender)),
            date=self._scalar(doc.get(fields.date)),
            receivers=self._multi(doc.get(fields.receivers)),
            tags=self._multi(doc.get(fields.tags)),
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Ping the Solr admin endpoint."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            began = time.monotonic()
            resp = await self._client.get(f"/{self._collection}/admin/ping")
            latency_ms = int((time.monotonic() - began) * 1000)

            if resp.status_code == 200:
                data = resp.json()
                solr_status = data.get("status", "unknown")
                return AdapterHealth(
                    status="healthy" if solr_status == "OK" else "degraded",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"Collection: {self._collection}, status: {solr_status}",
                )
            return AdapterHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Solr returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _native_sort(self, sort: str) -> str:
        """Translate ``"<record field> [asc|desc]"`` into a Solr sort clause."""
        parts = sort.split()
        field_name = parts[0]
        direction = parts[1].lower() if len(parts) > 1 else "desc"
        if len(parts) > 2 or direction not in _SORT_DIRECTIONS:
            raise ConfigurationError(f"Invalid sort clause: {sort!r}")
        if field_name not in RECORD_FIELDS:
            raise ConfigurationError(f"Unknown sort field: {field_name!r}")
        return f"{getattr(self._profile.fields, field_name)} {direction}"

    @staticmethod
    def _scalar(val: Any) -> str | None:
        """Solr may return single-valued fields as lists; unwrap transparently."""
        if isinstance(val, list):
            val = val[0] if val else None
        if val is None:
            return None
        return str(val)

    @staticmethod
    def _multi(val: Any) -> list[str]:
        if val is None:
            return []
        if isinstance(val, list):
            return [str(v) for v in val]
        return [str(val)]

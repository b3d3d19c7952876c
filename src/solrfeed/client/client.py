"""Feed client — Async and sync consumers of a published OpenSearch endpoint.

The client behaves like Salesforce Federated Search does: it fetches the
description document once, fills the Atom URL template and pages through
results starting at the declared ``indexOffset``.

Usage::

    # Async
    async with AsyncFeedClient("http://localhost:8080") as client:
        page = await client.search("scientist")

    # Sync (wraps async client internally)
    client = FeedClient("http://localhost:8080")
    page = client.search("scientist")
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Coroutine, Iterator
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from solrfeed.core.atom import parse_feed
from solrfeed.core.description import DescriptionInfo, parse_description
from solrfeed.core.mapping import MappingProfile
from solrfeed.models.feed import FeedDocument, FeedEntry

_T = TypeVar("_T")

logger = logging.getLogger(__name__)

_TEMPLATE_PARAM = re.compile(r"\{([^}?]+)(\?)?\}")


def fill_template(template: str, values: dict[str, Any]) -> str:
    """Substitute OpenSearch template parameters.

    Keys of ``values`` are parameter names without namespace prefix (e.g.
    ``"searchTerms"``, ``"sortField"``).  Optional parameters with no value
    become empty strings.

    Raises:
        ValueError: A required parameter has no value.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1).split(":")[-1]
        value = values.get(name)
        if value is None:
            if match.group(2):
                return ""
            raise ValueError(f"Missing required template parameter '{name}'")
        return quote(str(value), safe="")

    return _TEMPLATE_PARAM.sub(_replace, template)


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncFeedClient:
    """Async client for an OpenSearch/Atom endpoint.

    Args:
        base_url: Server URL, e.g. ``"http://localhost:8080"``.
        description_path: Path of the description document.
        profile: Mapping profile whose vendor namespace the feed uses.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        description_path: str = "/v1/opensearch.xml",
        profile: MappingProfile | None = None,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._description_path = description_path
        self._profile = profile or MappingProfile()
        self._description: DescriptionInfo | None = None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            **httpx_kwargs,
        )

    async def __aenter__(self) -> AsyncFeedClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ── Description ──

    async def description(self, *, refresh: bool = False) -> DescriptionInfo:
        """Fetch (once) and parse the description document."""
        if self._description is None or refresh:
            resp = await self._client.get(self._description_path)
            resp.raise_for_status()
            self._description = parse_description(resp.content, self._profile)
            logger.debug(
                "Loaded description '%s' (indexOffset=%d)",
                self._description.short_name,
                self._description.index_offset,
            )
        return self._description

    # ── Search ──

    async def search(
        self,
        query: str,
        *,
        start: int | None = None,
        count: int = 10,
        sort: str | None = None,
    ) -> FeedDocument:
        """Fetch one page of results.

        Args:
            query: Search terms.
            start: Index of the first result in the description's base.
                Defaults to the declared ``indexOffset``.
            count: Page size.
            sort: Optional sort clause.

        Returns:
            The parsed feed.
        """
        info = await self.description()
        url = fill_template(
            info.template,
            {
                "searchTerms": query,
                "startIndex": info.index_offset if start is None else start,
                "count": count,
                "sortField": sort,
            },
        )
        resp = await self._client.get(url)
        resp.raise_for_status()
        return parse_feed(resp.content, self._profile)

    async def iter_entries(
        self,
        query: str,
        *,
        count: int = 10,
        limit: int | None = None,
        sort: str | None = None,
    ) -> AsyncIterator[FeedEntry]:
        """Iterate over every entry for ``query``, one page at a time.

        Args:
            query: Search terms.
            count: Page size.
            limit: Stop after this many entries.
            sort: Optional sort clause.
        """
        info = await self.description()
        start = info.index_offset
        yielded = 0
        while True:
            page = await self.search(query, start=start, count=count, sort=sort)
            for entry in page.entries:
                yield entry
                yielded += 1
                if limit is not None and yielded >= limit:
                    return
            start += page.items_per_page
            if start - info.index_offset >= page.total_results or page.items_per_page <= 0:
                return


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client
# ═══════════════════════════════════════════════════════════════════════════════


class FeedClient:
    """Synchronous client wrapping :class:`AsyncFeedClient` via ``asyncio.run``."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 30.0,
        **client_kwargs: Any,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._client_kwargs = client_kwargs

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)

    def _make_client(self) -> AsyncFeedClient:
        return AsyncFeedClient(self._base_url, timeout=self._timeout, **self._client_kwargs)

    def description(self) -> DescriptionInfo:
        """Fetch and parse the description document."""

        async def _call() -> DescriptionInfo:
            async with self._make_client() as c:
                return await c.description()

        return self._run(_call())

    def search(
        self,
        query: str,
        *,
        start: int | None = None,
        count: int = 10,
        sort: str | None = None,
    ) -> FeedDocument:
        """Fetch one page of results."""

        async def _call() -> FeedDocument:
            async with self._make_client() as c:
                return await c.search(query, start=start, count=count, sort=sort)

        return self._run(_call())

    def iter_entries(
        self,
        query: str,
        *,
        count: int = 10,
        limit: int | None = None,
        sort: str | None = None,
    ) -> Iterator[FeedEntry]:
        """Collect every entry for ``query`` and iterate over them."""

        async def _call() -> list[FeedEntry]:
            async with self._make_client() as c:
                return [e async for e in c.iter_entries(query, count=count, limit=limit, sort=sort)]

        return iter(self._run(_call()))

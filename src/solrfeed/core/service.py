"""Feed service — Request orchestration for the feed endpoint.

One request runs:
  Search terms + paging → [Adapter] → SearchResult
                        → [FeedTranslator] → FeedDocument
                        → [AtomRenderer] → feed bytes

The adapter call is the only I/O.  Its failures surface as
``UpstreamQueryError`` and no partial feed is ever rendered for them; record
failures follow the mapping profile's strict/lenient mode.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from solrfeed.adapters.base.exceptions import AdapterError, ConfigurationError
from solrfeed.core.atom import AtomRenderer
from solrfeed.core.description import DescriptionGenerator
from solrfeed.core.exceptions import InvalidRequestError, UpstreamQueryError
from solrfeed.core.translator import FeedTranslator
from solrfeed.models.feed import FeedDocument

if TYPE_CHECKING:
    from solrfeed.adapters.base.adapter import SearchAdapter
    from solrfeed.config.settings import Settings

logger = logging.getLogger(__name__)


class FeedService:
    """Serve OpenSearch feeds and the description document for one adapter.

    Attributes:
        settings: Application configuration.
        adapter: Query executor supplying search results.
        translator: Result-to-feed translator for the configured profile.
        renderer: Atom serialiser for the configured profile.
        description: Description document generator.
    """

    def __init__(self, settings: Settings, adapter: SearchAdapter) -> None:
        self.settings = settings
        self.adapter = adapter
        self.translator = FeedTranslator(settings.mapping)
        self.renderer = AtomRenderer(
            settings.mapping,
            feed_title=settings.feed.title,
            feed_id=settings.feed.feed_id,
        )
        self.description = DescriptionGenerator(settings.description, settings.mapping)

    async def initialize(self) -> None:
        """Initialize the adapter."""
        await self.adapter.initialize()
        logger.info("Feed service initialized with adapter '%s'", self.adapter.name)

    async def shutdown(self) -> None:
        """Shut down the adapter."""
        await self.adapter.shutdown()
        logger.info("Feed service shut down")

    async def search(
        self,
        query: str,
        *,
        start: int = 0,
        count: int = 10,
        sort: str | None = None,
    ) -> FeedDocument:
        """Run one query and translate the result.

        Args:
            query: Search terms.
            start: Zero-based index of the first record.
            count: Page size.
            sort: Optional ``"<field> [asc|desc]"`` clause; the field must be
                advertised as sortable in the description.

        Returns:
            The translated feed document.

        Raises:
            InvalidRequestError: The sort field is not advertised.
            UpstreamQueryError: The adapter failed.
            RecordError: A record failed translation in strict mode.
        """
        sort = sort.strip() if sort else None
        if sort:
            self._check_sort(sort)

        began = time.monotonic()
        try:
            result = await self.adapter.search(query, start=start, rows=count, sort=sort)
        except ConfigurationError as e:
            raise InvalidRequestError(str(e)) from e
        except AdapterError as e:
            logger.error("Upstream query failed for %r: %s", query, e)
            raise UpstreamQueryError(f"Search backend '{self.adapter.name}' failed: {e}") from e

        document = self.translator.translate(result)
        logger.info(
            "Feed for %r: %d entries (%d skipped) of %d at start=%d in %d ms",
            query,
            len(document.entries),
            len(document.skipped),
            document.total_results,
            document.start_index,
            int((time.monotonic() - began) * 1000),
        )
        return document

    async def search_feed(
        self,
        query: str,
        *,
        start: int = 0,
        count: int = 10,
        sort: str | None = None,
    ) -> bytes:
        """Run one query and return the rendered Atom feed."""
        document = await self.search(query, start=start, count=count, sort=sort)
        return self.renderer.render(document)

    def description_document(self) -> bytes:
        """Return the rendered OpenSearch description document."""
        return self.description.render()

    def _check_sort(self, sort: str) -> None:
        field_name = sort.split()[0]
        if field_name not in self.description.sortable_fields():
            raise InvalidRequestError(
                f"Field '{field_name}' is not sortable. "
                f"Sortable fields: {sorted(self.description.sortable_fields())}"
            )

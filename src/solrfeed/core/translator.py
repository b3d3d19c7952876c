"""Result-to-feed translator — Maps a ``SearchResult`` into a ``FeedDocument``.

The translation is pure and deterministic: no I/O, no shared state and no
"generated at" timestamps.  The same result and profile always produce the
same document, so one translator may serve any number of concurrent requests.

Mapping rules:
  - paging metadata echoes the upstream counts, ``start_index`` stays zero based
  - ``title`` and ``summary`` both carry the record subject
  - ``updated`` and the vendor ``emaildate`` both carry the record date verbatim
  - ``receivers`` and ``tags`` are flattened with the profile delimiter

Usage::

    translator = FeedTranslator(MappingProfile(failure_mode="lenient"))
    document = translator.translate(search_result)
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from solrfeed.core.exceptions import MalformedRecordError, MissingRequiredFieldError, RecordError
from solrfeed.core.mapping import FailureMode, MappingProfile
from solrfeed.models.feed import FeedDocument, FeedEntry
from solrfeed.models.record import Record, SearchResult

logger = logging.getLogger(__name__)

# Characters outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

# RFC 3339 date-time as required by Atom: extended format, "T" separator
_RFC3339 = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})")


def sanitize_text(value: str) -> str:
    """Strip characters that cannot appear in an XML 1.0 document."""
    return _XML_ILLEGAL.sub("", value)


class FeedTranslator:
    """Stateless translator parameterised by a ``MappingProfile``.

    Args:
        profile: Mapping configuration.  Defaults to the bit-compatible
            profile (strict mode, no flatten delimiter).
    """

    def __init__(self, profile: MappingProfile | None = None) -> None:
        self.profile = profile or MappingProfile()

    def translate(self, result: SearchResult) -> FeedDocument:
        """Translate one page of search results.

        Args:
            result: The Query Executor's output for one query.

        Returns:
            The translated feed document.

        Raises:
            RecordError: In strict mode, when any record fails translation.
        """
        entries: list[FeedEntry] = []
        skipped: list[int] = []

        for position, record in enumerate(result.records):
            try:
                entries.append(self.translate_record(record, position))
            except RecordError as e:
                if self.profile.failure_mode is FailureMode.STRICT:
                    raise
                skipped.append(position)
                logger.warning(
                    "Skipping record %d (id=%s) for query %r: %s",
                    position,
                    record.id,
                    result.query,
                    e,
                )

        return FeedDocument(
            total_results=result.total_matches,
            start_index=result.start_offset,
            items_per_page=result.page_size,
            search_terms=sanitize_text(result.query),
            entries=tuple(entries),
            skipped=tuple(skipped),
        )

    def translate_record(self, record: Record, position: int = 0) -> FeedEntry:
        """Translate a single record into a feed entry.

        Raises:
            MissingRequiredFieldError: A required field is absent or empty.
            MalformedRecordError: The date is not a timezone-qualified timestamp.
        """
        values = {name: self._scalar(record, name, position) for name in ("id", "subject", "body", "sender", "date")}
        if values["date"]:
            self._check_date(values["date"], position)

        receivers = [sanitize_text(v) for v in record.receivers]
        tags = [sanitize_text(v) for v in record.tags]

        return FeedEntry(
            id=values["id"],
            title=values["subject"],
            summary=values["subject"],
            updated=values["date"],
            record_type=self.profile.record_type,
            sender=values["sender"],
            receivers=self.profile.flatten(receivers),
            subject=values["subject"],
            body=values["body"],
            email_date=values["date"],
            tags=self.profile.flatten(tags),
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _scalar(self, record: Record, name: str, position: int) -> str:
        raw = getattr(record, name)
        value = sanitize_text(raw) if raw is not None else ""
        if raw is not None and value != raw:
            logger.debug("Stripped XML-illegal characters from field %r of record %d", name, position)
        if not value and name in self.profile.required_fields:
            raise MissingRequiredFieldError(
                f"Record {position} is missing required field '{name}'",
                position=position,
                field=name,
            )
        return value

    @staticmethod
    def _check_date(value: str, position: int) -> None:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            raise MalformedRecordError(
                f"Record {position} has an unparseable date {value!r}",
                position=position,
                field="date",
            ) from e
        if parsed.tzinfo is None:
            raise MalformedRecordError(
                f"Record {position} has a date without timezone {value!r}",
                position=position,
                field="date",
            )
        if not _RFC3339.fullmatch(value):
            raise MalformedRecordError(
                f"Record {position} has a date that is not an RFC 3339 timestamp {value!r}",
                position=position,
                field="date",
            )


def translate(result: SearchResult, profile: MappingProfile | None = None) -> FeedDocument:
    """Translate ``result`` with a one-off translator."""
    return FeedTranslator(profile).translate(result)

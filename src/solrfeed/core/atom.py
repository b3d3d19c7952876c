"""Atom renderer — Serialises a ``FeedDocument`` as an OpenSearch/Atom feed.

Output layout::

    <feed xmlns="http://www.w3.org/2005/Atom"
          xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/"
          xmlns:sfdc="http://salesforce.com/2016/federatedsearch/">
      <title>…</title>
      <id>…</id>
      <updated>…</updated>
      <opensearch:totalResults>1</opensearch:totalResults>
      <opensearch:startIndex>0</opensearch:startIndex>
      <opensearch:itemsPerPage>10</opensearch:itemsPerPage>
      <opensearch:Query role="request" searchTerms="…" startIndex="0" count="10"/>
      <entry>
        <title>…</title><id>…</id><updated>…</updated><summary>…</summary>
        <sfdc:recordType>Email</sfdc:recordType>
        <sfdc:sender>…</sfdc:sender> … <sfdc:tags>…</sfdc:tags>
      </entry>
    </feed>

``startIndex`` is written on every page, including the first one; consumers
that fall back to OpenSearch's one-based default would otherwise skip the
first record of each page.
"""

from __future__ import annotations

from datetime import datetime

from lxml import etree

from solrfeed.core.mapping import MappingProfile
from solrfeed.models.feed import FeedDocument, FeedEntry

ATOM_NS = "http://www.w3.org/2005/Atom"
OPENSEARCH_NS = "http://a9.com/-/spec/opensearch/1.1/"
ATOM_MEDIA_TYPE = "application/atom+xml"
EMPTY_FEED_UPDATED = "1970-01-01T00:00:00Z"

# Vendor extension elements, in document order
VENDOR_ELEMENTS: tuple[tuple[str, str], ...] = (
    ("recordType", "record_type"),
    ("sender", "sender"),
    ("receivers", "receivers"),
    ("subject", "subject"),
    ("body", "body"),
    ("emaildate", "email_date"),
    ("tags", "tags"),
)


class AtomRenderer:
    """Render feed documents for one mapping profile.

    Args:
        profile: Supplies the vendor namespace and prefix.
        feed_title: Title written on every feed.
        feed_id: Stable feed identifier (an IRI).
    """

    def __init__(
        self,
        profile: MappingProfile | None = None,
        *,
        feed_title: str = "Search results",
        feed_id: str = "urn:solrfeed:search",
    ) -> None:
        self.profile = profile or MappingProfile()
        self.feed_title = feed_title
        self.feed_id = feed_id
        self._nsmap = {
            None: ATOM_NS,
            "opensearch": OPENSEARCH_NS,
            self.profile.vendor_prefix: self.profile.vendor_namespace,
        }

    def build(self, document: FeedDocument) -> etree._Element:
        """Build the ``<feed>`` element tree."""
        feed = etree.Element(_atom("feed"), nsmap=self._nsmap)
        _sub(feed, _atom("title"), f"{self.feed_title}: {document.search_terms}")
        _sub(feed, _atom("id"), self.feed_id)

        # atom:updated is mandatory; an empty page has no entry date to report
        _sub(feed, _atom("updated"), latest_update(document) or EMPTY_FEED_UPDATED)

        _sub(feed, _os("totalResults"), str(document.total_results))
        _sub(feed, _os("startIndex"), str(document.start_index))
        _sub(feed, _os("itemsPerPage"), str(document.items_per_page))
        etree.SubElement(
            feed,
            _os("Query"),
            role="request",
            searchTerms=document.search_terms,
            startIndex=str(document.start_index),
            count=str(document.items_per_page),
        )

        for entry in document.entries:
            self._entry(feed, entry)
        return feed

    def render(self, document: FeedDocument) -> bytes:
        """Serialise ``document`` as UTF-8 XML bytes with an XML declaration."""
        return etree.tostring(
            self.build(document),
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
        )

    def _entry(self, feed: etree._Element, entry: FeedEntry) -> etree._Element:
        element = etree.SubElement(feed, _atom("entry"))
        _sub(element, _atom("title"), entry.title)
        _sub(element, _atom("id"), entry.id)
        _sub(element, _atom("updated"), entry.updated)
        _sub(element, _atom("summary"), entry.summary)
        ns = self.profile.vendor_namespace
        for tag, attr in VENDOR_ELEMENTS:
            _sub(element, f"{{{ns}}}{tag}", getattr(entry, attr))
        return element


def latest_update(document: FeedDocument) -> str | None:
    """Return the most recent entry timestamp, verbatim, or ``None``."""
    dated = [(datetime.fromisoformat(e.updated), e.updated) for e in document.entries if e.updated]
    if not dated:
        return None
    return max(dated, key=lambda pair: pair[0])[1]


def _atom(tag: str) -> str:
    return f"{{{ATOM_NS}}}{tag}"


def _os(tag: str) -> str:
    return f"{{{OPENSEARCH_NS}}}{tag}"


def _sub(parent: etree._Element, tag: str, text: str) -> etree._Element:
    child = etree.SubElement(parent, tag)
    child.text = text
    return child


def parse_feed(data: bytes, profile: MappingProfile | None = None) -> FeedDocument:
    """Parse feed bytes produced by ``AtomRenderer`` back into a ``FeedDocument``.

    Missing paging elements fall back to OpenSearch defaults, with
    ``startIndex`` defaulting to ``1`` as the OpenSearch 1.1 draft specifies.

    Raises:
        ValueError: If ``data`` is not an Atom feed.
    """
    profile = profile or MappingProfile()
    root = etree.fromstring(data)
    if root.tag != _atom("feed"):
        raise ValueError(f"Not an Atom feed: root element is {root.tag}")

    query = root.find(_os("Query"))
    search_terms = query.get("searchTerms", "") if query is not None else ""
    entries = tuple(_parse_entry(e, profile.vendor_namespace) for e in root.iterfind(_atom("entry")))

    return FeedDocument(
        total_results=int(root.findtext(_os("totalResults"), default=str(len(entries)))),
        start_index=int(root.findtext(_os("startIndex"), default="1")),
        items_per_page=int(root.findtext(_os("itemsPerPage"), default=str(len(entries)))),
        search_terms=search_terms,
        entries=entries,
    )


def _parse_entry(element: etree._Element, vendor_ns: str) -> FeedEntry:
    fields = {
        "id": element.findtext(_atom("id"), default=""),
        "title": element.findtext(_atom("title"), default=""),
        "summary": element.findtext(_atom("summary"), default=""),
        "updated": element.findtext(_atom("updated"), default=""),
    }
    for tag, attr in VENDOR_ELEMENTS:
        fields[attr] = element.findtext(f"{{{vendor_ns}}}{tag}", default="")
    return FeedEntry(**fields)

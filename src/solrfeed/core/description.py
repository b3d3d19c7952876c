"""OpenSearch description generator — Publishes the endpoint's query capabilities.

The description document tells the feed consumer how to build query URLs and
how to interpret paging.  The ``Url`` element declares ``indexOffset="0"``
explicitly: OpenSearch 1.1 defaults to one-based indexes, and a consumer that
assumes the default against a zero-based feed silently drops the first record
of every page.  ``check_paging_contract`` compares a description with a
rendered feed so a mismatch is detected before a consumer sees it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lxml import etree

from solrfeed.config.settings import DescriptionSettings, RecordTypeSpec
from solrfeed.core.atom import ATOM_MEDIA_TYPE, OPENSEARCH_NS, parse_feed
from solrfeed.core.exceptions import PagingIndexMismatchError
from solrfeed.core.mapping import MappingProfile

DESCRIPTION_MEDIA_TYPE = "application/opensearchdescription+xml"

# Zero-based paging shared by the query template and the feed's startIndex
INDEX_OFFSET = 0
OPENSEARCH_DEFAULT_INDEX_OFFSET = 1

SEARCH_PATH = "/v1/search"


@dataclass(frozen=True)
class DescriptionInfo:
    """The parts of a description document a feed consumer needs."""

    template: str
    index_offset: int
    short_name: str = ""
    record_types: dict[str, list[str]] = field(default_factory=dict)
    max_results: int | None = None


class DescriptionGenerator:
    """Build the OpenSearch description document for one deployment.

    Args:
        settings: Description metadata (public URL, names, sortable fields).
        profile: Mapping profile; supplies the vendor namespace and the
            default record type.
    """

    def __init__(self, settings: DescriptionSettings, profile: MappingProfile | None = None) -> None:
        self.settings = settings
        self.profile = profile or MappingProfile()

    @property
    def template(self) -> str:
        """Query URL template with searchTerms, startIndex and count placeholders."""
        prefix = self.profile.vendor_prefix
        return (
            f"{self.settings.public_url}{SEARCH_PATH}"
            f"?q={{searchTerms}}&start={{startIndex?}}&count={{count?}}&sort={{{prefix}:sortField?}}"
        )

    @property
    def record_types(self) -> list[RecordTypeSpec]:
        if self.settings.record_types:
            return list(self.settings.record_types)
        return [RecordTypeSpec(name=self.profile.record_type, sortable_fields=list(self.settings.sortable_fields))]

    def sortable_fields(self) -> set[str]:
        """All sortable field names across advertised record types."""
        return {name for record_type in self.record_types for name in record_type.sortable_fields}

    def build(self) -> etree._Element:
        """Build the ``<OpenSearchDescription>`` element tree."""
        vendor = self.profile.vendor_namespace
        root = etree.Element(
            _os("OpenSearchDescription"),
            nsmap={None: OPENSEARCH_NS, self.profile.vendor_prefix: vendor},
        )
        _sub(root, _os("ShortName"), self.settings.short_name)
        _sub(root, _os("Description"), self.settings.description)
        if self.settings.contact:
            _sub(root, _os("Contact"), self.settings.contact)

        etree.SubElement(
            root,
            _os("Url"),
            type=ATOM_MEDIA_TYPE,
            template=self.template,
            indexOffset=str(INDEX_OFFSET),
        )

        record_types = etree.SubElement(root, f"{{{vendor}}}RecordTypes")
        for record_type in self.record_types:
            rt = etree.SubElement(
                record_types,
                f"{{{vendor}}}RecordType",
                name=record_type.name,
                label=record_type.label or record_type.name,
            )
            for sortable in record_type.sortable_fields:
                etree.SubElement(rt, f"{{{vendor}}}SortableField", name=sortable)

        _sub(root, f"{{{vendor}}}MaxResults", str(self.settings.max_results))
        _sub(root, _os("InputEncoding"), self.settings.input_encoding)
        _sub(root, _os("OutputEncoding"), self.settings.output_encoding)
        return root

    def render(self) -> bytes:
        """Serialise the description document as XML bytes."""
        return etree.tostring(
            self.build(),
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
        )


def parse_description(data: bytes, profile: MappingProfile | None = None) -> DescriptionInfo:
    """Extract the Atom query template and paging base from a description.

    Raises:
        ValueError: If the document has no Atom ``Url`` element.
    """
    profile = profile or MappingProfile()
    vendor = profile.vendor_namespace
    root = etree.fromstring(data)

    url = next(
        (u for u in root.iterfind(_os("Url")) if u.get("type", "").startswith(ATOM_MEDIA_TYPE)),
        None,
    )
    if url is None or not url.get("template"):
        raise ValueError("Description has no Atom query template")

    record_types = {
        rt.get("name", ""): [f.get("name", "") for f in rt.iterfind(f"{{{vendor}}}SortableField")]
        for rt in root.iterfind(f"{{{vendor}}}RecordTypes/{{{vendor}}}RecordType")
    }
    max_results = root.findtext(f"{{{vendor}}}MaxResults")

    return DescriptionInfo(
        template=url.get("template", ""),
        index_offset=int(url.get("indexOffset", str(OPENSEARCH_DEFAULT_INDEX_OFFSET))),
        short_name=root.findtext(_os("ShortName"), default=""),
        record_types=record_types,
        max_results=int(max_results) if max_results else None,
    )


def check_paging_contract(
    description: bytes,
    feed: bytes,
    *,
    page: int = 0,
    profile: MappingProfile | None = None,
) -> None:
    """Verify that ``feed`` starts where ``description`` says page ``page`` starts.

    Args:
        description: Rendered description document.
        feed: Rendered feed for the ``page``-th page of some query.
        page: Zero-based page number the feed was requested for.
        profile: Mapping profile used to render both documents.

    Raises:
        PagingIndexMismatchError: The feed's startIndex and the description's
            indexOffset use different bases.
    """
    info = parse_description(description, profile)
    document = parse_feed(feed, profile)
    expected = info.index_offset + page * document.items_per_page
    if document.start_index != expected:
        raise PagingIndexMismatchError(
            f"Feed startIndex {document.start_index} does not match page {page} "
            f"under indexOffset {info.index_offset} (expected {expected})"
        )


def _os(tag: str) -> str:
    return f"{{{OPENSEARCH_NS}}}{tag}"


def _sub(parent: etree._Element, tag: str, text: str) -> etree._Element:
    child = etree.SubElement(parent, tag)
    child.text = text
    return child

"""Tests for the Atom feed renderer."""

from __future__ import annotations

import pytest
from lxml import etree

from solrfeed.core.atom import (
    ATOM_NS,
    EMPTY_FEED_UPDATED,
    OPENSEARCH_NS,
    AtomRenderer,
    latest_update,
    parse_feed,
)
from solrfeed.core.mapping import MappingProfile
from solrfeed.core.translator import FeedTranslator
from solrfeed.models.feed import FeedDocument
from solrfeed.models.record import SearchResult

SFDC_NS = "http://salesforce.com/2016/federatedsearch/"
NS = {"a": ATOM_NS, "os": OPENSEARCH_NS, "sfdc": SFDC_NS}


@pytest.fixture
def renderer() -> AtomRenderer:
    return AtomRenderer(feed_title="Email search", feed_id="urn:test:feed")


@pytest.fixture
def scientist_feed(renderer: AtomRenderer, scientist_result: SearchResult) -> etree._Element:
    document = FeedTranslator().translate(scientist_result)
    return etree.fromstring(renderer.render(document))


class TestFeedStructure:
    def test_xml_declaration_and_encoding(self, renderer: AtomRenderer, scientist_result: SearchResult) -> None:
        data = renderer.render(FeedTranslator().translate(scientist_result))
        assert data.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")

    def test_root_and_namespaces(self, scientist_feed: etree._Element) -> None:
        assert scientist_feed.tag == f"{{{ATOM_NS}}}feed"
        assert scientist_feed.nsmap[None] == ATOM_NS
        assert scientist_feed.nsmap["opensearch"] == OPENSEARCH_NS
        assert scientist_feed.nsmap["sfdc"] == SFDC_NS

    def test_feed_title_and_id(self, scientist_feed: etree._Element) -> None:
        assert scientist_feed.findtext("a:title", namespaces=NS) == "Email search: scientist"
        assert scientist_feed.findtext("a:id", namespaces=NS) == "urn:test:feed"

    def test_opensearch_paging_elements(self, scientist_feed: etree._Element) -> None:
        assert scientist_feed.findtext("os:totalResults", namespaces=NS) == "1"
        assert scientist_feed.findtext("os:startIndex", namespaces=NS) == "0"
        assert scientist_feed.findtext("os:itemsPerPage", namespaces=NS) == "10"

    def test_query_echo(self, scientist_feed: etree._Element) -> None:
        query = scientist_feed.find("os:Query", namespaces=NS)
        assert query is not None
        assert query.get("role") == "request"
        assert query.get("searchTerms") == "scientist"
        assert query.get("startIndex") == "0"
        assert query.get("count") == "10"

    def test_start_index_present_for_empty_first_page(self, renderer: AtomRenderer) -> None:
        document = FeedDocument(total_results=0, start_index=0, items_per_page=10, search_terms="none")
        root = etree.fromstring(renderer.render(document))
        assert root.findtext("os:startIndex", namespaces=NS) == "0"
        assert root.findtext("a:updated", namespaces=NS) == EMPTY_FEED_UPDATED
        assert root.findall("a:entry", namespaces=NS) == []

    def test_feed_updated_is_latest_entry(self, renderer: AtomRenderer, record_factory) -> None:
        records = [
            record_factory(1, date="2024-01-01T10:00:00+02:00"),
            record_factory(2, date="2024-01-01T09:30:00Z"),
        ]
        document = FeedTranslator().translate(
            SearchResult(total_matches=2, page_size=10, query="q", records=records)
        )
        # 09:30Z is later than 08:00Z
        assert latest_update(document) == "2024-01-01T09:30:00Z"
        root = etree.fromstring(renderer.render(document))
        assert root.findtext("a:updated", namespaces=NS) == "2024-01-01T09:30:00Z"


class TestEntryElements:
    def test_standard_elements(self, scientist_feed: etree._Element, scientist_result: SearchResult) -> None:
        record = scientist_result.records[0]
        entry = scientist_feed.find("a:entry", namespaces=NS)
        assert entry is not None
        assert entry.findtext("a:title", namespaces=NS) == record.subject
        assert entry.findtext("a:summary", namespaces=NS) == record.subject
        assert entry.findtext("a:id", namespaces=NS) == record.id
        assert entry.findtext("a:updated", namespaces=NS) == "2024-09-14T23:16:18Z"

    def test_vendor_elements(self, scientist_feed: etree._Element, scientist_result: SearchResult) -> None:
        record = scientist_result.records[0]
        entry = scientist_feed.find("a:entry", namespaces=NS)
        assert entry.findtext("sfdc:recordType", namespaces=NS) == "Email"
        assert entry.findtext("sfdc:sender", namespaces=NS) == "james70@example.net"
        assert entry.findtext("sfdc:subject", namespaces=NS) == record.subject
        assert entry.findtext("sfdc:body", namespaces=NS) == record.body
        assert entry.findtext("sfdc:emaildate", namespaces=NS) == "2024-09-14T23:16:18Z"
        assert entry.findtext("sfdc:receivers", namespaces=NS) == "".join(record.receivers)
        assert entry.findtext("sfdc:tags", namespaces=NS) == "".join(record.tags)

    def test_vendor_element_order(self, scientist_feed: etree._Element) -> None:
        entry = scientist_feed.find("a:entry", namespaces=NS)
        vendor = [etree.QName(child).localname for child in entry if etree.QName(child).namespace == SFDC_NS]
        assert vendor == ["recordType", "sender", "receivers", "subject", "body", "emaildate", "tags"]

    def test_entries_carry_no_extra_namespace_declarations(self, renderer: AtomRenderer, scientist_result) -> None:
        data = renderer.render(FeedTranslator().translate(scientist_result))
        assert b"ns0" not in data
        assert data.count(b"xmlns:sfdc=") == 1

    def test_special_characters_escaped(self, renderer: AtomRenderer, record_factory) -> None:
        record = record_factory(1, subject="Q&A <draft>", body='"quoted" & done')
        document = FeedTranslator().translate(
            SearchResult(total_matches=1, page_size=1, query="a&b", records=[record])
        )
        data = renderer.render(document)
        assert b"Q&amp;A &lt;draft&gt;" in data
        root = etree.fromstring(data)
        assert root.find("os:Query", namespaces=NS).get("searchTerms") == "a&b"

    def test_custom_vendor_namespace(self, scientist_result: SearchResult) -> None:
        profile = MappingProfile(vendor_prefix="acme", vendor_namespace="urn:acme:search")
        renderer = AtomRenderer(profile)
        root = etree.fromstring(renderer.render(FeedTranslator(profile).translate(scientist_result)))
        assert root.nsmap["acme"] == "urn:acme:search"
        assert root.findtext("a:entry/v:sender", namespaces={**NS, "v": "urn:acme:search"}) == "james70@example.net"


class TestParseFeed:
    def test_parse_rendered_feed(self, renderer: AtomRenderer, scientist_result: SearchResult) -> None:
        document = FeedTranslator().translate(scientist_result)
        assert parse_feed(renderer.render(document)) == document

    def test_missing_start_index_defaults_to_one(self) -> None:
        data = (
            f'<feed xmlns="{ATOM_NS}" xmlns:opensearch="{OPENSEARCH_NS}">'
            "<opensearch:totalResults>3</opensearch:totalResults></feed>"
        ).encode()
        assert parse_feed(data).start_index == 1

    def test_rejects_non_feed(self) -> None:
        with pytest.raises(ValueError, match="Not an Atom feed"):
            parse_feed(b"<rss/>")

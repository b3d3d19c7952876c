"""Query executor layer — Connectors that run searches and return ``SearchResult`` pages.

Built-in adapters:
  - solr: Apache Solr v8+ (edismax full-text search over the JSON Request API)

Implement ``SearchAdapter`` to publish another backend through the same feed.
"""

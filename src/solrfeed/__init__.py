"""solrfeed — Publish Apache Solr search results as OpenSearch/Atom feeds."""

__version__ = "0.1.0"

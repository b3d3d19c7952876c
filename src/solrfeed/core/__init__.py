"""Core translation layer — Solr results to OpenSearch/Atom feeds."""

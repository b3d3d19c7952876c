"""solrfeed feed client — Consume an OpenSearch description and its Atom feeds.

Quick start::

    from solrfeed.client import FeedClient

    client = FeedClient("http://localhost:8080")
    page = client.search("scientist")
    for entry in client.iter_entries("scientist", count=50):
        print(entry.id, entry.title)
"""

from solrfeed.client.client import AsyncFeedClient, FeedClient, fill_template

__all__ = ["AsyncFeedClient", "FeedClient", "fill_template"]

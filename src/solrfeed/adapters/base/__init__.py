"""Base adapter interface — Abstract class for query executors."""

from solrfeed.adapters.base.adapter import AdapterHealth, SearchAdapter

__all__ = ["AdapterHealth", "SearchAdapter"]

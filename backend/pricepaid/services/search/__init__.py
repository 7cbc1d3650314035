"""Search service modules."""

from pricepaid.services.search.backend import SearchBackend, SearchResult
from pricepaid.services.search.elasticsearch_backend import ElasticsearchSearchBackend
from pricepaid.services.search.query_builder import QueryPlan

__all__ = ["SearchBackend", "SearchResult", "ElasticsearchSearchBackend", "QueryPlan"]

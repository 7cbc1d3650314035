"""
Abstract base class for search backends.

The orchestration layer only deals in ``QueryPlan`` objects and raw result
pages, so the concrete search engine can be swapped without touching it.
"""

from abc import ABC, abstractmethod
from typing import Any, TypedDict

from pricepaid.services.search.query_builder import QueryPlan
from pricepaid.services.search.schema import SearchDocument


class SearchResult(TypedDict):
    """One page of raw backend results."""
    documents: list[SearchDocument]
    facets: dict[str, list[Any]]
    count: int | None


class SearchBackend(ABC):
    """Abstract base class for search backends."""
    
    @abstractmethod
    async def search(self, plan: QueryPlan) -> SearchResult:
        """
        Execute a query plan.
        
        Documents, facet buckets and count all come from the same execution.
        
        Args:
            plan: Filters, sort, facets, free text and paging to apply
            
        Returns:
            SearchResult with documents, facet bucket values per field and
            the total count (None when not computed)
        """
        pass
    
    @abstractmethod
    async def suggest(self, text: str, top: int) -> list[str]:
        """
        Autocomplete suggestions for a text prefix over the suggester fields.
        
        Args:
            text: Prefix typed by the user
            top: Maximum number of suggestions
        """
        pass
    
    @abstractmethod
    async def upload_documents(self, documents: list[SearchDocument]) -> None:
        """
        Insert or replace documents by identifier as one batch.
        
        Args:
            documents: Documents to upsert
        """
        pass
    
    @abstractmethod
    async def recreate_index(self) -> None:
        """Drop the index if it exists and create it from the document schema."""
        pass

"""Property search orchestration: geocode, build the query, run it, project results."""

import logging

from pricepaid.models.property import (
    MAX_SUGGESTIONS,
    FindGenericRequest,
    FindNearestRequest,
    SearchResponse,
    SuggestionResponse,
    SuggestRequest,
)
from pricepaid.services.geocoding import Geocoder
from pricepaid.services.search.backend import SearchBackend
from pricepaid.services.search.projector import empty_response, to_search_response
from pricepaid.services.search.query_builder import build_generic_query, build_nearest_query
from pricepaid.utils.normalization import split_postcode

logger = logging.getLogger(__name__)


class PropertySearchService:
    """Service for property search business logic."""
    
    def __init__(self, backend: SearchBackend, geocoder: Geocoder):
        self.backend = backend
        self.geocoder = geocoder
    
    async def find_generic(self, request: FindGenericRequest) -> SearchResponse:
        """Free text and filter search."""
        plan = build_generic_query(request)
        result = await self.backend.search(plan)
        return to_search_response(result, request.page)
    
    async def find_by_postcode(self, request: FindNearestRequest) -> SearchResponse:
        """
        Search within ``max_distance`` km of a postcode.
        
        A postcode that does not split into outward and inward codes, or that
        cannot be geocoded, yields an empty page (no results, no facets, no
        count). This is a user-input condition and is not reported as an error.
        """
        parts = split_postcode(request.postcode)
        if parts is None:
            logger.info(f"Postcode {request.postcode!r} is not in 'OUTWARD INWARD' form, returning no results")
            return empty_response(request.page)
        
        outward, inward = parts
        location = await self.geocoder.try_get_geo(outward, inward)
        if location is None:
            logger.info(f"No coordinates for postcode {outward} {inward}, returning no results")
            return empty_response(request.page)
        
        plan = build_nearest_query(request, location)
        result = await self.backend.search(plan)
        return to_search_response(result, request.page)
    
    async def suggest(self, request: SuggestRequest) -> SuggestionResponse:
        """Distinct suggestions in backend order, at most ten."""
        results = await self.backend.suggest(request.text, MAX_SUGGESTIONS)
        suggestions = list(dict.fromkeys(results))[:MAX_SUGGESTIONS]
        return SuggestionResponse(suggestions=suggestions)

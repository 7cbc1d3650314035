"""Property search API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pricepaid.core.config import get_settings
from pricepaid.core.database import get_db
from pricepaid.core.elasticsearch import SearchClientRegistry
from pricepaid.models.property import (
    FindGenericRequest,
    FindNearestRequest,
    PropertyFilter,
    PropertySort,
    SearchResponse,
    SortDirection,
    SuggestionResponse,
    SuggestRequest,
)
from pricepaid.services.geocoding import DatabaseGeocoder
from pricepaid.services.property_search_service import PropertySearchService
from pricepaid.services.search.elasticsearch_backend import ElasticsearchSearchBackend
from pricepaid.services.search.errors import DataIntegrityError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["properties"])


def get_client_registry(request: Request) -> SearchClientRegistry:
    """The registry owned by the running application."""
    return request.app.state.search_clients


async def get_search_service(
    registry: SearchClientRegistry = Depends(get_client_registry),
    db: AsyncSession = Depends(get_db),
) -> PropertySearchService:
    client = await registry.get(get_settings().search_connection)
    return PropertySearchService(ElasticsearchSearchBackend(client), DatabaseGeocoder(db))


def get_filter(
    town: str | None = Query(None, description="Filter by town/city"),
    county: str | None = Query(None, description="Filter by county"),
    locality: str | None = Query(None, description="Filter by locality"),
    district: str | None = Query(None, description="Filter by district"),
) -> PropertyFilter:
    return PropertyFilter(town=town, county=county, locality=locality, district=district)


def get_sort(
    sort: str | None = Query(None, description="Sort column: street, town, postcode, date or price"),
    direction: SortDirection | None = Query(None, description="Sort direction (asc or desc)"),
) -> PropertySort:
    return PropertySort(sort_column=sort, sort_direction=direction)


@router.get("/search", response_model=SearchResponse)
async def find_properties(
    text: str | None = Query(None, description="Free text (prefix matched)"),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    property_filter: PropertyFilter = Depends(get_filter),
    sort: PropertySort = Depends(get_sort),
    service: PropertySearchService = Depends(get_search_service),
) -> SearchResponse:
    """Search transactions by free text and filters."""
    request = FindGenericRequest(text=text, filter=property_filter, sort=sort, page=page)
    try:
        return await service.find_generic(request)
    except DataIntegrityError as e:
        logger.error(f"Search index is inconsistent: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception(f"Property search failed: {e}")
        raise HTTPException(status_code=500, detail=f"Search failed: {str(e)}")


@router.get("/postcode/{postcode}", response_model=SearchResponse)
async def find_properties_near_postcode(
    postcode: str = Path(..., description="Postcode, e.g. 'SW1A 1AA'"),
    distance: int = Query(1, ge=0, le=50, description="Radius in kilometres"),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    property_filter: PropertyFilter = Depends(get_filter),
    sort: PropertySort = Depends(get_sort),
    service: PropertySearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Search transactions within a radius of a postcode.
    
    Unknown or malformed postcodes give an empty page rather than an error.
    """
    request = FindNearestRequest(
        postcode=postcode, max_distance=distance, filter=property_filter, sort=sort, page=page
    )
    try:
        return await service.find_by_postcode(request)
    except DataIntegrityError as e:
        logger.error(f"Search index is inconsistent: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception(f"Postcode search failed: {e}")
        raise HTTPException(status_code=500, detail=f"Search failed: {str(e)}")


@router.get("/suggest", response_model=SuggestionResponse)
async def suggest(
    text: str = Query(..., min_length=1, description="Text typed so far"),
    service: PropertySearchService = Depends(get_search_service),
) -> SuggestionResponse:
    """Autocomplete over streets and place names."""
    try:
        return await service.suggest(SuggestRequest(text=text))
    except Exception as e:
        logger.exception(f"Suggestion lookup failed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch suggestions: {str(e)}")

"""Tests for property search API endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock

from main import app
from pricepaid.api.properties import get_search_service
from pricepaid.models.property import Facets, SearchResponse, SortDirection, SuggestionResponse
from pricepaid.services.property_search_service import PropertySearchService
from pricepaid.services.search.errors import MalformedRecord


@pytest.fixture
def mock_search_service():
    """Create a mock search service and install it as the dependency."""
    service = AsyncMock(spec=PropertySearchService)
    service.find_generic.return_value = SearchResponse(results=[], total_transactions=0, facets=Facets(), page=0)
    service.find_by_postcode.return_value = SearchResponse(results=[], total_transactions=None, page=0)
    service.suggest.return_value = SuggestionResponse(suggestions=["OAKHAM"])
    app.dependency_overrides[get_search_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client():
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestFindProperties:
    """Tests for GET /properties/search."""
    
    @pytest.mark.asyncio
    async def test_search_with_filters_and_sort(self, client, mock_search_service):
        response = await client.get(
            "/properties/search?text=Oak&town=london&county=greater%20london&sort=price&direction=desc&page=2"
        )
        
        assert response.status_code == 200
        request = mock_search_service.find_generic.call_args.args[0]
        assert request.text == "Oak"
        assert request.filter.town == "london"
        assert request.filter.county == "greater london"
        assert request.sort.sort_column == "price"
        assert request.sort.sort_direction == SortDirection.DESCENDING
        assert request.page == 2
    
    @pytest.mark.asyncio
    async def test_response_shape(self, client, mock_search_service):
        response = await client.get("/properties/search")
        data = response.json()
        assert data["results"] == []
        assert set(data["facets"]) == {"towns", "localities", "districts", "counties", "prices"}
    
    @pytest.mark.asyncio
    async def test_negative_page_rejected(self, client, mock_search_service):
        response = await client.get("/properties/search?page=-1")
        assert response.status_code == 422
    
    @pytest.mark.asyncio
    async def test_integrity_error_is_server_error(self, client, mock_search_service):
        mock_search_service.find_generic.side_effect = MalformedRecord("transaction_id", "x", "not a valid UUID")
        response = await client.get("/properties/search?text=Oak")
        assert response.status_code == 500
    
    @pytest.mark.asyncio
    async def test_backend_outage_is_server_error(self, client, mock_search_service):
        mock_search_service.find_generic.side_effect = ConnectionError("refused")
        response = await client.get("/properties/search")
        assert response.status_code == 500


class TestFindNearPostcode:
    """Tests for GET /properties/postcode/{postcode}."""
    
    @pytest.mark.asyncio
    async def test_postcode_request(self, client, mock_search_service):
        response = await client.get("/properties/postcode/SW1A%202AA?distance=3&district=westminster")
        
        assert response.status_code == 200
        request = mock_search_service.find_by_postcode.call_args.args[0]
        assert request.postcode == "SW1A 2AA"
        assert request.max_distance == 3
        assert request.filter.district == "westminster"
    
    @pytest.mark.asyncio
    async def test_malformed_postcode_is_not_an_error(self, client, mock_search_service):
        response = await client.get("/properties/postcode/ZZ9")
        assert response.status_code == 200
        assert response.json()["results"] == []


class TestSuggest:
    """Tests for GET /properties/suggest."""
    
    @pytest.mark.asyncio
    async def test_suggest(self, client, mock_search_service):
        response = await client.get("/properties/suggest?text=Oak")
        assert response.status_code == 200
        assert response.json() == {"suggestions": ["OAKHAM"]}
    
    @pytest.mark.asyncio
    async def test_text_required(self, client, mock_search_service):
        response = await client.get("/properties/suggest")
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}

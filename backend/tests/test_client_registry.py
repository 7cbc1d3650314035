"""Tests for the Elasticsearch client registry."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from pricepaid.core.config import SearchConnection
from pricepaid.core.elasticsearch import SearchClientRegistry


@pytest.fixture
def mock_es_class():
    with patch("pricepaid.core.elasticsearch.AsyncElasticsearch") as mock:
        mock.side_effect = lambda **kwargs: MagicMock(close=AsyncMock())
        yield mock


class TestSearchClientRegistry:
    """Tests for lazy, cached client creation."""
    
    @pytest.mark.asyncio
    async def test_same_connection_reuses_client(self, mock_es_class):
        registry = SearchClientRegistry(request_timeout=5)
        connection = SearchConnection(url="http://search:9200", api_key="secret")
        
        first = await registry.get(connection)
        second = await registry.get(SearchConnection(url="http://search:9200", api_key="secret"))
        
        assert first is second
        mock_es_class.assert_called_once_with(hosts=["http://search:9200"], api_key="secret", request_timeout=5)
    
    @pytest.mark.asyncio
    async def test_concurrent_first_use_creates_one_client(self, mock_es_class):
        registry = SearchClientRegistry(request_timeout=5)
        connection = SearchConnection(url="http://search:9200")
        
        clients = await asyncio.gather(*(registry.get(connection) for _ in range(20)))
        
        assert mock_es_class.call_count == 1
        assert all(client is clients[0] for client in clients)
    
    @pytest.mark.asyncio
    async def test_distinct_connections_get_distinct_clients(self, mock_es_class):
        registry = SearchClientRegistry(request_timeout=5)
        a = await registry.get(SearchConnection(url="http://a:9200"))
        b = await registry.get(SearchConnection(url="http://b:9200"))
        assert a is not b
        assert len(registry) == 2
    
    @pytest.mark.asyncio
    async def test_close_closes_every_client(self, mock_es_class):
        registry = SearchClientRegistry(request_timeout=5)
        a = await registry.get(SearchConnection(url="http://a:9200"))
        b = await registry.get(SearchConnection(url="http://b:9200"))
        
        await registry.close()
        
        a.close.assert_awaited_once()
        b.close.assert_awaited_once()
        assert len(registry) == 0

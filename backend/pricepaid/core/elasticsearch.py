"""Elasticsearch client initialization and management."""

import asyncio
import logging

from elasticsearch import AsyncElasticsearch

from pricepaid.core.config import SearchConnection, get_settings

logger = logging.getLogger(__name__)


class SearchClientRegistry:
    """
    Lazily creates and caches one Elasticsearch client per connection.
    
    Concurrent first use of the same connection yields a single client;
    the lock only guards the lookup-or-create step.
    """
    
    def __init__(self, request_timeout: int | None = None):
        self.request_timeout = request_timeout or get_settings().elasticsearch_request_timeout
        self._clients: dict[SearchConnection, AsyncElasticsearch] = {}
        self._lock = asyncio.Lock()
    
    def _create_client(self, connection: SearchConnection) -> AsyncElasticsearch:
        logger.info(f"Creating Elasticsearch client for {connection.url}")
        return AsyncElasticsearch(
            hosts=[connection.url],
            api_key=connection.api_key,
            request_timeout=self.request_timeout,
        )
    
    async def get(self, connection: SearchConnection) -> AsyncElasticsearch:
        """
        Get or create the client for a connection.
        
        Args:
            connection: Service URL and credential
            
        Returns:
            AsyncElasticsearch client shared by every caller of this connection
        """
        async with self._lock:
            client = self._clients.get(connection)
            if client is None:
                client = self._create_client(connection)
                self._clients[connection] = client
            return client
    
    def __len__(self) -> int:
        return len(self._clients)
    
    async def close(self) -> None:
        """Close every cached client connection."""
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            await client.close()

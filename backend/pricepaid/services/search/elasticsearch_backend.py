"""
Elasticsearch search backend implementation.

Implements the SearchBackend interface on Elasticsearch: query plans become
bool queries with term/geo_distance filters, terms aggregations provide the
facets and a completion field serves suggestions.
"""

import logging
from typing import Any

from elasticsearch import AsyncElasticsearch
from elasticsearch.helpers import async_bulk

from pricepaid.core.config import get_settings
from pricepaid.services.search.backend import SearchBackend, SearchResult
from pricepaid.services.search.query_builder import QueryPlan
from pricepaid.services.search.schema import (
    FIELDS_BY_NAME,
    KEY_FIELD,
    SEARCH_FIELDS,
    SEARCHABLE_FIELDS,
    SUGGESTER_FIELDS,
    SUGGESTER_NAME,
    SearchDocument,
)

logger = logging.getLogger(__name__)

SUGGEST_FIELD = "suggest"
RAW_SUBFIELD = "raw"
FACET_BUCKET_SIZE = 10


def field_path(name: str) -> str:
    """Path used to filter, sort or facet on a field (keyword sub-field for text)."""
    if FIELDS_BY_NAME[name].searchable:
        return f"{name}.{RAW_SUBFIELD}"
    return name


def build_mapping() -> dict[str, Any]:
    """Index mapping derived from the document schema."""
    properties: dict[str, Any] = {}
    for field in SEARCH_FIELDS:
        if field.searchable:
            properties[field.name] = {
                "type": "text",
                "analyzer": "standard",
                "fields": {
                    RAW_SUBFIELD: {"type": "keyword"}  # For filtering, sorting and facets
                },
            }
        elif field.type == "date":
            properties[field.name] = {"type": "date", "format": "strict_date"}
        else:
            properties[field.name] = {"type": field.type}
    properties[SUGGEST_FIELD] = {"type": "completion"}
    return {"properties": properties}


def build_search_params(plan: QueryPlan) -> dict[str, Any]:
    """Translate a query plan into keyword arguments for ``AsyncElasticsearch.search``."""
    filter_clauses: list[dict[str, Any]] = [
        {"term": {field_path(f.field): f.value}} for f in plan.filters
    ]
    if plan.geo is not None:
        filter_clauses.append({
            "geo_distance": {
                "distance": f"{plan.geo.max_distance}km",
                plan.geo.field: {"lat": plan.geo.location.lat, "lon": plan.geo.location.long},
            }
        })
    
    if plan.search_text:
        must = [{
            "simple_query_string": {
                "query": plan.search_text,
                "fields": list(SEARCHABLE_FIELDS),
                "default_operator": "or",
            }
        }]
    else:
        must = [{"match_all": {}}]
    
    params: dict[str, Any] = {
        "query": {"bool": {"must": must, "filter": filter_clauses}},
        "from_": plan.skip,
        "size": plan.top,
        "track_total_hits": plan.include_total_count,
    }
    if plan.facets:
        params["aggs"] = {
            name: {"terms": {"field": field_path(name), "size": FACET_BUCKET_SIZE}}
            for name in plan.facets
        }
    if plan.order_by:
        params["sort"] = [
            {field_path(s.field): {"order": s.direction.value}} for s in plan.order_by
        ]
    return params


def to_bulk_action(index_name: str, document: SearchDocument) -> dict[str, Any]:
    """Index (replace-by-id) action with the suggester inputs attached."""
    source = dict(document)
    source[SUGGEST_FIELD] = [document[name] for name in SUGGESTER_FIELDS if document.get(name)]
    return {
        "_op_type": "index",
        "_index": index_name,
        "_id": document[KEY_FIELD],
        "_source": source,
    }


class ElasticsearchSearchBackend(SearchBackend):
    """Elasticsearch implementation of SearchBackend."""
    
    def __init__(self, client: AsyncElasticsearch, index_name: str | None = None):
        """
        Initialize Elasticsearch backend.
        
        Args:
            client: Elasticsearch client, usually from SearchClientRegistry
            index_name: Index holding property documents (defaults to settings)
        """
        self.client = client
        self.index_name = index_name or get_settings().elasticsearch_index_properties
    
    async def recreate_index(self) -> None:
        """Delete the properties index if present and create it again."""
        if await self.client.indices.exists(index=self.index_name):
            logger.info(f"Deleting index {self.index_name}")
            await self.client.indices.delete(index=self.index_name)
        await self.client.indices.create(
            index=self.index_name,
            mappings=build_mapping(),
            settings={
                "number_of_shards": 1,
                "number_of_replicas": 0,  # Single node setup
            },
        )
        logger.info(f"Created index {self.index_name}")
    
    async def search(self, plan: QueryPlan) -> SearchResult:
        """Run one search; documents, facets and count share a single request."""
        response = await self.client.search(index=self.index_name, **build_search_params(plan))
        
        hits = response["hits"]
        documents = [hit["_source"] for hit in hits["hits"]]
        
        facets: dict[str, list[Any]] = {}
        if plan.facets:
            aggregations = response["aggregations"]
            for name in plan.facets:
                buckets = aggregations.get(name, {}).get("buckets", [])
                facets[name] = [bucket["key"] for bucket in buckets]
        
        count = None
        if plan.include_total_count and "total" in hits:
            count = hits["total"]["value"]
        
        return SearchResult(documents=documents, facets=facets, count=count)
    
    async def suggest(self, text: str, top: int) -> list[str]:
        """Completion suggestions over street, locality, town, district and county."""
        response = await self.client.search(
            index=self.index_name,
            size=0,
            suggest={
                SUGGESTER_NAME: {
                    "prefix": text,
                    "completion": {"field": SUGGEST_FIELD, "size": top, "skip_duplicates": True},
                }
            },
        )
        suggestions = []
        for entry in response["suggest"][SUGGESTER_NAME]:
            suggestions.extend(option["text"] for option in entry["options"])
        return suggestions
    
    async def upload_documents(self, documents: list[SearchDocument]) -> None:
        """Bulk upsert documents keyed by transaction id."""
        if not documents:
            return
        
        actions = [to_bulk_action(self.index_name, document) for document in documents]
        success, errors = await async_bulk(self.client, actions)
        logger.info(f"Indexed {success} documents into {self.index_name}")
        if errors:
            logger.warning(f"{len(errors)} documents failed to index")
    
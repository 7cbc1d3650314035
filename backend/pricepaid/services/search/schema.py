"""
Shape of one indexed property sale document.

Each field declares which query features the index supports on it. The
Elasticsearch mapping, the document key, the suggester sources and the sets
of filterable, sortable and facetable fields are derived from this table;
the query builder refuses predicates, orderings and facets on fields that do
not support them.
"""

from dataclasses import dataclass
from typing import TypedDict

TRANSACTION_ID = "transaction_id"
PRICE = "price"
DATE_OF_TRANSFER = "date_of_transfer"
POSTCODE = "postcode"
PROPERTY_TYPE = "property_type"
BUILD = "build"
CONTRACT = "contract"
BUILDING = "building"
STREET = "street"
LOCALITY = "locality"
TOWN = "town"
DISTRICT = "district"
COUNTY = "county"
GEO = "geo"

SUGGESTER_NAME = "suggester"


@dataclass(frozen=True)
class SearchField:
    """One index field and the operations it supports."""
    
    name: str
    type: str  # keyword, text, integer, date, geo_point
    key: bool = False
    filterable: bool = False
    sortable: bool = False
    facetable: bool = False
    searchable: bool = False


SEARCH_FIELDS: tuple[SearchField, ...] = (
    SearchField(TRANSACTION_ID, "keyword", key=True, filterable=True),
    SearchField(PRICE, "integer", facetable=True, sortable=True),
    SearchField(DATE_OF_TRANSFER, "date", filterable=True, sortable=True),
    SearchField(POSTCODE, "keyword", sortable=True),
    SearchField(PROPERTY_TYPE, "keyword", facetable=True, filterable=True),
    SearchField(BUILD, "keyword", facetable=True, filterable=True),
    SearchField(CONTRACT, "keyword", facetable=True, filterable=True),
    SearchField(BUILDING, "keyword", sortable=True),
    SearchField(STREET, "text", searchable=True, sortable=True),
    SearchField(LOCALITY, "text", facetable=True, filterable=True, searchable=True),
    SearchField(TOWN, "text", facetable=True, filterable=True, searchable=True, sortable=True),
    SearchField(DISTRICT, "text", facetable=True, filterable=True, searchable=True),
    SearchField(COUNTY, "text", facetable=True, filterable=True, searchable=True),
    SearchField(GEO, "geo_point", filterable=True),
)

FIELDS_BY_NAME: dict[str, SearchField] = {field.name: field for field in SEARCH_FIELDS}

KEY_FIELD: str = next(f.name for f in SEARCH_FIELDS if f.key)

SEARCHABLE_FIELDS: tuple[str, ...] = tuple(f.name for f in SEARCH_FIELDS if f.searchable)
FILTERABLE_FIELDS: frozenset[str] = frozenset(f.name for f in SEARCH_FIELDS if f.filterable)
SORTABLE_FIELDS: frozenset[str] = frozenset(f.name for f in SEARCH_FIELDS if f.sortable)
FACETABLE_FIELDS: frozenset[str] = frozenset(f.name for f in SEARCH_FIELDS if f.facetable)

# The suggester reads every full-text field: street, locality, town, district, county.
SUGGESTER_FIELDS: tuple[str, ...] = SEARCHABLE_FIELDS

# Always requested, whatever the filters; responses assume exactly these five.
FACET_FIELDS: tuple[str, ...] = (TOWN, LOCALITY, DISTRICT, COUNTY, PRICE)


class GeoPoint(TypedDict):
    lat: float
    lon: float


class SearchDocument(TypedDict, total=False):
    """
    Indexed form of a property sale.
    
    Optional fields are omitted when the source record has no value, so a
    missing street never shows up as an empty string in filters or facets.
    """
    
    transaction_id: str
    price: int
    date_of_transfer: str
    postcode: str
    property_type: str
    build: str
    contract: str
    building: str
    street: str
    locality: str
    town: str
    district: str
    county: str
    geo: GeoPoint

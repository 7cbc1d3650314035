"""
Builds backend-neutral query plans from property search requests.

Every function here is pure: each step takes a plan and returns a new one,
so plans can be composed in any order and shared between tasks.
"""

import logging
import re
from dataclasses import dataclass, replace

from pricepaid.models.property import (
    PAGE_SIZE,
    FindGenericRequest,
    FindNearestRequest,
    GeoLocation,
    PropertyFilter,
    PropertySort,
    SortColumn,
    SortDirection,
)
from pricepaid.services.search.schema import (
    BUILDING,
    COUNTY,
    DATE_OF_TRANSFER,
    DISTRICT,
    FACET_FIELDS,
    FACETABLE_FIELDS,
    FILTERABLE_FIELDS,
    GEO,
    LOCALITY,
    POSTCODE,
    PRICE,
    SORTABLE_FIELDS,
    STREET,
    TOWN,
)

logger = logging.getLogger(__name__)

_FILTER_TERM = re.compile(r"\((\w+) eq '((?:[^']|'')*)'\)")


def escape_value(value: str) -> str:
    """Quote a literal for a filter expression (single quotes are doubled)."""
    return value.replace("'", "''")


@dataclass(frozen=True)
class FieldFilter:
    """Equality predicate on one filterable field."""
    
    field: str
    value: str
    
    def __post_init__(self):
        if self.field not in FILTERABLE_FIELDS:
            raise ValueError(f"{self.field!r} is not filterable")
    
    def render(self) -> str:
        return f"({self.field} eq '{escape_value(self.value)}')"


@dataclass(frozen=True)
class GeoDistanceFilter:
    """Distance from ``location`` must not exceed ``max_distance`` kilometres."""
    
    field: str
    location: GeoLocation
    max_distance: int
    
    def __post_init__(self):
        if self.field not in FILTERABLE_FIELDS:
            raise ValueError(f"{self.field!r} is not filterable")
    
    def render(self) -> str:
        return (
            f"geo.distance({self.field}, geography'POINT({self.location.long:f} {self.location.lat:f})') "
            f"le {self.max_distance}"
        )


@dataclass(frozen=True)
class SortField:
    field: str
    direction: SortDirection
    
    def __post_init__(self):
        if self.field not in SORTABLE_FIELDS:
            raise ValueError(f"{self.field!r} is not sortable")
    
    def render(self) -> str:
        return f"{self.field} {self.direction.value}"


@dataclass(frozen=True)
class QueryPlan:
    """Everything a backend needs to run one property search."""
    
    filters: tuple[FieldFilter, ...] = ()
    geo: GeoDistanceFilter | None = None
    order_by: tuple[SortField, ...] = ()
    facets: tuple[str, ...] = FACET_FIELDS
    search_text: str = ""
    skip: int = 0
    top: int = PAGE_SIZE
    include_total_count: bool = True
    
    def __post_init__(self):
        unsupported = set(self.facets) - FACETABLE_FIELDS
        if unsupported:
            raise ValueError(f"Cannot facet on {sorted(unsupported)}")
    
    @property
    def filter_expression(self) -> str:
        """Conjunction of all predicates, empty when nothing narrows the search."""
        clauses = []
        if self.geo is not None:
            clauses.append(self.geo.render())
        clauses.extend(f.render() for f in self.filters)
        return " and ".join(clauses)


def parse_filter_expression(expression: str) -> list[tuple[str, str]]:
    """
    Read the equality predicates back out of a filter expression.
    
    Examples:
        >>> parse_filter_expression("(town eq 'LONDON') and (county eq 'O''NEIL')")
        [('town', 'LONDON'), ('county', "O'NEIL")]
    """
    return [
        (match.group(1), match.group(2).replace("''", "'"))
        for match in _FILTER_TERM.finditer(expression)
    ]


def with_filter(plan: QueryPlan, field_name: str, value: str | None) -> QueryPlan:
    """AND ``field == value.upper()`` onto the plan; None adds no predicate."""
    if value is None:
        return plan
    predicate = FieldFilter(field_name, value.upper())
    return replace(plan, filters=plan.filters + (predicate,))


def apply_filters(plan: QueryPlan, property_filter: PropertyFilter) -> QueryPlan:
    for field_name, value in (
        (TOWN, property_filter.town),
        (COUNTY, property_filter.county),
        (LOCALITY, property_filter.locality),
        (DISTRICT, property_filter.district),
    ):
        plan = with_filter(plan, field_name, value)
    return plan


def find_by_distance(location: GeoLocation, max_distance: int, plan: QueryPlan | None = None) -> QueryPlan:
    """Restrict the plan to documents within ``max_distance`` of ``location``."""
    plan = plan or QueryPlan()
    return replace(plan, geo=GeoDistanceFilter(GEO, location, max_distance))


_SORT_COLUMNS: dict[SortColumn, list[str]] = {
    SortColumn.STREET: [BUILDING, STREET],
    SortColumn.TOWN: [TOWN],
    SortColumn.POSTCODE: [POSTCODE],
    SortColumn.DATE: [DATE_OF_TRANSFER],
    SortColumn.PRICE: [PRICE],
}


def to_search_columns(column: str | None) -> list[str]:
    """Index fields that implement a sort column; unknown columns map to none."""
    sort_column = SortColumn.try_parse(column)
    if sort_column is None:
        return []
    return list(_SORT_COLUMNS[sort_column])


def order_by(plan: QueryPlan, sort: PropertySort) -> QueryPlan:
    """
    Order by the sort column in the requested direction (ascending by default).
    
    An unrecognised column leaves the backend's default order in place.
    """
    if sort.sort_column is None:
        return plan
    columns = to_search_columns(sort.sort_column)
    if not columns:
        logger.debug(f"Ignoring unknown sort column {sort.sort_column!r}")
        return plan
    direction = sort.sort_direction or SortDirection.ASCENDING
    return replace(plan, order_by=tuple(SortField(column, direction) for column in columns))


def to_search_text(text: str | None) -> str:
    """Prefix-match free text ("Oak" -> "Oak*"); nothing means match all."""
    if text is None or not text.strip():
        return ""
    return f"{text.strip()}*"


def with_search_text(plan: QueryPlan, text: str | None) -> QueryPlan:
    return replace(plan, search_text=to_search_text(text))


def paginate(plan: QueryPlan, page: int) -> QueryPlan:
    """Fixed-size page ``page`` with all facets and the total count requested."""
    return replace(
        plan,
        facets=FACET_FIELDS,
        skip=page * PAGE_SIZE,
        top=PAGE_SIZE,
        include_total_count=True,
    )


def build_generic_query(request: FindGenericRequest) -> QueryPlan:
    plan = apply_filters(QueryPlan(), request.filter)
    plan = order_by(plan, request.sort)
    plan = with_search_text(plan, request.text)
    return paginate(plan, request.page)


def build_nearest_query(request: FindNearestRequest, location: GeoLocation) -> QueryPlan:
    """Radius query around ``location``; free text is never applied here."""
    plan = find_by_distance(location, request.max_distance)
    plan = apply_filters(plan, request.filter)
    plan = order_by(plan, request.sort)
    return paginate(plan, request.page)

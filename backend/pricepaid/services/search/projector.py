"""Maps raw backend result pages onto typed search responses."""

from typing import Any

from pricepaid.models.property import (
    Address,
    BuildDetails,
    BuildType,
    ContractType,
    Facets,
    PropertyResult,
    PropertyType,
    SearchResponse,
)
from pricepaid.services.search import schema
from pricepaid.services.search.backend import SearchResult
from pricepaid.services.search.conversions import (
    Failure,
    Ok,
    from_optional_text,
    parse_date,
    parse_enum,
    parse_optional_enum,
    parse_uuid,
)
from pricepaid.services.search.errors import MalformedRecord, UnknownEnumerationValue
from pricepaid.services.search.schema import SearchDocument


def _require(document: SearchDocument, field: str, conversion: Ok | Failure, error=MalformedRecord):
    if isinstance(conversion, Failure):
        raise error(field, document.get(field), conversion.reason)
    return conversion.value


def _required_text(document: SearchDocument, field: str) -> str:
    value = document.get(field)
    if not isinstance(value, str):
        raise MalformedRecord(field, value, "missing required text")
    return value


def to_property_result(document: SearchDocument) -> PropertyResult:
    """
    Rebuild a property record from an indexed document.
    
    Raises:
        MalformedRecord: identifier, date or price cannot be parsed
        UnknownEnumerationValue: an enumeration value is not recognised
    """
    transaction_id = _require(document, schema.TRANSACTION_ID, parse_uuid(document.get(schema.TRANSACTION_ID)))
    date_of_transfer = _require(document, schema.DATE_OF_TRANSFER, parse_date(document.get(schema.DATE_OF_TRANSFER)))
    price = document.get(schema.PRICE)
    if not isinstance(price, int) or isinstance(price, bool):
        raise MalformedRecord(schema.PRICE, price, "expected an integer")
    
    build_details = BuildDetails(
        property_type=_require(
            document,
            schema.PROPERTY_TYPE,
            parse_optional_enum(PropertyType, document.get(schema.PROPERTY_TYPE)),
            UnknownEnumerationValue,
        ),
        build=_require(document, schema.BUILD, parse_enum(BuildType, document.get(schema.BUILD)), UnknownEnumerationValue),
        contract=_require(
            document, schema.CONTRACT, parse_enum(ContractType, document.get(schema.CONTRACT)), UnknownEnumerationValue
        ),
    )
    address = Address(
        building=document.get(schema.BUILDING) or "",
        street=from_optional_text(document.get(schema.STREET)),
        locality=from_optional_text(document.get(schema.LOCALITY)),
        town_city=_required_text(document, schema.TOWN),
        district=_required_text(document, schema.DISTRICT),
        county=_required_text(document, schema.COUNTY),
        postcode=from_optional_text(document.get(schema.POSTCODE)),
    )
    return PropertyResult(
        transaction_id=transaction_id,
        price=price,
        date_of_transfer=date_of_transfer,
        build_details=build_details,
        address=address,
    )


def to_facets(buckets: dict[str, list[Any]]) -> Facets:
    """Stringified bucket values per dimension; a missing dimension is an empty list."""
    def find_facet(field: str) -> list[str]:
        return [str(value) for value in buckets.get(field) or []]
    
    return Facets(
        towns=find_facet(schema.TOWN),
        localities=find_facet(schema.LOCALITY),
        districts=find_facet(schema.DISTRICT),
        counties=find_facet(schema.COUNTY),
        prices=find_facet(schema.PRICE),
    )


def to_search_response(result: SearchResult, page: int) -> SearchResponse:
    return SearchResponse(
        results=[to_property_result(document) for document in result["documents"]],
        total_transactions=result["count"],
        facets=to_facets(result["facets"]),
        page=page,
    )


def empty_response(page: int) -> SearchResponse:
    """No matches, no facets and no count."""
    return to_search_response(SearchResult(documents=[], facets={}, count=None), page)

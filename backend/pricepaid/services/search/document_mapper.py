"""Maps property sale records onto search documents for bulk upload."""

import logging
from collections.abc import Callable, Iterable

from pricepaid.models.property import GeoLocation, PropertyResult
from pricepaid.services.search import schema
from pricepaid.services.search.backend import SearchBackend
from pricepaid.services.search.conversions import to_optional_text
from pricepaid.services.search.schema import GeoPoint, SearchDocument

logger = logging.getLogger(__name__)

TryGetGeo = Callable[[str], GeoLocation | None]


def to_search_document(record: PropertyResult, try_get_geo: TryGetGeo) -> SearchDocument:
    """
    Convert a property record to its indexed form.
    
    Absent optional values are left out of the document. The geo point is
    only set when the postcode resolves to a coordinate.
    """
    document = SearchDocument(
        transaction_id=str(record.transaction_id),
        price=record.price,
        date_of_transfer=record.date_of_transfer.isoformat(),
        build=record.build_details.build.value,
        contract=record.build_details.contract.value,
        building=record.address.building,
        town=record.address.town_city,
        district=record.address.district,
        county=record.address.county,
    )
    optional_values = {
        schema.PROPERTY_TYPE: record.build_details.property_type.value if record.build_details.property_type else None,
        schema.STREET: to_optional_text(record.address.street),
        schema.LOCALITY: to_optional_text(record.address.locality),
        schema.POSTCODE: to_optional_text(record.address.postcode),
    }
    for field, value in optional_values.items():
        if value is not None:
            document[field] = value
    
    if record.address.postcode:
        location = try_get_geo(record.address.postcode)
        if location is not None:
            document[schema.GEO] = GeoPoint(lat=location.lat, lon=location.long)
    return document


def to_search_documents(records: Iterable[PropertyResult], try_get_geo: TryGetGeo) -> list[SearchDocument]:
    return [to_search_document(record, try_get_geo) for record in records]


async def insert_properties(
    backend: SearchBackend,
    records: Iterable[PropertyResult],
    try_get_geo: TryGetGeo,
) -> int:
    """
    Map records and upsert them as a single batch.
    
    Returns:
        Number of documents submitted
    """
    documents = to_search_documents(records, try_get_geo)
    if not documents:
        return 0
    located = sum(1 for document in documents if schema.GEO in document)
    logger.info(f"Uploading {len(documents)} documents ({located} with coordinates)")
    await backend.upload_documents(documents)
    return len(documents)

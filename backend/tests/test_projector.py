"""Unit tests for mapping backend results onto search responses."""

import pytest
from datetime import date
from uuid import UUID

from pricepaid.models.property import BuildType, ContractType, PropertyType
from pricepaid.services.search.backend import SearchResult
from pricepaid.services.search.conversions import Failure, Ok, parse_enum, parse_optional_enum, parse_uuid
from pricepaid.services.search.errors import DataIntegrityError, MalformedRecord, UnknownEnumerationValue
from pricepaid.services.search.projector import empty_response, to_facets, to_property_result, to_search_response


@pytest.fixture
def document():
    """An indexed document as the backend returns it."""
    return {
        "transaction_id": "5d8f1e3a-2c8b-4d1e-9f57-0a3b7c6d4e21",
        "price": 250000,
        "date_of_transfer": "2017-06-30",
        "postcode": "W5 3SL",
        "property_type": "Terraced",
        "build": "OldStock",
        "contract": "Freehold",
        "building": "12",
        "street": "OAK ROAD",
        "town": "LONDON",
        "district": "EALING",
        "county": "GREATER LONDON",
        "geo": {"lat": 51.51, "lon": -0.3},
    }


class TestConversions:
    """Tests for the tagged conversion helpers."""
    
    def test_parse_uuid(self):
        assert parse_uuid("5d8f1e3a-2c8b-4d1e-9f57-0a3b7c6d4e21") == Ok(UUID("5d8f1e3a-2c8b-4d1e-9f57-0a3b7c6d4e21"))
        assert isinstance(parse_uuid("not-a-uuid"), Failure)
        assert isinstance(parse_uuid(None), Failure)
    
    def test_parse_enum(self):
        assert parse_enum(BuildType, "NewBuild") == Ok(BuildType.NEW_BUILD)
        assert isinstance(parse_enum(BuildType, "Bungalow"), Failure)
    
    def test_parse_optional_enum_accepts_missing(self):
        assert parse_optional_enum(PropertyType, None) == Ok(None)


class TestToPropertyResult:
    """Tests for rebuilding property records."""
    
    def test_maps_all_fields(self, document):
        result = to_property_result(document)
        assert result.transaction_id == UUID(document["transaction_id"])
        assert result.price == 250000
        assert result.date_of_transfer == date(2017, 6, 30)
        assert result.build_details.property_type == PropertyType.TERRACED
        assert result.build_details.build == BuildType.OLD_STOCK
        assert result.build_details.contract == ContractType.FREEHOLD
        assert result.address.town_city == "LONDON"
        assert result.address.postcode == "W5 3SL"
    
    def test_missing_optional_fields_are_none(self, document):
        del document["postcode"]
        document["locality"] = None
        result = to_property_result(document)
        assert result.address.postcode is None
        assert result.address.locality is None
        assert result.address.street == "OAK ROAD"
    
    def test_bad_identifier_is_malformed_record(self, document):
        document["transaction_id"] = "12345"
        with pytest.raises(MalformedRecord) as exc_info:
            to_property_result(document)
        assert exc_info.value.field == "transaction_id"
    
    def test_unknown_enumeration_value(self, document):
        document["contract"] = "Commonhold"
        with pytest.raises(UnknownEnumerationValue):
            to_property_result(document)
    
    def test_integrity_errors_share_a_base(self, document):
        document["build"] = "Prefab"
        with pytest.raises(DataIntegrityError):
            to_property_result(document)


class TestFacets:
    """Tests for facet projection."""
    
    def test_all_five_dimensions_always_present(self):
        facets = to_facets({"town": ["LONDON", "LEEDS"]})
        assert set(facets.model_dump()) == {"towns", "localities", "districts", "counties", "prices"}
        assert facets.towns == ["LONDON", "LEEDS"]
        assert facets.counties == []
    
    def test_values_are_stringified(self):
        facets = to_facets({"price": [250000, 180000]})
        assert facets.prices == ["250000", "180000"]


class TestSearchResponse:
    """Tests for whole-page projection."""
    
    def test_count_and_page_pass_through(self, document):
        result = SearchResult(documents=[document], facets={"county": ["GREATER LONDON"]}, count=87)
        response = to_search_response(result, page=3)
        assert response.total_transactions == 87
        assert response.page == 3
        assert len(response.results) == 1
        assert response.facets.counties == ["GREATER LONDON"]
    
    def test_missing_count_stays_missing(self):
        response = to_search_response(SearchResult(documents=[], facets={}, count=None), page=0)
        assert response.total_transactions is None
    
    def test_empty_response(self):
        response = empty_response(4)
        assert response.results == []
        assert response.total_transactions is None
        assert response.facets.towns == []
        assert response.page == 4

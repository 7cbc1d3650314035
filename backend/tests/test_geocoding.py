"""Tests for postcode geocoding and normalization."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession

from pricepaid.models.postcode_orm import Postcode
from pricepaid.models.property import GeoLocation
from pricepaid.services.geocoding import DatabaseGeocoder, load_postcode_lookup
from pricepaid.utils.normalization import normalize_postcode, split_postcode


class TestSplitPostcode:
    
    @pytest.mark.parametrize("postcode,expected", [
        ("SW1A 1AA", ("SW1A", "1AA")),
        (" ox3   9ht ", ("OX3", "9HT")),
        ("ZZ9", None),
        ("A B C", None),
        ("", None),
        (None, None),
    ])
    def test_split(self, postcode, expected):
        assert split_postcode(postcode) == expected


def test_normalize_postcode():
    assert normalize_postcode("  ox3   9ht ") == "OX3 9HT"
    assert normalize_postcode("   ") is None


class TestDatabaseGeocoder:
    """Tests for the async postcode lookup."""
    
    @pytest.mark.asyncio
    async def test_found(self):
        db = AsyncMock(spec=AsyncSession)
        result = MagicMock()
        result.scalar_one_or_none.return_value = Postcode(
            outward_code="SW1A", inward_code="1AA", latitude=51.501, longitude=-0.141
        )
        db.execute.return_value = result
        
        location = await DatabaseGeocoder(db).try_get_geo("sw1a", "1aa")
        
        assert location == GeoLocation(lat=51.501, long=-0.141)
    
    @pytest.mark.asyncio
    async def test_not_found(self):
        db = AsyncMock(spec=AsyncSession)
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db.execute.return_value = result
        
        assert await DatabaseGeocoder(db).try_get_geo("ZZ99", "9ZZ") is None


class TestLoadPostcodeLookup:
    """Tests for the batch lookup used by ingestion."""
    
    def test_keys_by_full_postcode(self):
        session = MagicMock()
        session.execute.return_value.scalars.return_value = [
            Postcode(outward_code="OX3", inward_code="9HT", latitude=51.76, longitude=-1.21),
        ]
        
        lookup = load_postcode_lookup(session, ["OX3 9HT", "ZZ99 9ZZ", None])
        
        assert lookup == {"OX3 9HT": GeoLocation(lat=51.76, long=-1.21)}
        session.execute.assert_called_once()
    
    def test_no_usable_postcodes_skips_query(self):
        session = MagicMock()
        assert load_postcode_lookup(session, [None, "ZZ9"]) == {}
        session.execute.assert_not_called()

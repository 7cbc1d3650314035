"""Pydantic schemas for property search requests and responses."""

from datetime import date
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

PAGE_SIZE = 20
MAX_SUGGESTIONS = 10


class PropertyType(str, Enum):
    """Type of property sold (price paid category D/S/T/F/O)."""
    
    DETACHED = "Detached"
    SEMI_DETACHED = "SemiDetached"
    TERRACED = "Terraced"
    FLATS_MAISONETTES = "FlatsMaisonettes"
    OTHER = "Other"


class BuildType(str, Enum):
    NEW_BUILD = "NewBuild"
    OLD_STOCK = "OldStock"


class ContractType(str, Enum):
    FREEHOLD = "Freehold"
    LEASEHOLD = "Leasehold"


class SortColumn(str, Enum):
    """Columns a property table can be ordered by."""
    
    STREET = "street"
    TOWN = "town"
    POSTCODE = "postcode"
    DATE = "date"
    PRICE = "price"
    
    @classmethod
    def try_parse(cls, value: str | None) -> "SortColumn | None":
        """Case-insensitive lookup; unknown columns give None rather than an error."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class GeoLocation(BaseModel):
    """A WGS84 coordinate."""
    
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    long: float = Field(..., ge=-180, le=180, description="Longitude")


class Address(BaseModel):
    building: str = Field(..., description="Building name/number (SAON + PAON)")
    street: str | None = Field(None, description="Street name")
    locality: str | None = Field(None, description="Locality")
    town_city: str = Field(..., description="Town or city")
    district: str = Field(..., description="District")
    county: str = Field(..., description="County")
    postcode: str | None = Field(None, description="Full postcode, e.g. 'SW1A 1AA'")


class BuildDetails(BaseModel):
    property_type: PropertyType | None = Field(None, description="Property type, absent for some records")
    build: BuildType
    contract: ContractType


class PropertyResult(BaseModel):
    """One property sale transaction."""
    
    transaction_id: UUID = Field(..., description="Unique transaction identifier")
    price: int = Field(..., description="Sale price")
    date_of_transfer: date = Field(..., description="Date the sale completed")
    build_details: BuildDetails
    address: Address


class PropertyFilter(BaseModel):
    """Exact-match attribute filters; matching is case-insensitive."""
    
    town: str | None = None
    county: str | None = None
    locality: str | None = None
    district: str | None = None


class PropertySort(BaseModel):
    sort_column: str | None = Field(None, description="street, town, postcode, date or price")
    sort_direction: SortDirection | None = Field(None, description="Defaults to ascending")


class FindGenericRequest(BaseModel):
    """Free text plus filter search."""
    
    text: str | None = None
    filter: PropertyFilter = Field(default_factory=PropertyFilter)
    sort: PropertySort = Field(default_factory=PropertySort)
    page: int = Field(0, ge=0, description="Zero-based page index")


class FindNearestRequest(BaseModel):
    """Radius search around a postcode."""
    
    postcode: str = Field(..., description="Outward and inward code separated by a space")
    max_distance: int = Field(1, ge=0, description="Radius in kilometres")
    filter: PropertyFilter = Field(default_factory=PropertyFilter)
    sort: PropertySort = Field(default_factory=PropertySort)
    page: int = Field(0, ge=0, description="Zero-based page index")


class Facets(BaseModel):
    """Distinct values per refinement dimension among the matches."""
    
    towns: list[str] = Field(default_factory=list)
    localities: list[str] = Field(default_factory=list)
    districts: list[str] = Field(default_factory=list)
    counties: list[str] = Field(default_factory=list)
    prices: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Response for one page of property search results."""
    
    results: list[PropertyResult] = Field(..., description="At most one page of transactions")
    total_transactions: int | None = Field(None, description="Total matches, null if not computed")
    facets: Facets = Field(default_factory=Facets)
    page: int = Field(..., description="Echoed page index")
    
    class Config:
        json_schema_extra = {
            "example": {
                "results": [
                    {
                        "transaction_id": "5d8f1e3a-2c8b-4d1e-9f57-0a3b7c6d4e21",
                        "price": 250000,
                        "date_of_transfer": "2017-06-30",
                        "build_details": {
                            "property_type": "Terraced",
                            "build": "OldStock",
                            "contract": "Freehold",
                        },
                        "address": {
                            "building": "12",
                            "street": "OAK ROAD",
                            "locality": None,
                            "town_city": "LONDON",
                            "district": "EALING",
                            "county": "GREATER LONDON",
                            "postcode": "W5 3SL",
                        },
                    }
                ],
                "total_transactions": 1,
                "facets": {
                    "towns": ["LONDON"],
                    "localities": [],
                    "districts": ["EALING"],
                    "counties": ["GREATER LONDON"],
                    "prices": ["250000"],
                },
                "page": 0,
            }
        }


class SuggestRequest(BaseModel):
    text: str = Field(..., min_length=1)


class SuggestionResponse(BaseModel):
    suggestions: list[str] = Field(default_factory=list, description="Up to 10 distinct suggestions")

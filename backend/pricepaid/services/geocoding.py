"""Postcode to coordinate lookups backed by the postcode table."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from sqlalchemy import select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from pricepaid.models.postcode_orm import Postcode
from pricepaid.models.property import GeoLocation
from pricepaid.utils.normalization import split_postcode

logger = logging.getLogger(__name__)


class Geocoder(ABC):
    """Resolves an outward/inward postcode pair to a coordinate."""
    
    @abstractmethod
    async def try_get_geo(self, outward: str, inward: str) -> GeoLocation | None:
        """
        Look up the centroid of a postcode.
        
        Returns:
            GeoLocation, or None when the postcode is unknown
        """
        pass


class DatabaseGeocoder(Geocoder):
    """Geocoder reading the postcode lookup table."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def try_get_geo(self, outward: str, inward: str) -> GeoLocation | None:
        query = select(Postcode).where(
            Postcode.outward_code == outward.upper(),
            Postcode.inward_code == inward.upper(),
        )
        result = await self.db.execute(query)
        postcode = result.scalar_one_or_none()
        if postcode is None:
            return None
        return GeoLocation(lat=postcode.latitude, long=postcode.longitude)


def load_postcode_lookup(session: Session, postcodes: Iterable[str | None]) -> dict[str, GeoLocation]:
    """
    Batch-load coordinates for the given postcodes.
    
    Postcodes that do not split into two parts, or are not in the table, are
    simply missing from the result.
    
    Returns:
        Mapping of "OUTWARD INWARD" to GeoLocation
    """
    pairs = {parts for parts in (split_postcode(p) for p in postcodes) if parts is not None}
    if not pairs:
        return {}
    
    query = select(Postcode).where(
        tuple_(Postcode.outward_code, Postcode.inward_code).in_(list(pairs))
    )
    lookup = {
        f"{row.outward_code} {row.inward_code}": GeoLocation(lat=row.latitude, long=row.longitude)
        for row in session.execute(query).scalars()
    }
    logger.debug(f"Resolved {len(lookup)} of {len(pairs)} postcodes")
    return lookup

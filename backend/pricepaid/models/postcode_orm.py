"""SQLAlchemy ORM model for the postcode coordinate lookup table."""

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from pricepaid.core.database import Base


class Postcode(Base):
    """Centroid of one postcode, keyed by outward and inward code."""
    
    __tablename__ = "postcode"
    
    outward_code: Mapped[str] = mapped_column(String(4), primary_key=True)
    inward_code: Mapped[str] = mapped_column(String(3), primary_key=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    
    def __repr__(self) -> str:
        return f"<Postcode {self.outward_code} {self.inward_code}>"

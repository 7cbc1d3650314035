"""
Fallible conversions between index values and domain values.

Parsers return ``Ok`` or ``Failure`` instead of raising, so the caller
decides whether a failure is a data integrity problem or an input fallback.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    reason: str


def parse_uuid(value: object) -> Ok[UUID] | Failure:
    if not isinstance(value, str):
        return Failure("expected a UUID string")
    try:
        return Ok(UUID(value))
    except ValueError:
        return Failure("not a valid UUID")


def parse_date(value: object) -> Ok[date] | Failure:
    if not isinstance(value, str):
        return Failure("expected an ISO date string")
    try:
        # Tolerate a time component ("2017-01-01T00:00:00")
        return Ok(date.fromisoformat(value[:10]))
    except ValueError:
        return Failure("not an ISO date")


def parse_enum(enum_type: type[E], value: object) -> Ok[E] | Failure:
    """Parse an enumeration from its stored value."""
    for member in enum_type:
        if member.value == value:
            return Ok(member)
    return Failure(f"not one of {[m.value for m in enum_type]}")


def parse_optional_enum(enum_type: type[E], value: object) -> Ok[E | None] | Failure:
    if value is None:
        return Ok(None)
    return parse_enum(enum_type, value)


def from_optional_text(value: str | None) -> str | None:
    """Index value to domain value; missing or empty means not present."""
    if value is None or value == "":
        return None
    return value


def to_optional_text(value: str | None) -> str | None:
    """Domain value to index value; None means omit the field."""
    return value if value else None

"""Errors raised when indexed documents no longer match the domain model."""


class DataIntegrityError(Exception):
    """An indexed document cannot be mapped back to a property record."""
    
    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for '{field}': {reason}")


class MalformedRecord(DataIntegrityError):
    """A required value is missing or has the wrong shape (e.g. a non-UUID id)."""


class UnknownEnumerationValue(DataIntegrityError):
    """An enumeration field holds a value outside its known set."""

"""
Postcode normalization helpers.

Postcodes are stored upper-case and single-spaced as published in the price
paid data, so user input is normalized the same way before a lookup.
"""

import re


def normalize_postcode(postcode: str | None) -> str | None:
    """
    Upper-case a postcode and collapse its whitespace; blank gives None.
    
    Examples:
        >>> normalize_postcode(" sw1a   1aa ")
        'SW1A 1AA'
    """
    if not postcode or not postcode.strip():
        return None
    return re.sub(r"\s+", " ", postcode).strip().upper()


def split_postcode(postcode: str | None) -> tuple[str, str] | None:
    """
    Split a postcode into its outward and inward codes.
    
    Returns None unless the postcode has exactly two space-separated parts.
    
    Examples:
        >>> split_postcode("sw1a 1aa")
        ('SW1A', '1AA')
        >>> split_postcode("ZZ9") is None
        True
    """
    normalized = normalize_postcode(postcode)
    if normalized is None:
        return None
    parts = normalized.split(" ")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]

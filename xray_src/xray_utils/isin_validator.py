"""
Centralized ISIN validation with Luhn checksum.

ISIN format: 2 letter country code + 9 alphanumeric NSIN + 1 check digit

Example valid ISINs:
- US0378331005 (Apple Inc)
- DE0007164600 (SAP SE)
- IE00B4L5Y983 (iShares Core MSCI World)
"""

from typing import Optional


def normalize_isin(isin: Optional[str]) -> str:
    """Strip whitespace and upper-case an ISIN cell. Blank cells become ''."""
    if isin is None:
        return ""
    return str(isin).strip().upper()


def is_valid_isin(isin: Optional[str]) -> bool:
    """
    Validate ISIN format and Luhn checksum.

    Args:
        isin: The ISIN string to validate

    Returns:
        True if valid ISIN, False otherwise
    """
    if not isin or not isinstance(isin, str):
        return False

    isin = isin.strip().upper()

    # Basic format check
    if len(isin) != 12:
        return False

    # Country code (first 2 chars must be letters)
    if not isin[:2].isalpha():
        return False

    # NSIN (next 9 chars must be alphanumeric)
    if not isin[2:11].isalnum():
        return False

    # Check digit (last char must be digit)
    if not isin[11].isdigit():
        return False

    return _validate_luhn_checksum(isin)


def _validate_luhn_checksum(isin: str) -> bool:
    """
    Validate ISIN using Luhn algorithm.

    The algorithm:
    1. Convert letters to numbers (A=10, B=11, ..., Z=35)
    2. Apply Luhn algorithm to resulting digit string
    3. Valid if total mod 10 == 0
    """
    try:
        digits = ""
        for char in isin:
            if char.isdigit():
                digits += char
            else:
                digits += str(ord(char) - ord("A") + 10)

        total = 0
        for i, digit in enumerate(reversed(digits)):
            n = int(digit)
            # Double every second digit from right
            if i % 2 == 1:
                n *= 2
                if n > 9:
                    n -= 9
            total += n

        return total % 10 == 0

    except (ValueError, TypeError):
        return False


# Common placeholder values found in hand-maintained CSVs
INVALID_PATTERNS = frozenset(
    [
        "N/A",
        "NA",
        "NULL",
        "NONE",
        "-",
        "",
    ]
)


def is_placeholder_isin(isin: Optional[str]) -> bool:
    """
    Check if an ISIN cell holds a placeholder rather than an identifier.

    Args:
        isin: The ISIN string to check

    Returns:
        True if it's a placeholder, False otherwise
    """
    return normalize_isin(isin) in INVALID_PATTERNS

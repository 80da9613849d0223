"""
Identifier Utilities
====================
Validation and masking of the phone identifiers that gate submissions.
"""

import re

IDENTIFIER_PATTERN = re.compile(r'^[0-9]{10}$')


def validate_identifier(identifier) -> bool:
    """
    Check that an identifier is a 10-digit mobile number.

    Args:
        identifier: Raw identifier from the request

    Returns:
        True if the identifier is exactly ten ASCII digits
    """
    if not isinstance(identifier, str):
        return False
    return bool(IDENTIFIER_PATTERN.fullmatch(identifier))


def mask_identifier(identifier: str, visible: int = 4) -> str:
    """Mask all but the last ``visible`` characters (``******1234``)."""
    if not identifier:
        return ""
    return identifier[-visible:].rjust(len(identifier), "*")

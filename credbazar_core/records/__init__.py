"""
Submission Records
==================
Field normalization and identifier helpers for inbound submissions.
"""

from .normalizer import FIELD_MAP, normalize_record
from .identifiers import IDENTIFIER_PATTERN, validate_identifier, mask_identifier

__all__ = [
    # Normalizer
    "FIELD_MAP",
    "normalize_record",
    # Identifiers
    "IDENTIFIER_PATTERN",
    "validate_identifier",
    "mask_identifier",
]

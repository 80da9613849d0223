"""
Record Normalizer
=================
Maps heterogeneous form field names onto canonical ledger column names.
"""

from typing import Any, Dict, Mapping

# Incoming field name -> ledger column header
FIELD_MAP: Dict[str, str] = {
    "LoanAmount": "LoanAmount",
    "MonthlyIncome": "MonthlyIncome",
    "Mobile": "Mobile",
    "Email": "Email",
    "PAN1": "PAN",
    "DOB": "DOB",
    "company": "Company",
    "City": "City",
    "Pincode": "Pincode",
    "Occupation": "Occupation",
}


def normalize_record(
    raw: Mapping[str, Any],
    field_map: Mapping[str, str] = FIELD_MAP,
) -> Dict[str, Any]:
    """
    Rename known fields to their canonical column names.

    Unknown fields pass through under their original name. Key order of
    ``raw`` is preserved, which fixes the column order of a new ledger.

    Args:
        raw: Submitted form fields
        field_map: Field name -> canonical column mapping

    Returns:
        New mapping keyed by canonical names
    """
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        target = field_map.get(key) or field_map.get(str(key).strip()) or key
        out[target] = value
    return out

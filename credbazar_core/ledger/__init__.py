"""
Daily Ledger
============
Per-day tabular files of normalized submissions.
"""

from .reconcile import (
    ADDED_AT,
    build_header,
    merge_headers,
    rows_to_records,
    align_record,
    needs_repair,
    overflow_rows,
    shift_left,
)
from .storage import LedgerStorage
from .manager import LedgerManager, RepairResult, utc_now_iso

__all__ = [
    # Reconciliation
    "ADDED_AT",
    "build_header",
    "merge_headers",
    "rows_to_records",
    "align_record",
    "needs_repair",
    "overflow_rows",
    "shift_left",
    # Storage
    "LedgerStorage",
    # Manager
    "LedgerManager",
    "RepairResult",
    "utc_now_iso",
]

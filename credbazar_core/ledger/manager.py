"""
Ledger Manager
==============
Append-only daily ledgers with schema reconciliation and shift repair.
"""

import asyncio
import csv
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import structlog

from ..errors import LedgerWriteFailed, StorageError
from ..metrics import LEDGER_APPENDS, LEDGER_REPAIRS
from .reconcile import (
    ADDED_AT,
    align_record,
    build_header,
    merge_headers,
    needs_repair,
    overflow_rows,
    rows_to_records,
    shift_left,
)
from .storage import LedgerStorage

logger = structlog.get_logger(__name__)

# Failures that mean the file could not be read or written as a ledger
_IO_ERRORS = (OSError, csv.Error, UnicodeDecodeError)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class RepairResult:
    """Outcome of repairing one ledger file."""
    file: str
    repaired: Optional[bool] = None
    error: Optional[str] = None


class LedgerManager:
    """
    Owns one tabular file per calendar day.

    Every append is a full read-reconcile-rewrite of the day's file, done
    under a per-file lock and committed with an atomic replace. File I/O runs
    in the default executor so the event loop is never blocked.

    Example:
        manager = LedgerManager(LedgerStorage("data"))
        path = await manager.append(date.today(), {"LoanAmount": 50000})
    """

    def __init__(
        self,
        storage: LedgerStorage,
        timestamp: Callable[[], str] = utc_now_iso,
    ):
        self.storage = storage
        self._timestamp = timestamp
        self._locks: Dict[Path, asyncio.Lock] = {}

    def _lock_for(self, path: Path) -> asyncio.Lock:
        key = path.resolve()
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def path_for(self, day: date) -> Path:
        return self.storage.path_for(day)

    def exists(self, day: date) -> bool:
        """Whether a ledger has been written for ``day``."""
        return self.storage.exists(day)

    async def append(self, day: date, row: Mapping[str, Any]) -> Path:
        """
        Append ``row`` to the ledger for ``day``, widening the header if needed.

        Args:
            day: Calendar date that selects the file
            row: Column name -> scalar value; ``added_at`` is set here

        Returns:
            Path of the ledger file

        Raises:
            LedgerWriteFailed: If the file could not be read or written.
                The append did not happen.
        """
        path = self.storage.path_for(day)
        record = _clean_record(row)

        async with self._lock_for(path):
            stamp = self._timestamp()
            try:
                created, columns, total = await self._run(
                    self._append_sync, path, record, stamp,
                )
            except _IO_ERRORS as e:
                LEDGER_APPENDS.labels(outcome="failed").inc()
                logger.error("ledger_append_failed", file=path.name, error=str(e))
                raise LedgerWriteFailed(str(path), e) from e

        LEDGER_APPENDS.labels(outcome="created" if created else "appended").inc()
        logger.info(
            "ledger_row_appended",
            file=path.name,
            created=created,
            columns=columns,
            rows=total,
        )
        return path

    def _append_sync(self, path: Path, record: Dict[str, Any], stamp: str):
        header_row: List[str] = []
        existing: List[Dict[str, str]] = []

        if path.is_file():
            header_row, rows = self.storage.read_table(path)
            existing = rows_to_records(header_row, rows)

        created = not header_row
        if created:
            header = build_header(record.keys())
        else:
            header = merge_headers(header_row, record.keys())

        out_rows = [align_record(header, previous) for previous in existing]
        out_rows.append(align_record(header, {**record, ADDED_AT: stamp}))

        self.storage.write_table(path, header, out_rows)
        return created, len(header), len(out_rows)

    async def repair(self, path: Path) -> bool:
        """
        Repair a ledger whose header and rows were shifted one column right.

        Only the narrow signature of an empty first header cell next to a
        non-empty second cell is handled. Files without it are left untouched.
        Running it again on a repaired file is a no-op.

        Returns:
            True if the file was rewritten

        Raises:
            StorageError: If the file could not be read or written
        """
        path = Path(path)
        async with self._lock_for(path):
            try:
                changed = await self._run(self._repair_sync, path)
            except _IO_ERRORS as e:
                logger.error("ledger_repair_failed", file=path.name, error=str(e))
                raise StorageError(f"Failed to repair ledger {path}: {e}") from e

        LEDGER_REPAIRS.labels(changed=str(changed).lower()).inc()
        if changed:
            logger.info("ledger_repaired", file=path.name)
        return changed

    def _repair_sync(self, path: Path) -> bool:
        header_row, rows = self.storage.read_table(path)
        if not needs_repair(header_row):
            return False
        dropped = overflow_rows(header_row, rows)
        if dropped:
            logger.warning("ledger_repair_dropped_cells", file=path.name, rows=dropped)
        header, fixed = shift_left(header_row, rows)
        self.storage.write_table(path, header, fixed)
        return True

    async def repair_all(self) -> List[RepairResult]:
        """Repair every ledger in the storage root; one failure does not stop the rest."""
        results: List[RepairResult] = []
        for path in self.storage.list_files():
            try:
                changed = await self.repair(path)
                results.append(RepairResult(file=path.name, repaired=changed))
            except StorageError as e:
                results.append(RepairResult(file=path.name, error=str(e)))
        return results


def _clean_record(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Trim keys, drop empty keys and any caller-supplied ``added_at``."""
    record: Dict[str, Any] = {}
    for key, value in row.items():
        name = "" if key is None else str(key).strip()
        if not name or name == ADDED_AT or name in record:
            continue
        record[name] = value
    return record

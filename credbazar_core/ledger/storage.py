"""
Ledger Storage
==============
One CSV file per calendar day under a storage root.

Writes go to a temporary file in the same directory and are moved over the
target with ``os.replace``, so readers never observe a half-written ledger.
"""

import csv
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import List, Sequence, Tuple

from .reconcile import Header, Row


class LedgerStorage:
    """Filesystem layout and whole-file I/O for daily ledgers."""

    def __init__(self, root, extension: str = "csv"):
        self.root = Path(root)
        self.extension = extension.lstrip(".")

    def filename_for(self, day: date) -> str:
        return f"{day:%Y-%m-%d}.{self.extension}"

    def path_for(self, day: date) -> Path:
        return self.root / self.filename_for(day)

    def exists(self, day: date) -> bool:
        return self.path_for(day).is_file()

    def list_files(self) -> List[Path]:
        """Ledger files in the storage root, oldest date first."""
        if not self.root.is_dir():
            return []
        return sorted(
            p for p in self.root.iterdir()
            if p.is_file() and p.suffix == f".{self.extension}"
        )

    def read_table(self, path: Path) -> Tuple[Header, List[Row]]:
        """
        Read a ledger as (header row, data rows).

        Returns an empty header for an empty file.
        """
        with open(path, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
        if not rows:
            return [], []
        return rows[0], rows[1:]

    def write_table(self, path: Path, header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Atomically replace ``path`` with the given header and rows."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_name = tempfile.mkstemp(
            prefix=path.name + ".", suffix=".tmp", dir=str(path.parent),
        )
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(header)
                writer.writerows(rows)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, str(path))
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)

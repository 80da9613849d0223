"""
Ledger Reconciliation
=====================
Pure helpers that keep a day's header and rows aligned.

Column order is append-monotonic: existing columns keep their position, new
columns are added at the tail, and ``added_at`` is always the last column.
"""

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

ADDED_AT = "added_at"

Header = List[str]
Row = List[str]


def to_cell(value: Any) -> str:
    """Render a scalar as a ledger cell; ``None`` becomes an empty cell."""
    if value is None:
        return ""
    return str(value)


def _clean_names(names: Iterable[Any]) -> Header:
    """Trim, drop empty names and ``added_at``, dedupe keeping first-seen order."""
    seen = set()
    out: Header = []
    for name in names:
        text = "" if name is None else str(name).strip()
        if not text or text == ADDED_AT or text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out


def build_header(keys: Iterable[Any]) -> Header:
    """Header for a brand-new ledger: cleaned keys plus trailing ``added_at``."""
    return _clean_names(keys) + [ADDED_AT]


def merge_headers(existing: Sequence[str], keys: Iterable[Any]) -> Header:
    """
    Union an existing header with a new row's keys.

    Args:
        existing: Current header of the file
        keys: Field names of the incoming row

    Returns:
        Existing columns in order, then unseen keys in first-seen order,
        then ``added_at``
    """
    base = _clean_names(existing)
    known = set(base)
    extra = [name for name in _clean_names(keys) if name not in known]
    return base + extra + [ADDED_AT]


def rows_to_records(header: Sequence[str], rows: Iterable[Sequence[str]]) -> List[Dict[str, str]]:
    """
    Map positional rows back onto column names.

    Rows with no non-empty cell are dropped. Cells beyond the header have no
    column and are discarded.
    """
    records: List[Dict[str, str]] = []
    for row in rows:
        record: Dict[str, str] = {}
        for index, column in enumerate(header):
            if not column:
                continue
            record[column] = row[index] if index < len(row) else ""
        if any(value != "" for value in record.values()):
            records.append(record)
    return records


def align_record(header: Sequence[str], record: Mapping[str, Any]) -> Row:
    """Lay a record out in header order, empty cell for every missing column."""
    return [to_cell(record.get(column)) for column in header]


def needs_repair(header_row: Sequence[str]) -> bool:
    """
    Detect a header shifted one column to the right.

    The signature is narrow on purpose: first cell empty or missing and a
    non-empty second cell. Anything else is left alone.
    """
    first = header_row[0].strip() if len(header_row) > 0 and header_row[0] else ""
    second = header_row[1].strip() if len(header_row) > 1 and header_row[1] else ""
    return first == "" and second != ""


def _trim_trailing(cells: Sequence[str], keep: int) -> Row:
    out = list(cells)
    while len(out) > keep and out[-1] == "":
        out.pop()
    return out


def _shifted_header(header_row: Sequence[str]) -> Header:
    return _trim_trailing([cell.strip() for cell in header_row[1:]], 0)


def overflow_rows(header_row: Sequence[str], rows: Sequence[Sequence[str]]) -> int:
    """Count rows holding values past the width :func:`shift_left` will keep."""
    width = len(_shifted_header(header_row))
    return sum(1 for row in rows if any(cell != "" for cell in row[1 + width:]))


def shift_left(header_row: Sequence[str], rows: Sequence[Sequence[str]]) -> Tuple[Header, List[Row]]:
    """
    Undo a one-column right shift of a whole table.

    The spurious leading header cell is dropped and every data row loses its
    first cell. Rows are then cut or padded to exactly the corrected header
    width; cells past the header have no column and are discarded.
    """
    header = _shifted_header(header_row)
    width = len(header)

    fixed: List[Row] = []
    for row in rows:
        shifted = list(row[1:1 + width])
        shifted.extend([""] * (width - len(shifted)))
        fixed.append(shifted)
    return header, fixed

"""Load statement transactions from a simple CSV export.

Expected header (case-insensitive, extra columns ignored):
``Date, Description, Amount``

Mapping rules:
- ``date``: ``MM/DD/YYYY`` or ``MM/DD/YY`` normalized to ``YYYY-MM-DD``; any
  other non-empty value is kept as-is (ISO dates pass through unchanged).
- ``description``: internal whitespace and newlines collapsed.
- ``amount``: currency symbols, thousands separators and spaces removed;
  ``(12.50)`` is read as ``-12.50``.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from os import PathLike
from pathlib import Path

from .models import Transaction

REQUIRED_HEADERS: tuple[str, ...] = ("date", "description", "amount")


def _clean_text(value: str | None) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def _normalize_date(value: str | None) -> str:
    s = (value or "").strip()
    for fmt in ("%m/%d/%Y", "%m/%d/%y"):
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    return s


def _parse_amount(value: str | None, *, row_no: int) -> Decimal:
    s = (value or "").strip()
    negative = s.startswith("(") and s.endswith(")")
    s = re.sub(r"[()$€£₹,\s]", "", s)
    try:
        amount = Decimal(s)
    except InvalidOperation as e:
        raise csv.Error(f"row {row_no}: invalid amount {value!r}") from e
    return -abs(amount) if negative else amount


def to_transactions(rows: Iterable[Mapping[str, str | None]]) -> Iterator[Transaction]:
    """Convert CSV rows (keys already lower-cased) to :class:`Transaction`."""

    for row_no, row in enumerate(rows, start=2):
        yield Transaction(
            date=_normalize_date(row.get("date")),
            description=_clean_text(row.get("description")),
            amount=_parse_amount(row.get("amount"), row_no=row_no),
        )


def load_transactions_from_csv(csv_path: str | PathLike[str]) -> list[Transaction]:
    """Read ``csv_path`` and return its transactions in file order.

    Raises ``csv.Error`` when the header is missing required columns or a row
    has an unparseable amount.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise csv.Error(f"CSV appears to have no header row: {csv_path}")
        headers = {h.strip().lower(): h for h in reader.fieldnames if h}
        missing = [h for h in REQUIRED_HEADERS if h not in headers]
        if missing:
            raise csv.Error("CSV header mismatch. Missing columns: " + ", ".join(missing))
        rows = ({key: row.get(orig) for key, orig in headers.items()} for row in reader)
        return list(to_transactions(rows))


__all__ = ["load_transactions_from_csv", "to_transactions"]

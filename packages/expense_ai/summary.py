"""Category-level expense summaries, month filtering and manual corrections.

These helpers operate on already-categorized transactions and back the
dashboard views: totals per category, the list of statement months, and
one-off category edits made by the user after the automatic pass.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import TypeVar

from .categories import DEFAULT_CATEGORY
from .logging_setup import get_logger
from .models import AnnotatedTransaction, CategoryTotal, Transaction

_logger = get_logger("expense_ai.summary")

T = TypeVar("T", AnnotatedTransaction, Transaction)


def summarize_by_category(
    items: Iterable[AnnotatedTransaction],
    *,
    default_category: str = DEFAULT_CATEGORY,
) -> list[CategoryTotal]:
    """Sum expenses per category, largest first.

    Only expenses (negative amounts) count, as absolute values. A blank
    category is counted under ``default_category``. Ties are ordered by name.
    """

    totals: dict[str, Decimal] = {}
    for item in items:
        if item.amount >= 0:
            continue
        category = item.category.strip() or default_category
        totals[category] = totals.get(category, Decimal("0")) + abs(item.amount)
    return [
        CategoryTotal(category=c, total=t)
        for c, t in sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def total_expenses(items: Iterable[AnnotatedTransaction | Transaction]) -> Decimal:
    """Absolute sum of all negative amounts."""

    return sum((abs(i.amount) for i in items if i.amount < 0), Decimal("0"))


def _parse_date(value: str) -> date | None:
    s = value.strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        return None


def month_key(value: str) -> str | None:
    """Return ``YYYY-MM`` for an ISO date string, or ``None`` when unparseable."""

    parsed = _parse_date(value)
    return parsed.strftime("%Y-%m") if parsed else None


def available_months(items: Iterable[AnnotatedTransaction | Transaction]) -> list[str]:
    """Unique ``YYYY-MM`` keys present in ``items``, newest first."""

    months: set[str] = set()
    for item in items:
        key = month_key(item.date)
        if key is None:
            _logger.warning(
                "summary:invalid_date date=%r description=%r", item.date, item.description
            )
            continue
        months.add(key)
    return sorted(months, reverse=True)


def filter_by_month(items: Iterable[T], month: str | None) -> list[T]:
    """Keep items dated within ``month`` (``YYYY-MM``); ``None`` keeps everything.

    Items with unparseable dates are excluded whenever a month is given.
    """

    if month is None:
        return list(items)
    return [item for item in items if month_key(item.date) == month]


def update_category(
    items: Sequence[AnnotatedTransaction],
    index: int,
    new_category: str | None,
    *,
    default_category: str = DEFAULT_CATEGORY,
) -> list[AnnotatedTransaction]:
    """Return a copy of ``items`` with one position recategorized.

    A blank or missing ``new_category`` falls back to ``default_category``.
    Raises ``IndexError`` for an out-of-range ``index``.
    """

    if not 0 <= index < len(items):
        raise IndexError(f"transaction index out of range: {index}")
    category = (new_category or "").strip() or default_category
    updated = list(items)
    updated[index] = replace(items[index], category=category)
    _logger.info("summary:category_updated index=%d category=%s", index, category)
    return updated


__all__ = [
    "available_months",
    "filter_by_month",
    "month_key",
    "summarize_by_category",
    "total_expenses",
    "update_category",
]

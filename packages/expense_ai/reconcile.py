"""Merge category results back onto the original transactions."""

from __future__ import annotations

from collections.abc import Sequence

from .logging_setup import get_logger
from .models import (
    AnnotatedTransaction,
    CategoryResult,
    Reconciliation,
    ReconcileSummary,
    Transaction,
)

_logger = get_logger("expense_ai.reconcile")


def reconcile(
    transactions: Sequence[Transaction],
    results: Sequence[CategoryResult],
    default_category: str,
) -> Reconciliation:
    """Pair ``transactions`` with ``results`` positionally.

    A non-blank result category is attached (trimmed) and counted as succeeded;
    a null or blank one is replaced by ``default_category`` and counted as defaulted.
    Raises ``ValueError`` when the two sequences differ in length.
    """

    if len(transactions) != len(results):
        raise ValueError(
            f"reconcile requires aligned inputs: {len(transactions)} transactions, "
            f"{len(results)} results"
        )
    if not default_category.strip():
        raise ValueError("default_category must be non-empty")

    annotated: list[AnnotatedTransaction] = []
    succeeded = 0
    for tx, result in zip(transactions, results, strict=True):
        category = result.category.strip() if result.category else ""
        if category:
            annotated.append(AnnotatedTransaction(transaction=tx, category=category))
            succeeded += 1
        else:
            annotated.append(AnnotatedTransaction(transaction=tx, category=default_category))

    summary = ReconcileSummary(succeeded=succeeded, defaulted=len(annotated) - succeeded)
    _logger.info(
        "reconcile:summary succeeded=%d defaulted=%d", summary.succeeded, summary.defaulted
    )
    return Reconciliation(transactions=annotated, summary=summary)


def default_all(transactions: Sequence[Transaction], default_category: str) -> Reconciliation:
    """Assign ``default_category`` to every transaction (total-failure fallback)."""

    annotated = [AnnotatedTransaction(transaction=tx, category=default_category) for tx in transactions]
    return Reconciliation(
        transactions=annotated,
        summary=ReconcileSummary(succeeded=0, defaulted=len(annotated)),
    )


__all__ = ["default_all", "reconcile"]

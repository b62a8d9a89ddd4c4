"""Data models and type aliases for ``expense_ai``.

The categorization core operates on a positionally indexed sequence of
:class:`Transaction` records. Every stage downstream of a model call works on
fixed-length lists of :class:`CategoryResult` aligned 1:1 with its input; the
raw, untrusted model output is represented by the :data:`RawModelResponse`
variant until the validator turns it into that strict shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Core record
# ---------------------------------------------------------------------------


class Transaction(BaseModel):
    """A single dated, described, signed-amount statement record.

    ``amount`` is negative for debits (expenses) and positive for credits
    (income). ``date`` is expected to be ISO-8601 (``YYYY-MM-DD``) but is not
    guaranteed by upstream parsers, so it stays a plain string. ``id`` is an
    optional presentation-layer identity; the categorization core never reads
    it and never sends it to the model.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    date: str
    description: str
    amount: Decimal
    id: str | None = None


@dataclass(frozen=True, slots=True)
class CategoryResult:
    """Outcome of categorizing one position.

    ``None`` means the pipeline could not determine or validate a category for
    this position. It is never an empty string.
    """

    category: str | None = None


NULL_RESULT = CategoryResult(category=None)


def null_results(n: int) -> list[CategoryResult]:
    """Return ``n`` null-category placeholders."""

    return [NULL_RESULT] * n


@dataclass(frozen=True, slots=True)
class AnnotatedTransaction:
    """A transaction paired with its effective category (never ``None``)."""

    transaction: Transaction
    category: str

    @property
    def date(self) -> str:
        return self.transaction.date

    @property
    def description(self) -> str:
        return self.transaction.description

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount


# ---------------------------------------------------------------------------
# Raw model response (untrusted)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Unparsed:
    """Model text that did not decode to a JSON array."""

    text: str


@dataclass(frozen=True, slots=True)
class ArrayOfUnknown:
    """A decoded JSON array whose elements have not been checked yet."""

    items: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Valid:
    """Results already in the strict shape (e.g., from an in-process model)."""

    results: tuple[CategoryResult, ...]


RawModelResponse: TypeAlias = Unparsed | ArrayOfUnknown | Valid


# ---------------------------------------------------------------------------
# Per-chunk outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChunkOk:
    results: tuple[CategoryResult, ...]


@dataclass(frozen=True, slots=True)
class ChunkFailed:
    """A chunk whose model call failed after all retries.

    ``error`` holds the exception class name only; raw transport or model
    messages are kept out of anything that may reach a user.
    """

    size: int
    error: str

    @property
    def results(self) -> tuple[CategoryResult, ...]:
        return tuple(null_results(self.size))


ChunkOutcome: TypeAlias = ChunkOk | ChunkFailed


class AggregateResult(NamedTuple):
    """Concatenated per-chunk results plus the outcome of each chunk."""

    results: list[CategoryResult]
    outcomes: list[ChunkOutcome]

    @property
    def failed_chunks(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, ChunkFailed))

    @property
    def succeeded_chunks(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, ChunkOk))


# ---------------------------------------------------------------------------
# Reconciliation and reporting
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReconcileSummary:
    succeeded: int
    defaulted: int

    @property
    def total(self) -> int:
        return self.succeeded + self.defaulted

    def message(self) -> str:
        return f"{self.succeeded} categorized, {self.defaulted} defaulted"


@dataclass(frozen=True, slots=True)
class Reconciliation:
    transactions: list[AnnotatedTransaction]
    summary: ReconcileSummary


@dataclass(frozen=True, slots=True)
class CategorizationReport:
    """What the caller of a full run gets back.

    ``failed`` is True only for a total pipeline failure, in which case every
    transaction carries the default category and ``error_message`` holds a
    user-facing explanation.
    """

    transactions: list[AnnotatedTransaction]
    summary: ReconcileSummary
    failed: bool = False
    error_message: str | None = None

    @property
    def notification(self) -> str:
        if self.failed:
            return f"{self.error_message} ({self.summary.message()})"
        return f"Categorization complete: {self.summary.message()}."


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    category: str
    total: Decimal

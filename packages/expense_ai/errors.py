"""Exceptions that escape the categorization pipeline.

Everything below a total failure (malformed responses, length mismatches,
per-item junk, single-chunk transport errors) is recovered inside the pipeline
and never raised to callers.
"""

from __future__ import annotations


class ExpenseAIError(Exception):
    """Base class for package errors."""


class CategorizationFailed(ExpenseAIError):
    """No chunk could be categorized; the run produced nothing usable."""

    def __init__(self, message: str, *, total: int, failed_chunks: int) -> None:
        super().__init__(message)
        self.total = total
        self.failed_chunks = failed_chunks


class CategorizationCancelled(ExpenseAIError):
    """The caller cancelled the run; partial results were discarded."""


class InsightGenerationFailed(ExpenseAIError):
    """The model returned no usable spending summary."""


__all__ = [
    "CategorizationCancelled",
    "CategorizationFailed",
    "ExpenseAIError",
    "InsightGenerationFailed",
]

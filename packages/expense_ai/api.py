"""Public orchestration for the ``expense_ai`` package.

Two entrypoints with different failure contracts:

- :func:`categorize_transactions` runs chunk -> aggregate -> reconcile and
  raises :class:`~expense_ai.errors.CategorizationFailed` when no chunk could be
  categorized at all.
- :func:`categorize_statement` is the caller-level wrapper: on a total failure
  it defaults every transaction and returns a report flagged ``failed`` with a
  user-facing message instead of raising.

Cancellation (:class:`~expense_ai.errors.CategorizationCancelled`) propagates
from both.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from .aggregate import aggregate_all
from .batching import chunk
from .classifier import ClassifierInvoker, OpenAIResponsesModel, TextModel
from .config import CategorizerSettings
from .errors import CategorizationCancelled, CategorizationFailed
from .logging_setup import get_logger
from .models import CategorizationReport, Reconciliation, Transaction
from .reconcile import default_all, reconcile

_logger = get_logger("expense_ai.api")


def _resolve_model(model: TextModel | None, settings: CategorizerSettings) -> TextModel:
    if model is not None:
        return model
    return OpenAIResponsesModel(model=settings.model, timeout=settings.request_timeout)


def categorize_transactions(
    transactions: Iterable[Transaction],
    *,
    model: TextModel | None = None,
    settings: CategorizerSettings | None = None,
    cancel_event: threading.Event | None = None,
) -> Reconciliation:
    """Categorize ``transactions`` and return them annotated, in input order.

    Parameters
    ----------
    transactions:
        Parsed statement records. Materialized once; never mutated.
    model:
        Model boundary; defaults to :class:`OpenAIResponsesModel` built from
        ``settings``.
    settings:
        Pipeline tunables; defaults to :meth:`CategorizerSettings.from_env`.
    cancel_event:
        Set it from another thread to abandon the run.

    Raises
    ------
    CategorizationFailed
        The input was non-empty and every chunk call failed.
    CategorizationCancelled
        ``cancel_event`` was set before the run finished.
    """

    settings = settings if settings is not None else CategorizerSettings.from_env()
    original_seq = list(transactions)
    n_total = len(original_seq)
    if n_total == 0:
        return reconcile([], [], settings.default_category)

    chunks = chunk(original_seq, settings.max_chunk_size)
    _logger.info(
        "categorize:start num_transactions=%d chunks=%d chunk_size=%d",
        n_total,
        len(chunks),
        settings.max_chunk_size,
    )

    invoker = ClassifierInvoker(_resolve_model(model, settings))
    aggregated = aggregate_all(
        chunks,
        invoker,
        concurrency=settings.concurrency,
        max_attempts=settings.max_attempts,
        backoff_schedule=settings.backoff_schedule,
        jitter_pct=settings.jitter_pct,
        cancel_event=cancel_event,
    )

    if aggregated.succeeded_chunks == 0:
        raise CategorizationFailed(
            f"all {aggregated.failed_chunks} chunk call(s) failed",
            total=n_total,
            failed_chunks=aggregated.failed_chunks,
        )

    return reconcile(original_seq, aggregated.results, settings.default_category)


def categorize_statement(
    transactions: Iterable[Transaction],
    *,
    model: TextModel | None = None,
    settings: CategorizerSettings | None = None,
    cancel_event: threading.Event | None = None,
) -> CategorizationReport:
    """Categorize with the caller-level fallback applied.

    Partial failures come back as a successful report with a higher
    ``defaulted`` count. A total failure (or any unexpected error past all
    recovery) defaults every transaction to ``settings.default_category`` and
    sets ``failed=True``; the ``error_message`` never includes raw model or
    transport text.
    """

    settings = settings if settings is not None else CategorizerSettings.from_env()
    original_seq = list(transactions)
    try:
        outcome = categorize_transactions(
            original_seq, model=model, settings=settings, cancel_event=cancel_event
        )
    except CategorizationCancelled:
        raise
    except Exception as e:  # noqa: BLE001 - total failure is reported, not raised
        _logger.error(
            "categorize:total_failure num_transactions=%d error=%s",
            len(original_seq),
            e.__class__.__name__,
            exc_info=not isinstance(e, CategorizationFailed),
        )
        fallback = default_all(original_seq, settings.default_category)
        return CategorizationReport(
            transactions=fallback.transactions,
            summary=fallback.summary,
            failed=True,
            error_message=(
                "AI categorization failed. All transactions were set to "
                f"'{settings.default_category}'; please categorize manually."
            ),
        )

    return CategorizationReport(transactions=outcome.transactions, summary=outcome.summary)


__all__ = ["categorize_statement", "categorize_transactions"]

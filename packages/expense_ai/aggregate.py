"""Chunk aggregation: one model call per chunk, failures isolated per chunk.

Public API:
    - :func:`aggregate_all`

Each chunk is sent through the :class:`~expense_ai.classifier.ClassifierInvoker`
and then :func:`~expense_ai.validation.validate`. A chunk whose call keeps
failing becomes a :class:`~expense_ai.models.ChunkFailed` outcome (all-null
results) and the remaining chunks carry on. Results are reassembled in chunk
order regardless of completion order.
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Sequence
from concurrent.futures import CancelledError

from .classifier import ClassifierInvoker, is_retryable
from .errors import CategorizationCancelled
from .logging_setup import get_logger
from .models import (
    AggregateResult,
    CategoryResult,
    ChunkFailed,
    ChunkOk,
    ChunkOutcome,
    Transaction,
    null_results,
)
from .pmap import p_map
from .validation import validate

_CONCURRENCY: int = 4
_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20

_logger = get_logger("expense_ai.aggregate")


def _sleep_backoff(attempt_no: int, schedule: Sequence[float], jitter_pct: float) -> None:
    if not schedule:
        return
    base = schedule[min(attempt_no - 1, len(schedule) - 1)]
    jitter = base * jitter_pct
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


def _categorize_chunk(
    chunk_index: int,
    chunk: Sequence[Transaction],
    *,
    invoker: ClassifierInvoker,
    max_attempts: int,
    backoff_schedule: Sequence[float],
    jitter_pct: float,
    cancel_event: threading.Event | None,
) -> ChunkOutcome:
    count = len(chunk)
    _logger.info("aggregate:chunk_start chunk_index=%d num_transactions=%d", chunk_index, count)

    attempt = 1
    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise CancelledError(f"chunk {chunk_index} cancelled before dispatch")
        t0 = time.perf_counter()
        try:
            raw = invoker.invoke(chunk)
        except Exception as e:  # noqa: BLE001 - any call failure is isolated to this chunk
            dt_ms = (time.perf_counter() - t0) * 1000.0
            if attempt >= max_attempts or not is_retryable(e):
                _logger.error(
                    (
                        "aggregate:chunk_failed chunk_index=%d num_transactions=%d "
                        "attempts=%d latency_ms=%.2f error=%s"
                    ),
                    chunk_index,
                    count,
                    attempt,
                    dt_ms,
                    e.__class__.__name__,
                )
                return ChunkFailed(size=count, error=e.__class__.__name__)
            _logger.warning(
                (
                    "aggregate:chunk_retry chunk_index=%d num_transactions=%d "
                    "latency_ms=%.2f error=%s attempt=%d"
                ),
                chunk_index,
                count,
                dt_ms,
                e.__class__.__name__,
                attempt,
            )
            _sleep_backoff(attempt, backoff_schedule, jitter_pct)
            attempt += 1
            continue

        results = validate(raw, count)
        dt_ms = (time.perf_counter() - t0) * 1000.0
        _logger.info(
            "aggregate:chunk_done chunk_index=%d num_transactions=%d nulls=%d latency_ms=%.2f",
            chunk_index,
            count,
            sum(1 for r in results if r.category is None),
            dt_ms,
        )
        return ChunkOk(results=tuple(results))


def _enforce_length(results: list[CategoryResult], expected: int) -> list[CategoryResult]:
    if len(results) == expected:
        return results
    _logger.warning(
        "aggregate:length_drift expected=%d got=%d action=%s",
        expected,
        len(results),
        "truncate" if len(results) > expected else "pad",
    )
    if len(results) > expected:
        return results[:expected]
    return results + null_results(expected - len(results))


def aggregate_all(
    chunks: Sequence[Sequence[Transaction]],
    invoker: ClassifierInvoker,
    *,
    concurrency: int = _CONCURRENCY,
    max_attempts: int = _MAX_ATTEMPTS,
    backoff_schedule: Sequence[float] = _BACKOFF_SCHEDULE_SEC,
    jitter_pct: float = _JITTER_PCT,
    cancel_event: threading.Event | None = None,
) -> AggregateResult:
    """Categorize every chunk and concatenate the results in chunk order.

    Parameters
    ----------
    chunks:
        Output of :func:`~expense_ai.batching.chunk`.
    invoker:
        Issues the model call for one chunk.
    concurrency:
        Maximum number of chunk calls in flight (``1`` is sequential).
    max_attempts, backoff_schedule, jitter_pct:
        Retry policy for retryable errors (HTTP 429/5xx, connection errors).
    cancel_event:
        When set, no further chunk calls start and
        :class:`~expense_ai.errors.CategorizationCancelled` is raised.

    Returns
    -------
    AggregateResult
        ``results`` always has ``sum(len(c) for c in chunks)`` entries.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be a positive integer")

    expected = sum(len(c) for c in chunks)
    if not chunks:
        return AggregateResult(results=[], outcomes=[])

    def _map_chunk(indexed: tuple[int, Sequence[Transaction]]) -> ChunkOutcome:
        chunk_index, chunk_items = indexed
        return _categorize_chunk(
            chunk_index,
            chunk_items,
            invoker=invoker,
            max_attempts=max_attempts,
            backoff_schedule=backoff_schedule,
            jitter_pct=jitter_pct,
            cancel_event=cancel_event,
        )

    try:
        outcomes: list[ChunkOutcome] = p_map(
            list(enumerate(chunks)),
            _map_chunk,
            concurrency=concurrency,
            cancel_event=cancel_event,
        )
    except CancelledError as e:
        _logger.info("aggregate:cancelled chunks=%d", len(chunks))
        raise CategorizationCancelled("categorization cancelled by caller") from e

    results: list[CategoryResult] = []
    for outcome in outcomes:
        results.extend(outcome.results)
    results = _enforce_length(results, expected)

    failed = sum(1 for o in outcomes if isinstance(o, ChunkFailed))
    _logger.info(
        "aggregate:summary chunks=%d failed_chunks=%d num_transactions=%d",
        len(outcomes),
        failed,
        expected,
    )
    return AggregateResult(results=results, outcomes=outcomes)


__all__ = ["aggregate_all"]

"""A small abstraction over ThreadPoolExecutor inspired by ``p-map``.

- A single :func:`p_map` call with an iterable, a mapper and a ``concurrency``
  cap.
- Output preserves input order regardless of completion order; each result is
  stored by input index, never appended.
- The first mapper error propagates and not-yet-started work is cancelled.
- An optional ``cancel_event`` abandons the run: no new work starts, the pool
  is shut down without waiting for in-flight calls, and
  ``concurrent.futures.CancelledError`` is raised.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, CancelledError, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")

# How often a waiting caller re-checks ``cancel_event``.
_CANCEL_POLL_SEC: float = 0.05


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
    cancel_event: threading.Event | None = None,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` calls in flight."""

    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    # Not pre-materialized so large inputs stream into the window.
    it = enumerate(iterable)

    results: dict[int, OutT] = {}
    future_to_idx: dict[Future[OutT], int] = {}
    submitted = 0
    exhausted = False

    def _cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    def _submit(pool: ThreadPoolExecutor) -> Future[OutT] | None:
        nonlocal submitted, exhausted
        if _cancelled():
            return None
        try:
            idx, item = next(it)
        except StopIteration:
            exhausted = True
            return None
        fut = pool.submit(mapper, item)
        future_to_idx[fut] = idx
        submitted += 1
        return fut

    pool = ThreadPoolExecutor(max_workers=concurrency)
    abandon = False
    try:
        active: set[Future[OutT]] = set()
        for _ in range(concurrency):
            fut = _submit(pool)
            if fut is None:
                break
            active.add(fut)

        while active:
            timeout = _CANCEL_POLL_SEC if cancel_event is not None else None
            done, active = wait(active, timeout=timeout, return_when=FIRST_COMPLETED)
            if _cancelled():
                abandon = True
                raise CancelledError("p_map: cancelled by caller")

            for fut in done:
                idx = future_to_idx.pop(fut)
                try:
                    results[idx] = fut.result()
                except Exception:
                    abandon = True
                    raise

            # Top up the window by one task per completion.
            for _ in range(len(done)):
                fut = _submit(pool)
                if fut is None:
                    break
                active.add(fut)

        # Input left unsubmitted means the window stopped on cancellation.
        if not exhausted:
            abandon = True
            raise CancelledError("p_map: cancelled by caller")
    finally:
        pool.shutdown(wait=not abandon, cancel_futures=True)

    return [results[i] for i in range(submitted)]


__all__ = ["p_map"]

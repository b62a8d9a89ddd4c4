"""Runtime settings for the categorization pipeline.

Defaults live on :class:`CategorizerSettings`; :meth:`CategorizerSettings.from_env`
applies ``EXPENSE_AI_*`` overrides. Loading a ``.env`` file is the entrypoint's
job (the CLI does it via ``python-dotenv``); this module only reads
``os.environ``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any

from .categories import DEFAULT_CATEGORY
from .logging_setup import get_logger

_logger = get_logger("expense_ai.config")

_MODEL_DEFAULT: str = "gpt-5"
_CHUNK_SIZE_DEFAULT: int = 100
_CONCURRENCY_DEFAULT: int = 4
_MAX_ATTEMPTS_DEFAULT: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20


@dataclass(frozen=True, slots=True)
class CategorizerSettings:
    """Tunables for one categorization run.

    Attributes
    ----------
    model:
        Model name passed to the OpenAI Responses API.
    max_chunk_size:
        Maximum number of transactions per model call.
    concurrency:
        Maximum number of chunk calls in flight at once.
    max_attempts:
        Attempts per chunk for retryable errors (HTTP 429/5xx, connection
        errors). ``1`` disables retries.
    backoff_schedule:
        Base sleep in seconds before attempt 2, 3, ...; the last value repeats.
    jitter_pct:
        Random jitter applied to each backoff, as a fraction of the base.
    default_category:
        Category applied when classification fails or is withheld.
    request_timeout:
        Optional per-call transport timeout in seconds.
    """

    model: str = _MODEL_DEFAULT
    max_chunk_size: int = _CHUNK_SIZE_DEFAULT
    concurrency: int = _CONCURRENCY_DEFAULT
    max_attempts: int = _MAX_ATTEMPTS_DEFAULT
    backoff_schedule: tuple[float, ...] = field(default=_BACKOFF_SCHEDULE_SEC)
    jitter_pct: float = _JITTER_PCT
    default_category: str = DEFAULT_CATEGORY
    request_timeout: float | None = None

    def __post_init__(self) -> None:
        for name in ("max_chunk_size", "concurrency", "max_attempts"):
            val = getattr(self, name)
            # Booleans are ints; reject them explicitly.
            if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
                raise ValueError(f"CategorizerSettings.{name} must be a positive integer")
        if not self.default_category.strip():
            raise ValueError("CategorizerSettings.default_category must be non-empty")
        if not self.model.strip():
            raise ValueError("CategorizerSettings.model must be non-empty")
        if any(b < 0 for b in self.backoff_schedule):
            raise ValueError("CategorizerSettings.backoff_schedule must be non-negative")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError("CategorizerSettings.request_timeout must be positive when set")

    @classmethod
    def from_env(cls, **overrides: Any) -> CategorizerSettings:
        """Build settings from defaults, then env vars, then ``overrides``.

        ``None`` values in ``overrides`` are ignored so CLI options can be
        passed straight through.
        """

        values: dict[str, Any] = {}

        model = os.getenv("EXPENSE_AI_MODEL")
        if model and model.strip():
            values["model"] = model.strip()

        for env_name, key in (
            ("EXPENSE_AI_CHUNK_SIZE", "max_chunk_size"),
            ("EXPENSE_AI_MAX_WORKERS", "concurrency"),
            ("EXPENSE_AI_MAX_ATTEMPTS", "max_attempts"),
        ):
            parsed = _positive_int_env(env_name)
            if parsed is not None:
                values[key] = parsed

        default_category = os.getenv("EXPENSE_AI_DEFAULT_CATEGORY")
        if default_category and default_category.strip():
            values["default_category"] = default_category.strip()

        timeout = _positive_float_env("EXPENSE_AI_REQUEST_TIMEOUT")
        if timeout is not None:
            values["request_timeout"] = timeout

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> CategorizerSettings:
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _positive_int_env(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        val = int(raw)
    except ValueError:
        _logger.warning("config:ignored_env name=%s value=%r reason=not_an_int", name, raw)
        return None
    if val <= 0:
        _logger.warning("config:ignored_env name=%s value=%r reason=not_positive", name, raw)
        return None
    return val


def _positive_float_env(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        val = float(raw)
    except ValueError:
        _logger.warning("config:ignored_env name=%s value=%r reason=not_a_number", name, raw)
        return None
    if val <= 0:
        _logger.warning("config:ignored_env name=%s value=%r reason=not_positive", name, raw)
        return None
    return val


__all__ = ["CategorizerSettings"]

"""Response validation and repair.

:func:`validate` is the only gate between untrusted model output and the rest
of the pipeline. It never raises and always returns exactly ``expected_length``
results, so every downstream stage can rely on positional alignment.

Policy, in order:

1. Not an array -> ``expected_length`` null results.
2. Wrong-length array -> truncate extras, pad missing positions with null.
3. Per item, keep ``category`` when it is a string that is non-empty after
   trimming; anything else becomes null.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .logging_setup import get_logger
from .models import (
    ArrayOfUnknown,
    CategoryResult,
    RawModelResponse,
    Unparsed,
    Valid,
    null_results,
)

_logger = get_logger("expense_ai.validation")


class _CategoryItem(BaseModel):
    """Typed view of one response element; only ``category`` matters."""

    model_config = ConfigDict(strict=True, extra="ignore")

    category: str | None = None

    @field_validator("category")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        s = v.strip()
        return s or None


def _coerce_item(item: Any) -> CategoryResult:
    if isinstance(item, CategoryResult):
        return CategoryResult(category=_clean(item.category))
    if not isinstance(item, Mapping):
        return CategoryResult(category=None)
    try:
        parsed = _CategoryItem.model_validate(dict(item))
    except ValidationError:
        return CategoryResult(category=None)
    return CategoryResult(category=parsed.category)


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def validate(raw: RawModelResponse | Any, expected_length: int) -> list[CategoryResult]:
    """Return exactly ``expected_length`` results salvaged from ``raw``.

    ``raw`` is normally a :data:`RawModelResponse`; a bare ``list`` is treated
    like :class:`ArrayOfUnknown` and any other value like :class:`Unparsed`.
    """

    n = max(0, expected_length)

    if isinstance(raw, Valid):
        items: tuple[Any, ...] | list[Any] = raw.results
    elif isinstance(raw, ArrayOfUnknown):
        items = raw.items
    elif isinstance(raw, list):
        items = raw
    else:
        kind = "unparsed_text" if isinstance(raw, Unparsed) else type(raw).__name__
        _logger.warning("validate:not_an_array expected=%d kind=%s", n, kind)
        return null_results(n)

    if len(items) != n:
        _logger.warning("validate:length_mismatch expected=%d got=%d", n, len(items))

    out = [_coerce_item(item) for item in items[:n]]
    out.extend(null_results(n - len(out)))

    invalid = sum(1 for r in out[: len(items)] if r.category is None)
    if invalid:
        _logger.warning("validate:invalid_items count=%d expected=%d", invalid, n)
    return out


__all__ = ["validate"]

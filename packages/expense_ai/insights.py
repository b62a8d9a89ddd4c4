"""Narrative spending summary generated by the model."""

from __future__ import annotations

from collections.abc import Sequence

from . import prompting
from .classifier import OpenAIResponsesModel, TextModel
from .errors import InsightGenerationFailed
from .logging_setup import get_logger
from .models import AnnotatedTransaction

_logger = get_logger("expense_ai.insights")


def summarize_spending(
    items: Sequence[AnnotatedTransaction],
    *,
    model: TextModel | None = None,
) -> str:
    """Return a 2-3 sentence summary of spending across ``items``.

    Raises :class:`InsightGenerationFailed` when there is nothing to summarize
    or the model returns blank text. Transport errors propagate unchanged.
    """

    if not items:
        raise InsightGenerationFailed("no transactions to summarize")

    text_model = model if model is not None else OpenAIResponsesModel()
    text = text_model.complete(
        prompting.build_summary_instructions(),
        prompting.build_summary_content(items),
    )
    summary = text.strip() if isinstance(text, str) else ""
    if not summary:
        _logger.warning("insights:empty_summary num_transactions=%d", len(items))
        raise InsightGenerationFailed("model returned an empty spending summary")
    return summary


__all__ = ["summarize_spending"]

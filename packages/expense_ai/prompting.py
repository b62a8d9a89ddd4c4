"""Prompt construction for transaction categorization.

This module builds:
- A deterministic JSON serialization of a chunk with a fixed field order and
  chunk-relative ``idx`` values.
- The system instructions and the user content for the categorization call.
- The instructions and user content for the narrative spending summary.

Nothing here talks to the model; see :mod:`expense_ai.classifier`.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from .categories import CATEGORY_TAXONOMY, Category
from .models import AnnotatedTransaction, Transaction

TRANSACTION_FIELD_ORDER: tuple[str, ...] = ("idx", "date", "description", "amount")

BEGIN_MARKER = "BEGIN_TRANSACTIONS_JSON"
END_MARKER = "END_TRANSACTIONS_JSON"


def serialize_chunk_to_json(chunk: Sequence[Transaction]) -> str:
    """Serialize a chunk to a JSON array with a fixed field order.

    Field order per object is exactly ``idx, date, description, amount``.
    ``idx`` is the chunk-relative position (0..n-1).
    """

    arr: list[dict[str, Any]] = []
    for idx, tx in enumerate(chunk):
        item = {
            "idx": idx,
            "date": tx.date,
            "description": tx.description,
            "amount": float(tx.amount),
        }
        arr.append({key: item[key] for key in TRANSACTION_FIELD_ORDER})
    return json.dumps(arr, ensure_ascii=False)


def build_system_instructions() -> str:
    """Return the role instructions for the categorization call."""

    return (
        "You are an expert financial assistant that categorizes bank statement "
        "transactions. Assign exactly one category to every transaction you are given. "
        "Output JSON only: a single JSON array, no prose and no Markdown."
    )


def _taxonomy_lines(taxonomy: Sequence[Category]) -> list[str]:
    return [f"- {c.name}: {c.description}" for c in taxonomy]


def build_user_content(
    chunk: Sequence[Transaction],
    taxonomy: Sequence[Category] = CATEGORY_TAXONOMY,
) -> str:
    """Build the user content for one chunk.

    The text embeds the taxonomy with descriptions, the ordering and length
    rules, a worked example, and the chunk JSON delimited by
    ``BEGIN_TRANSACTIONS_JSON`` / ``END_TRANSACTIONS_JSON``.
    """

    n = len(chunk)
    lines: list[str] = [
        "Use one of the following categories for each transaction:",
        *_taxonomy_lines(taxonomy),
        "",
        "Rules:",
        "- Categorize each transaction from its description and amount.",
        "- For deposits or positive amounts, use 'Income'.",
        "- When you are unsure, use 'Other'.",
        f"- Respond with a JSON array of exactly {n} objects, one per transaction,",
        "  in the same order as the input (the object at position i is for idx i).",
        '- Each object has exactly one key, "category", whose value is a category name.',
        "- Do not skip, merge, reorder or add items.",
        "",
        "Example:",
        "Input:",
        '[{"idx": 0, "date": "2024-07-01", "description": "Coffee Shop", "amount": -5.5},',
        ' {"idx": 1, "date": "2024-07-02", "description": "Salary Deposit", "amount": 2500.0}]',
        "Output:",
        '[{"category": "Food"}, {"category": "Income"}]',
        "",
        f"Transactions ({n} items):",
        BEGIN_MARKER,
        serialize_chunk_to_json(chunk),
        END_MARKER,
    ]
    return "\n".join(lines)


def build_summary_instructions() -> str:
    return (
        "You are a financial analyst. Write a brief summary (2-3 sentences) of the "
        "user's spending patterns. Highlight the top spending categories and offer one "
        "simple observation or suggestion. Focus on expenses (negative amounts). "
        "Respond with plain text only."
    )


def build_summary_content(items: Sequence[AnnotatedTransaction]) -> str:
    """Render categorized transactions one per line for the summary call."""

    lines = ["Transactions:"]
    for item in items:
        lines.append(
            f'- Date: {item.date}, Description: "{item.description}", '
            f"Amount: {item.amount}, Category: {item.category}"
        )
    return "\n".join(lines)


__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "TRANSACTION_FIELD_ORDER",
    "build_summary_content",
    "build_summary_instructions",
    "build_system_instructions",
    "build_user_content",
    "serialize_chunk_to_json",
]

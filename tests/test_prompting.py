from __future__ import annotations

import json

from expense_ai import prompting
from expense_ai.categories import CATEGORY_NAMES, CATEGORY_TAXONOMY
from expense_ai.models import AnnotatedTransaction, Transaction

from tests.helpers.model_stub import extract_items


def _txs() -> list[Transaction]:
    return [
        Transaction(date="2024-07-01", description='Cafe "Luna"', amount="-5.50"),
        Transaction(date="2024-07-02", description="Salary", amount=2500),
    ]


def test_serialize_uses_fixed_field_order_and_relative_idx():
    arr = json.loads(prompting.serialize_chunk_to_json(_txs()))
    assert [list(item) for item in arr] == [list(prompting.TRANSACTION_FIELD_ORDER)] * 2
    assert [item["idx"] for item in arr] == [0, 1]
    assert arr[0]["description"] == 'Cafe "Luna"'
    assert arr[0]["amount"] == -5.5


def test_user_content_contains_taxonomy_rules_and_example():
    content = prompting.build_user_content(_txs())
    for category in CATEGORY_TAXONOMY:
        assert f"- {category.name}: {category.description}" in content
    assert "exactly 2 objects" in content
    assert "'Income'" in content
    assert "'Other'" in content
    assert '[{"category": "Food"}, {"category": "Income"}]' in content
    assert len(extract_items(content)) == 2


def test_user_content_is_deterministic():
    assert prompting.build_user_content(_txs()) == prompting.build_user_content(_txs())


def test_taxonomy_lists_all_nine_categories():
    assert CATEGORY_NAMES == (
        "Food",
        "Transport",
        "Bills",
        "Entertainment",
        "Shopping",
        "Income",
        "Health & Wellness",
        "Travel",
        "Other",
    )


def test_summary_content_lists_each_transaction():
    items = [AnnotatedTransaction(transaction=t, category="Food") for t in _txs()]
    content = prompting.build_summary_content(items)
    assert content.count("\n- Date:") == 2
    assert "Category: Food" in content

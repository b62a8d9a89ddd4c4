"""Public interface for the ``expense_ai`` package.

Symbol re-exports only; no runtime logic and no side effects at import time.
"""

from .api import categorize_statement, categorize_transactions
from .batching import chunk
from .categories import CATEGORY_NAMES, CATEGORY_TAXONOMY, DEFAULT_CATEGORY
from .classifier import ClassifierInvoker, OpenAIResponsesModel, TextModel
from .config import CategorizerSettings
from .errors import (
    CategorizationCancelled,
    CategorizationFailed,
    ExpenseAIError,
    InsightGenerationFailed,
)
from .models import (
    AnnotatedTransaction,
    CategorizationReport,
    CategoryResult,
    CategoryTotal,
    Reconciliation,
    ReconcileSummary,
    Transaction,
)
from .reconcile import reconcile
from .summary import (
    available_months,
    filter_by_month,
    summarize_by_category,
    total_expenses,
    update_category,
)
from .validation import validate

__all__ = [
    # API
    "categorize_statement",
    "categorize_transactions",
    "chunk",
    "reconcile",
    "validate",
    "available_months",
    "filter_by_month",
    "summarize_by_category",
    "total_expenses",
    "update_category",
    # Model boundary
    "ClassifierInvoker",
    "OpenAIResponsesModel",
    "TextModel",
    # Configuration / taxonomy
    "CategorizerSettings",
    "CATEGORY_NAMES",
    "CATEGORY_TAXONOMY",
    "DEFAULT_CATEGORY",
    # Models
    "AnnotatedTransaction",
    "CategorizationReport",
    "CategoryResult",
    "CategoryTotal",
    "Reconciliation",
    "ReconcileSummary",
    "Transaction",
    # Errors
    "CategorizationCancelled",
    "CategorizationFailed",
    "ExpenseAIError",
    "InsightGenerationFailed",
]

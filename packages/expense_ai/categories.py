"""Category taxonomy used to guide the classifier.

The taxonomy is advisory: it is rendered into the prompt, but any non-empty
category string returned by the model is accepted downstream.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Category:
    name: str
    description: str


CATEGORY_TAXONOMY: tuple[Category, ...] = (
    Category("Food", "Restaurants, cafes, groceries, food delivery."),
    Category("Transport", "Gas, public transit, ride-sharing, parking, tolls."),
    Category(
        "Bills",
        "Utilities (electricity, water, internet), rent/mortgage, subscriptions "
        "(streaming, software), insurance.",
    ),
    Category(
        "Entertainment",
        "Movies, concerts, events, hobbies, streaming services (if not under Bills).",
    ),
    Category("Shopping", "Clothing, electronics, gifts, household items, online shopping."),
    Category("Income", "Salary, deposits, refunds, any incoming money."),
    Category("Health & Wellness", "Pharmacy, doctors, gym memberships, personal care."),
    Category("Travel", "Flights, hotels, rental cars, travel bookings."),
    Category(
        "Other",
        "Anything that does not fit the categories above (e.g., ATM withdrawals, "
        "bank fees, transfers).",
    ),
)

CATEGORY_NAMES: tuple[str, ...] = tuple(c.name for c in CATEGORY_TAXONOMY)

# Default for configuration only; the pipeline receives the default category
# as an explicit value.
DEFAULT_CATEGORY: str = "Other"


__all__ = ["CATEGORY_NAMES", "CATEGORY_TAXONOMY", "DEFAULT_CATEGORY", "Category"]

"""Category registry: allowed categories per transaction type, labels and default budgets."""

from __future__ import annotations

import re
from typing import Dict, List

TRANSACTION_TYPES = ("income", "expense")

CATEGORIES: Dict[str, List[str]] = {
    "income": ["salary", "freelance", "investments", "other-income"],
    "expense": ["groceries", "rent", "utilities", "transport", "entertainment", "other-expense"],
}

CATEGORY_LABELS: Dict[str, str] = {
    "salary": "Salary",
    "freelance": "Freelance",
    "investments": "Investments",
    "other-income": "Other Income",
    "groceries": "Groceries",
    "rent": "Rent",
    "utilities": "Utilities",
    "transport": "Transport",
    "entertainment": "Entertainment",
    "other-expense": "Other Expense",
}

# Monthly limits for expense categories
DEFAULT_BUDGETS: Dict[str, float] = {
    "groceries": 500.0,
    "rent": 1500.0,
    "utilities": 200.0,
    "transport": 300.0,
    "entertainment": 200.0,
    "other-expense": 300.0,
}

_LABEL_LOOKUP = {label.lower(): key for key, label in CATEGORY_LABELS.items()}


def categories_for(transaction_type: str) -> List[str]:
    """Return the category keys allowed for ``transaction_type``.

    Raises:
        ValueError: If the type is not ``income`` or ``expense``.
    """
    try:
        return list(CATEGORIES[transaction_type])
    except KeyError:
        raise ValueError(f"Unknown transaction type '{transaction_type}'") from None


def label_for(category: str) -> str:
    """Display label for a category key, falling back to the key itself."""
    return CATEGORY_LABELS.get(category, category)


def resolve_category(text: str) -> str:
    """Map a category label back to its key.

    The lookup is case-insensitive. Unknown labels become a synthetic key by
    lowercasing and hyphenating whitespace.

    Example:
        >>> resolve_category("other income")
        'other-income'
        >>> resolve_category("Pet Care")
        'pet-care'
    """
    cleaned = text.strip()
    key = _LABEL_LOOKUP.get(cleaned.lower())
    if key is not None:
        return key
    return re.sub(r"\s+", "-", cleaned.lower())


def is_valid_category(transaction_type: str, category: str) -> bool:
    return category in CATEGORIES.get(transaction_type, [])

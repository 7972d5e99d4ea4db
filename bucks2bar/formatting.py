"""Formatting utilities for currency and text display."""

from __future__ import annotations

from typing import Union

from .models import Transaction


def escape_dollar_for_markdown(amount: float) -> str:
    """Format a dollar amount and escape the dollar sign for markdown rendering.

    Streamlit markdown treats ``$`` as a LaTeX delimiter, so it is escaped.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return f"${amount:,.2f}".replace("$", "\\$")


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a currency amount rounded to two decimals.

    Example:
        >>> format_currency(1234.5)
        '$1,234.50'
        >>> format_currency(-42, include_sign=False)
        '-42.00'
    """
    formatted = f"{amount:,.2f}"
    if not include_sign:
        return formatted
    if formatted.startswith("-"):
        return f"-${formatted[1:]}"
    return f"${formatted}"


def format_transaction_amount(transaction: Transaction) -> str:
    """``+$4,500.00`` for income, ``-$1,200.00`` for expenses."""
    sign = "+" if transaction.type == "income" else "-"
    return f"{sign}{format_currency(transaction.amount)}"

"""Aggregations over the transaction collection.

All functions are pure: they take the full (unfiltered) collection, build a
small pandas frame and return plain Python data so the presentation layer
never needs to know about DataFrames. No rounding is applied here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from .categories import label_for
from .models import Transaction

FRAME_COLUMNS = ["id", "type", "amount", "category", "date", "description"]

DANGER_THRESHOLD = 90.0
WARNING_THRESHOLD = 70.0


@dataclass(frozen=True)
class BudgetStatus:
    category: str
    label: str
    spent: float
    limit: float
    percentage: float
    tier: str
    bar_width: float


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Build a DataFrame with one row per transaction and a ``month`` column."""
    frame = pd.DataFrame([t.to_dict() for t in transactions], columns=FRAME_COLUMNS)
    frame["amount"] = pd.to_numeric(frame["amount"], errors="coerce").fillna(0.0).astype(float)
    frame["date"] = frame["date"].astype(str)
    frame["month"] = frame["date"].str[:7]
    return frame


def summary_totals(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """Total income, total expenses and net balance."""
    frame = transactions_frame(transactions)
    totals = frame.groupby("type")["amount"].sum()
    income = float(totals.get("income", 0.0))
    expenses = float(totals.get("expense", 0.0))
    return {
        "total_income": income,
        "total_expenses": expenses,
        "net_balance": income - expenses,
    }


def monthly_series_between(
    transactions: Iterable[Transaction], start_month: str, end_month: str
) -> List[Dict[str, object]]:
    """Income and expense per calendar month from ``start_month`` to ``end_month``.

    Months are ``YYYY-MM`` strings, both ends inclusive. Every month in the
    range gets a bucket, zero-filled when it has no transactions; transactions
    outside the range are ignored.

    Raises:
        ValueError: If ``end_month`` is before ``start_month``.
    """
    periods = pd.period_range(start=start_month, end=end_month, freq="M")
    if len(periods) == 0:
        raise ValueError(f"Empty month range {start_month}..{end_month}")
    months = [period.strftime("%Y-%m") for period in periods]

    frame = transactions_frame(transactions)
    in_range = frame[frame["month"].isin(months)]
    totals = in_range.groupby(["month", "type"])["amount"].sum().to_dict()

    return [
        {
            "month": month,
            "label": period.strftime("%b %Y"),
            "income": float(totals.get((month, "income"), 0.0)),
            "expense": float(totals.get((month, "expense"), 0.0)),
        }
        for month, period in zip(months, periods)
    ]


def monthly_series(transactions: Iterable[Transaction], year: int) -> List[Dict[str, object]]:
    """Twelve zero-filled monthly buckets for ``year``."""
    return monthly_series_between(transactions, f"{year:04d}-01", f"{year:04d}-12")


def category_breakdown(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """Summed expense amount per category, in order of first occurrence."""
    frame = transactions_frame(transactions)
    expenses = frame[frame["type"] == "expense"]
    totals = expenses.groupby("category", sort=False)["amount"].sum()
    return {str(category): float(amount) for category, amount in totals.items()}


def budget_utilization(
    transactions: Iterable[Transaction],
    budgets: Mapping[str, float],
    month: str,
) -> List[BudgetStatus]:
    """Spending against each budget for ``month`` (``YYYY-MM``).

    ``percentage`` is unbounded above; ``bar_width`` clamps it at 100 for
    progress bars. Tiers: ``danger`` from 90%, ``warning`` from 70%,
    ``normal`` below.
    """
    if not budgets:
        return []
    frame = transactions_frame(transactions)
    month_expenses = frame[(frame["type"] == "expense") & frame["date"].str.startswith(month)]
    spent_by_category = month_expenses.groupby("category")["amount"].sum()

    table = pd.DataFrame(
        {
            "category": list(budgets.keys()),
            "limit": [float(limit) for limit in budgets.values()],
        }
    )
    table["spent"] = table["category"].map(spent_by_category).fillna(0.0).astype(float)
    table["percentage"] = table["spent"] * 100 / table["limit"]
    table["tier"] = np.select(
        [table["percentage"] >= DANGER_THRESHOLD, table["percentage"] >= WARNING_THRESHOLD],
        ["danger", "warning"],
        default="normal",
    )
    table["bar_width"] = np.minimum(table["percentage"], 100.0)

    return [
        BudgetStatus(
            category=row.category,
            label=label_for(row.category),
            spent=float(row.spent),
            limit=float(row.limit),
            percentage=float(row.percentage),
            tier=str(row.tier),
            bar_width=float(row.bar_width),
        )
        for row in table.itertuples(index=False)
    ]


def available_months(transactions: Iterable[Transaction]) -> List[str]:
    """Distinct ``YYYY-MM`` months present in the collection, newest first."""
    frame = transactions_frame(transactions)
    months = frame.loc[frame["month"].str.len() == 7, "month"].unique()
    return sorted((str(m) for m in months), reverse=True)


def current_month(now: Optional[datetime] = None) -> str:
    """``YYYY-MM`` for ``now`` (UTC wall clock by default)."""
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m")

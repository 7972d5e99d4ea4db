"""Unit tests for bucks2bar.analytics.

These exercise the aggregation helpers on small, hand-built collections.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from bucks2bar import analytics
from bucks2bar.models import Transaction


def _txn(txn_id: str, txn_type: str, amount: float, category: str, date: str) -> Transaction:
    return Transaction(id=txn_id, type=txn_type, amount=amount, category=category,
                       date=date, description=f"{category} {date}")


def _sample():
    return [
        _txn("a", "expense", 245, "groceries", "2026-02-12"),
        _txn("b", "income", 4500, "salary", "2026-01-31"),
        _txn("c", "expense", 85, "utilities", "2026-01-20"),
        _txn("d", "expense", 320, "groceries", "2026-01-15"),
        _txn("e", "expense", 1200, "rent", "2026-01-05"),
        _txn("f", "expense", 99, "rent", "2025-12-30"),
    ]


def test_summary_totals_example() -> None:
    transactions = [
        _txn("1", "income", 4500, "salary", "2026-01-31"),
        _txn("2", "expense", 1200, "rent", "2026-01-05"),
    ]
    assert analytics.summary_totals(transactions) == {
        "total_income": 4500.0,
        "total_expenses": 1200.0,
        "net_balance": 3300.0,
    }


def test_summary_totals_empty() -> None:
    assert analytics.summary_totals([]) == {
        "total_income": 0.0,
        "total_expenses": 0.0,
        "net_balance": 0.0,
    }


def test_summary_totals_is_additive() -> None:
    first, second = _sample()[:3], _sample()[3:]
    combined = analytics.summary_totals(first + second)
    left = analytics.summary_totals(first)
    right = analytics.summary_totals(second)
    for key in combined:
        assert combined[key] == pytest.approx(left[key] + right[key])


def test_monthly_series_zero_fills_twelve_months() -> None:
    series = analytics.monthly_series(_sample(), 2026)
    assert [bucket["month"] for bucket in series] == [f"2026-{m:02d}" for m in range(1, 13)]
    assert series[0]["label"] == "Jan 2026"
    assert series[0]["income"] == 4500.0
    assert series[0]["expense"] == pytest.approx(85 + 320 + 1200)
    assert series[1]["expense"] == 245.0
    assert all(bucket["income"] == 0.0 and bucket["expense"] == 0.0 for bucket in series[2:])


def test_monthly_series_ignores_other_years() -> None:
    series = analytics.monthly_series(_sample(), 2025)
    assert series[11] == {"month": "2025-12", "label": "Dec 2025", "income": 0.0, "expense": 99.0}
    assert sum(bucket["expense"] for bucket in series) == 99.0


def test_monthly_series_between_spans_years() -> None:
    series = analytics.monthly_series_between(_sample(), "2025-11", "2026-02")
    assert [bucket["month"] for bucket in series] == ["2025-11", "2025-12", "2026-01", "2026-02"]
    assert series[0]["expense"] == 0.0
    assert series[1]["expense"] == 99.0


def test_monthly_series_between_rejects_reversed_range() -> None:
    with pytest.raises(ValueError):
        analytics.monthly_series_between([], "2026-05", "2026-01")


def test_category_breakdown_expenses_in_first_occurrence_order() -> None:
    breakdown = analytics.category_breakdown(_sample())
    assert list(breakdown) == ["groceries", "utilities", "rent"]
    assert breakdown["groceries"] == 565.0
    assert breakdown["rent"] == 1299.0
    assert "salary" not in breakdown


def test_category_breakdown_empty() -> None:
    assert analytics.category_breakdown([]) == {}


@pytest.mark.parametrize(
    "spent, expected_tier",
    [
        (349.5, "normal"),
        (350.0, "warning"),
        (449.5, "warning"),
        (450.0, "danger"),
        (600.0, "danger"),
    ],
)
def test_budget_utilization_tier_boundaries(spent: float, expected_tier: str) -> None:
    transactions = [_txn("x", "expense", spent, "groceries", "2026-02-03")]
    (status,) = analytics.budget_utilization(transactions, {"groceries": 500}, "2026-02")
    assert status.tier == expected_tier
    assert status.percentage == pytest.approx(spent / 5)
    assert status.bar_width == min(status.percentage, 100.0)


def test_budget_utilization_counts_only_the_month_and_expenses() -> None:
    budgets = {"groceries": 500.0, "rent": 1500.0, "transport": 300.0}
    statuses = analytics.budget_utilization(_sample(), budgets, "2026-01")
    by_category = {status.category: status for status in statuses}
    assert [status.category for status in statuses] == ["groceries", "rent", "transport"]
    assert by_category["groceries"].spent == 320.0
    assert by_category["rent"].spent == 1200.0
    assert by_category["rent"].percentage == 80.0
    assert by_category["rent"].tier == "warning"
    assert by_category["transport"].spent == 0.0
    assert by_category["transport"].tier == "normal"
    assert by_category["groceries"].label == "Groceries"


def test_budget_utilization_unbounded_percentage_clamped_bar() -> None:
    transactions = [_txn("x", "expense", 300, "utilities", "2026-01-02")]
    (status,) = analytics.budget_utilization(transactions, {"utilities": 200}, "2026-01")
    assert status.percentage == 150.0
    assert status.bar_width == 100.0


def test_budget_utilization_without_budgets() -> None:
    assert analytics.budget_utilization(_sample(), {}, "2026-01") == []


def test_available_months_newest_first() -> None:
    assert analytics.available_months(_sample()) == ["2026-02", "2026-01", "2025-12"]
    assert analytics.available_months([]) == []


def test_current_month() -> None:
    assert analytics.current_month(datetime(2026, 2, 14, tzinfo=timezone.utc)) == "2026-02"

"""Smoke tests for the Plotly figure builders."""

from __future__ import annotations

import plotly.graph_objects as go
import pytest

from bucks2bar import analytics, visualization as viz
from bucks2bar.models import Transaction


def _sample():
    return [
        Transaction(id="1", type="income", amount=4500, category="salary",
                    date="2026-01-31", description="Salary"),
        Transaction(id="2", type="expense", amount=300, category="utilities",
                    date="2026-01-20", description="Power"),
        Transaction(id="3", type="expense", amount=100, category="other-expense",
                    date="2026-01-02", description="Misc"),
    ]


def test_monthly_chart_traces() -> None:
    fig = viz.create_monthly_chart(analytics.monthly_series(_sample(), 2026))
    assert isinstance(fig, go.Figure)
    assert [trace.name for trace in fig.data] == ["Income", "Expenses"]
    assert list(fig.data[0].x)[:2] == ["Jan 2026", "Feb 2026"]
    assert list(fig.data[0].y)[0] == 4500.0
    assert list(fig.data[1].y)[0] == 400.0
    assert fig.layout.barmode == "group"


def test_category_pie_uses_labels() -> None:
    fig = viz.create_category_pie_chart(analytics.category_breakdown(_sample()))
    assert list(fig.data[0].labels) == ["Utilities", "Other Expense"]
    assert list(fig.data[0].values) == [300.0, 100.0]


def test_budget_chart_clamps_and_colors() -> None:
    statuses = analytics.budget_utilization(_sample(), {"utilities": 200, "other-expense": 300}, "2026-01")
    fig = viz.create_budget_chart(statuses)
    assert list(fig.data[0].x) == pytest.approx([100.0, 100 / 3])
    assert list(fig.data[0].y) == ["Utilities", "Other Expense"]
    assert list(fig.data[0].marker.color) == [viz.TIER_COLORS["danger"], viz.TIER_COLORS["normal"]]
    assert viz.tier_counts(statuses) == {"normal": 1, "warning": 0, "danger": 1}


def test_empty_inputs_give_placeholder_figures() -> None:
    for fig in (viz.create_monthly_chart([]), viz.create_category_pie_chart({}), viz.create_budget_chart([])):
        assert fig.layout.title.text == "No data to display"
        assert len(fig.data) == 0

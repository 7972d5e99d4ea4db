"""Plotly figures for the Insights tab.

Each function accepts the plain data returned by :mod:`bucks2bar.analytics`
and returns a ``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``. Empty inputs produce an empty figure titled
"No data to display".
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .analytics import BudgetStatus
from .categories import label_for

INCOME_COLOR = "rgba(39, 174, 96, 0.8)"
EXPENSE_COLOR = "rgba(231, 76, 60, 0.8)"
CATEGORY_COLORS = [
    "rgba(231, 76, 60, 0.8)",
    "rgba(52, 152, 219, 0.8)",
    "rgba(241, 196, 15, 0.8)",
    "rgba(155, 89, 182, 0.8)",
    "rgba(46, 204, 113, 0.8)",
    "rgba(230, 126, 34, 0.8)",
]
TIER_COLORS = {
    "normal": "rgba(39, 174, 96, 0.8)",
    "warning": "rgba(241, 196, 15, 0.8)",
    "danger": "rgba(231, 76, 60, 0.8)",
}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_monthly_chart(series: Sequence[Mapping[str, object]], title: str | None = None) -> go.Figure:
    """Grouped bar chart of income vs expenses per month.

    Parameters
    ----------
    series : sequence of dict
        Buckets from :func:`bucks2bar.analytics.monthly_series`.
    title : str, optional
        Chart title.
    """
    if not series:
        return _empty_figure()
    labels = [bucket["label"] for bucket in series]
    fig = go.Figure(
        data=[
            go.Bar(name="Income", x=labels, y=[bucket["income"] for bucket in series],
                   marker_color=INCOME_COLOR),
            go.Bar(name="Expenses", x=labels, y=[bucket["expense"] for bucket in series],
                   marker_color=EXPENSE_COLOR),
        ]
    )
    fig.update_layout(
        title=title or "Monthly income vs expenses",
        barmode="group",
        yaxis_title="Amount",
        yaxis_tickprefix="$",
        legend=dict(orientation="h", yanchor="bottom", y=1.02),
    )
    return fig


def create_category_pie_chart(breakdown: Mapping[str, float], title: str | None = None) -> go.Figure:
    """Pie chart of expenses by category, labelled with display names."""
    if not breakdown:
        return _empty_figure()
    df = pd.DataFrame(
        {
            "Category": [label_for(category) for category in breakdown],
            "Amount": list(breakdown.values()),
        }
    )
    fig = px.pie(df, names="Category", values="Amount", color_discrete_sequence=CATEGORY_COLORS)
    fig.update_traces(hovertemplate="%{label}: $%{value:,.2f} (%{percent})<extra></extra>")
    fig.update_layout(title=title or "Expenses by category")
    return fig


def create_budget_chart(statuses: Sequence[BudgetStatus], title: str | None = None) -> go.Figure:
    """Horizontal progress bars per budget, clamped at 100% and colored by tier."""
    if not statuses:
        return _empty_figure()
    labels: List[str] = [status.label for status in statuses]
    fig = go.Figure(
        go.Bar(
            x=[status.bar_width for status in statuses],
            y=labels,
            orientation="h",
            marker_color=[TIER_COLORS[status.tier] for status in statuses],
            text=[f"${status.spent:,.2f} / ${status.limit:,.2f}" for status in statuses],
            textposition="auto",
            customdata=[status.percentage for status in statuses],
            hovertemplate="%{y}: %{customdata:.1f}%<extra></extra>",
        )
    )
    fig.update_layout(
        title=title or "Budget progress",
        xaxis=dict(range=[0, 100], title="Used (%)"),
        yaxis=dict(autorange="reversed"),
    )
    return fig


def tier_counts(statuses: Sequence[BudgetStatus]) -> Dict[str, int]:
    """Number of budgets in each tier, for the summary caption."""
    counts = {tier: 0 for tier in TIER_COLORS}
    for status in statuses:
        counts[status.tier] += 1
    return counts

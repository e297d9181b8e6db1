"""Plotly figures for the household dashboard.

Each function takes one series from a :class:`DerivedView` and returns a
``plotly.graph_objects.Figure``.  Empty input produces an empty figure
titled "No data to display" so the dashboard can render every panel
unconditionally.
"""

from __future__ import annotations

from typing import Dict, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import CategoryTrend, CumulativePoint, HeatmapPoint, ProjectionPoint, TrendPoint, WeeklyEntry, YearComparison

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _no_data() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_trend_chart(trend: Sequence[TrendPoint], title: str | None = None) -> go.Figure:
    """Income and expense lines for the monthly trend series.

    Parameters
    ----------
    trend : sequence of TrendPoint
        Monthly totals, oldest first.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Two-line chart with one point per month.
    """
    if not trend:
        return _no_data()
    df = pd.DataFrame(
        {
            "Month": [point.raw_date.strftime("%b %Y") for point in trend],
            "Income": [point.income for point in trend],
            "Expense": [point.expense for point in trend],
        }
    )
    long_df = df.melt(id_vars="Month", value_vars=["Income", "Expense"], var_name="Flow", value_name="Amount")
    fig = px.line(long_df, x="Month", y="Amount", color="Flow", markers=True)
    fig.update_layout(title=title or "Income vs expense", xaxis_title="Month", yaxis_title="Amount")
    return fig


def create_category_donut(category_map: Dict[str, float], title: str | None = None) -> go.Figure:
    if not category_map:
        return _no_data()
    df = pd.DataFrame(list(category_map.items()), columns=["Category", "Amount"])
    fig = px.pie(df, names="Category", values="Amount", hole=0.5)
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_category_trend_chart(category_trend: CategoryTrend, title: str | None = None) -> go.Figure:
    if not category_trend.datasets:
        return _no_data()
    months = [d.strftime("%b %Y") for d in category_trend.raw_dates]
    rows = [
        {"Month": month, "Category": category, "Amount": amount}
        for category, values in category_trend.datasets.items()
        for month, amount in zip(months, values)
    ]
    fig = px.line(pd.DataFrame(rows), x="Month", y="Amount", color="Category", markers=True)
    fig.update_layout(title=title or "Category trends", xaxis_title="Month", yaxis_title="Amount")
    return fig


def create_weekly_chart(weeks: Sequence[WeeklyEntry], title: str | None = None) -> go.Figure:
    """Bar chart of weekly spend, with the budget as a second bar when present."""
    if not weeks:
        return _no_data()
    labels = [week.label for week in weeks]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=labels, y=[week.amount for week in weeks], name="Spending"))
    if any(week.budget is not None for week in weeks):
        fig.add_trace(go.Bar(x=labels, y=[week.budget or 0 for week in weeks], name="Budget", opacity=0.4))
    fig.update_layout(title=title or "Weekly spending", barmode="group", xaxis_title="Week", yaxis_title="Amount")
    return fig


def create_daily_bar_chart(day_map: Dict[str, float], title: str | None = None) -> go.Figure:
    if not day_map:
        return _no_data()
    df = pd.DataFrame(list(day_map.items()), columns=["Day", "Amount"])
    fig = px.bar(df, x="Day", y="Amount")
    fig.update_layout(title=title or "Spending by day", xaxis_title="Day", yaxis_title="Amount")
    return fig


def create_cumulative_balance_chart(points: Sequence[CumulativePoint], title: str | None = None) -> go.Figure:
    """Area chart of the running balance over the month's transactions."""
    if not points:
        return _no_data()
    final = points[-1].balance
    color = "rgba(16, 185, 129, 0.8)" if final >= 0 else "rgba(239, 68, 68, 0.8)"
    fig = go.Figure(
        go.Scatter(
            x=list(range(len(points))),
            y=[point.balance for point in points],
            text=[f"Day {point.day}" for point in points],
            fill="tozeroy",
            mode="lines",
            line={"color": color},
            name="Balance",
        )
    )
    fig.update_layout(title=title or "Cumulative balance", xaxis_title="Transaction", yaxis_title="Balance")
    return fig


def create_heatmap_chart(points: Sequence[HeatmapPoint], title: str | None = None) -> go.Figure:
    """Spending density per day, plotted against the weekday."""
    if not points:
        return _no_data()
    df = pd.DataFrame(
        {
            "Date": [point.date_key for point in points],
            "Weekday": [WEEKDAY_NAMES[point.weekday] for point in points],
            "Amount": [point.amount for point in points],
        }
    )
    fig = px.scatter(
        df,
        x="Date",
        y="Weekday",
        size="Amount",
        color="Amount",
        color_continuous_scale="Reds",
        category_orders={"Weekday": WEEKDAY_NAMES},
    )
    fig.update_layout(title=title or "Daily spending heatmap")
    return fig


def create_projection_chart(projection: Sequence[ProjectionPoint], title: str | None = None) -> go.Figure:
    if not projection:
        return _no_data()
    df = pd.DataFrame(
        {
            "Month": [point.month.strftime("%b %Y") for point in projection],
            "Income": [point.income for point in projection],
            "Expense": [point.expense for point in projection],
            "Net": [point.net for point in projection],
        }
    )
    long_df = df.melt(id_vars="Month", var_name="Series", value_name="Amount")
    fig = px.line(long_df, x="Month", y="Amount", color="Series", markers=True)
    fig.update_layout(title=title or "Income projection", xaxis_title="Month", yaxis_title="Amount")
    return fig


def create_year_comparison_chart(comparison: YearComparison, title: str | None = None) -> go.Figure:
    metrics = ["Expenses", "Income", "Net"]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=metrics,
        y=[comparison.previous_expenses, comparison.previous_incomes, comparison.previous_net],
        name=str(comparison.previous_year),
    ))
    fig.add_trace(go.Bar(
        x=metrics,
        y=[comparison.expenses, comparison.incomes, comparison.net],
        name=str(comparison.year),
    ))
    fig.update_layout(title=title or "Year over year", barmode="group")
    return fig

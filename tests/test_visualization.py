"""Tests for household_finance.visualization."""

from __future__ import annotations

from datetime import datetime

import plotly.graph_objects as go

from household_finance import visualization as viz
from household_finance.models import (
    CategoryTrend,
    CumulativePoint,
    HeatmapPoint,
    ProjectionPoint,
    TrendPoint,
    WeeklyEntry,
    YearComparison,
)


def test_empty_inputs_render_placeholder() -> None:
    for fig in [
        viz.create_trend_chart([]),
        viz.create_category_donut({}),
        viz.create_category_trend_chart(CategoryTrend(raw_dates=(), datasets={})),
        viz.create_weekly_chart([]),
        viz.create_daily_bar_chart({}),
        viz.create_cumulative_balance_chart([]),
        viz.create_heatmap_chart([]),
        viz.create_projection_chart([]),
    ]:
        assert isinstance(fig, go.Figure)
        assert fig.layout.title.text == "No data to display"


def test_trend_chart_has_income_and_expense_lines() -> None:
    trend = [
        TrendPoint(month=12, year=2024, raw_date=datetime(2024, 12, 1), income=100, expense=50),
        TrendPoint(month=1, year=2025, raw_date=datetime(2025, 1, 1), income=120, expense=70),
    ]
    fig = viz.create_trend_chart(trend)
    assert {trace.name for trace in fig.data} == {"Income", "Expense"}


def test_weekly_chart_adds_budget_trace_only_when_present() -> None:
    plain = viz.create_weekly_chart([WeeklyEntry(label="1. Week", amount=10)])
    assert len(plain.data) == 1
    budgeted = viz.create_weekly_chart([WeeklyEntry(label="Week 1", amount=10, budget=25)])
    assert [trace.name for trace in budgeted.data] == ["Spending", "Budget"]


def test_cumulative_balance_colour_follows_final_balance() -> None:
    fig = viz.create_cumulative_balance_chart([CumulativePoint(day=1, balance=100), CumulativePoint(day=2, balance=-5)])
    assert "239, 68, 68" in fig.data[0].line.color


def test_other_charts_render() -> None:
    assert len(viz.create_category_donut({"Food": 10, "Rent": 20}).data) == 1
    trend = CategoryTrend(raw_dates=(datetime(2025, 1, 1),), datasets={"Food": [10.0], "Rent": [5.0]})
    assert len(viz.create_category_trend_chart(trend).data) == 2
    assert len(viz.create_heatmap_chart([HeatmapPoint(date_key="2025-01-05", weekday=0, amount=15)]).data) == 1
    projection = [ProjectionPoint(month=datetime(2025, 2, 1), income=10, expense=5, net=5)]
    assert len(viz.create_projection_chart(projection).data) == 3
    comparison = YearComparison(
        year=2025, previous_year=2024, expenses=1, incomes=2, previous_expenses=3, previous_incomes=4
    )
    assert [trace.name for trace in viz.create_year_comparison_chart(comparison).data] == ["2024", "2025"]

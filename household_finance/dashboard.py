"""Streamlit app for the household finance dashboard.

The page reads the ledger, profile and goals from the JSON stores,
freezes them into a snapshot and renders every series of the derived
view.  Nothing here computes finance logic; all numbers come from
:func:`household_finance.engine.derive`.

To run the dashboard from the command line::

    streamlit run household_finance/dashboard.py
"""

from __future__ import annotations

import calendar
import logging
import os
import sys
from typing import Dict, List, Tuple

import pandas as pd
import streamlit as st

# Support both ``streamlit run household_finance/dashboard.py`` and
# package execution via ``python -m household_finance.dashboard``.
if __package__:
    from . import visualization as viz
    from .config import configure_logging, ensure_data_directories, load_analytics_config
    from .engine import derive
    from .models import DerivedView, Insight
    from .stores import JsonGoalStore, JsonLedgerStore, JsonProfileStore, load_snapshot
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from household_finance import visualization as viz  # type: ignore
    from household_finance.config import configure_logging, ensure_data_directories, load_analytics_config  # type: ignore
    from household_finance.engine import derive  # type: ignore
    from household_finance.models import DerivedView, Insight  # type: ignore
    from household_finance.stores import JsonGoalStore, JsonLedgerStore, JsonProfileStore, load_snapshot  # type: ignore

logger = logging.getLogger(__name__)

INSIGHT_TEXT: Dict[str, Tuple[str, str]] = {
    "criticalBalance": ("Critical balance", "Your balance is {balance}. Spending exceeds income."),
    "highSpending": ("High spending", "You spend {avg} per day on average, above your target of {target}."),
    "budgetControl": ("Budget under control", "Average daily spend of {avg} is comfortably within your limit."),
    "categoryWarning": ("Category alert", "{category} takes {percent}% of your spending ({amount})."),
    "paymentApproaching": ("Payday approaching", "{source} arrives in {days} day(s)."),
    "upcomingPayment": ("Upcoming payment", "{name} is due in {days} day(s)."),
}

SEVERITY_RENDERERS = {"high": "error", "medium": "warning", "positive": "success"}


def render_insight(insight: Insight) -> Tuple[str, str]:
    """Resolve an insight's translation keys to English title and text."""
    name = insight.title_key.rsplit(".", 1)[-1]
    if name.endswith("Title"):
        name = name[: -len("Title")]
    title, text = INSIGHT_TEXT.get(name, (insight.title_key, insight.text_key))
    try:
        return title, text.format(**insight.params)
    except KeyError:
        logger.warning("Missing parameter for insight %s: %s", name, insight.params)
        return title, text


def year_options(view: DerivedView, span: int = 3) -> List[int]:
    return list(range(view.now.year - span, view.now.year + 1))


def expense_table(view: DerivedView) -> pd.DataFrame:
    """Expenses grouped by day, newest first, for the transactions table."""
    rows = [
        {"Date": date, "Category": item.category, "Description": item.desc, "Bank": item.bank, "Amount": item.amount}
        for date in view.sorted_dates
        for item in view.expense_groups[date]
    ]
    return pd.DataFrame(rows, columns=["Date", "Category", "Description", "Bank", "Amount"])


def account_table(view: DerivedView) -> pd.DataFrame:
    rows = [
        {
            "Bank": item.bank,
            "Type": item.type,
            "Balance": item.display_balance,
            "Debt": item.debt,
            "Limit": item.total_limit,
            "Used %": round(item.used_percent, 1),
        }
        for item in view.account_summaries
    ]
    return pd.DataFrame(rows, columns=["Bank", "Type", "Balance", "Debt", "Limit", "Used %"])


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    ensure_data_directories()
    st.set_page_config(page_title="Household Finance", layout="wide", initial_sidebar_state="expanded")

    try:
        config = load_analytics_config()
    except ValueError as exc:  # pragma: no cover - UI display only
        st.error(str(exc))
        st.stop()

    snapshot = load_snapshot(JsonLedgerStore(), JsonProfileStore(), JsonGoalStore())
    current = derive(snapshot, config=config)

    # Sidebar: period selection for the month-scoped panels
    st.sidebar.header("Period")
    month = st.sidebar.selectbox(
        "Month",
        options=list(range(1, 13)),
        index=current.month - 1,
        format_func=lambda m: calendar.month_name[m],
    )
    years = year_options(current)
    year = st.sidebar.selectbox("Year", options=years, index=len(years) - 1)
    view = derive(snapshot, month=month, year=year, config=config)

    greeting = snapshot.profile.user_name or "there"
    st.title(f"Hello, {greeting}")

    totals = view.totals
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", f"{totals.total_income:,.2f}")
    col2.metric("Expenses", f"{totals.total_expense:,.2f}")
    col3.metric("Net balance", f"{totals.net_balance:,.2f}")
    col4.metric("Daily limit", f"{view.daily_limit:,.2f}")

    cycle = view.salary_cycle
    st.subheader(cycle.title_text)
    st.progress(int(cycle.progress), text=f"{cycle.days_left} day(s) left")

    if view.insights:
        st.subheader("Insights")
        for insight in view.insights:
            title, text = render_insight(insight)
            getattr(st, SEVERITY_RENDERERS.get(insight.severity, "info"))(f"{insight.icon} **{title}**: {text}")

    st.subheader("Trends")
    left, right = st.columns(2)
    left.plotly_chart(viz.create_trend_chart(view.trend), use_container_width=True)
    right.plotly_chart(viz.create_category_donut(view.category_map), use_container_width=True)
    left, right = st.columns(2)
    left.plotly_chart(viz.create_category_trend_chart(view.category_trend), use_container_width=True)
    right.plotly_chart(viz.create_weekly_chart(view.weekly_breakdown), use_container_width=True)

    st.subheader(f"{calendar.month_name[view.month]} {view.year}")
    summary = view.month_summary
    col1, col2, col3 = st.columns(3)
    col1.metric("Month income", f"{summary.income_total:,.2f}")
    col2.metric("Month expenses", f"{summary.expense_total:,.2f}")
    col3.metric("Month balance", f"{summary.balance:,.2f}")
    left, right = st.columns(2)
    left.plotly_chart(viz.create_daily_bar_chart(view.day_map), use_container_width=True)
    right.plotly_chart(viz.create_weekly_chart(view.weekly_budget, title="Weekly budget"), use_container_width=True)
    left, right = st.columns(2)
    left.plotly_chart(viz.create_cumulative_balance_chart(view.cumulative_balance), use_container_width=True)
    right.plotly_chart(viz.create_heatmap_chart(view.heatmap), use_container_width=True)
    st.plotly_chart(viz.create_year_comparison_chart(view.year_comparison), use_container_width=True)

    st.subheader("Forecasts")
    forecast = view.expense_forecast
    depletion = view.budget_depletion
    col1, col2, col3 = st.columns(3)
    col1.metric("Next month expense", f"{forecast.predicted:,.2f}", help=f"{forecast.min:,.2f} to {forecast.max:,.2f}")
    col2.metric("Budget used", f"{depletion.percent_used:.0f}%", "on track" if depletion.is_on_track else "over pace")
    if view.goal_prediction is not None and view.goal_prediction.is_possible:
        col3.metric("Goal months remaining", view.goal_prediction.months_remaining)
    else:
        col3.metric("Goal months remaining", "n/a")
    st.plotly_chart(viz.create_projection_chart(view.income_projection), use_container_width=True)

    if view.bank_breakdown:
        st.subheader("Spending by bank")
        st.table(pd.DataFrame(list(view.bank_breakdown.items()), columns=["Bank", "Amount"]))

    if view.account_summaries:
        st.subheader("Accounts")
        st.metric("Cash", f"{snapshot.cash:,.2f}")
        st.dataframe(account_table(view))

    recurring = view.recurring_summary
    if recurring.active_count:
        st.subheader("Subscriptions")
        col1, col2, col3 = st.columns(3)
        col1.metric("Monthly total", f"{recurring.total_monthly:,.2f}")
        col2.metric("Active", recurring.active_count)
        upcoming = recurring.next_payment
        col3.metric("Next payment", f"{upcoming.name} (day {upcoming.day})")

    st.subheader("Transactions")
    st.dataframe(expense_table(view))


if __name__ == "__main__":  # pragma: no cover
    main()

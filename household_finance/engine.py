"""Full recomputation of the dashboard view from one snapshot.

:func:`derive` is the single entry point the UI calls whenever the ledger,
profile or goals change.  It never reads storage and never keeps state
between calls: every series is rebuilt from the snapshot it is given.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from . import aggregation as agg
from .budget import calculate_budget_depletion, calculate_daily_limit
from .config import DEFAULT_CONFIG, AnalyticsConfig
from .dates import days_in_month, resolve_now
from .forecasting import (
    calculate_daily_heatmap,
    predict_goal_completion,
    predict_next_month_expense,
    project_net_income,
    select_main_goal,
)
from .insights import generate_analytic_insights
from .models import DerivedView, Snapshot
from .salary_cycle import calculate_next_salary_info, calculate_salary_cycle

logger = logging.getLogger(__name__)


def derive(
    snapshot: Snapshot,
    month: Optional[int] = None,
    year: Optional[int] = None,
    config: Optional[AnalyticsConfig] = None,
) -> DerivedView:
    """Compute every derived series for ``snapshot``.

    Args:
        snapshot: Immutable ledger, profile and goals.
        month: Selected month (1-12) for the month-scoped views.  Defaults
            to the snapshot's current month.
        year: Selected year.  Defaults to the snapshot's current year.
        config: Thresholds for insights and forecasts.

    Returns:
        A :class:`DerivedView` with one field per dashboard series.
    """
    config = config or DEFAULT_CONFIG
    now = resolve_now(snapshot.now)
    month = month or now.month
    year = year or now.year
    expenses, incomes, profile = snapshot.expenses, snapshot.incomes, snapshot.profile

    unparsed = agg.count_unparsed_dates(expenses) + agg.count_unparsed_dates(incomes)
    if unparsed:
        logger.warning("%d transaction(s) have unparseable dates and are excluded from period views", unparsed)

    totals = agg.calculate_totals(incomes, expenses)
    expense_groups, sorted_dates = agg.group_by_date(expenses)
    category_map, date_map = agg.get_chart_data(expenses)

    salary_cycle = calculate_salary_cycle(profile, now)
    next_salary = calculate_next_salary_info(profile, now)
    daily_limit = calculate_daily_limit(totals.net_balance, next_salary.target_date, now)
    insights = generate_analytic_insights(
        expenses,
        totals.total_expense,
        totals.net_balance,
        category_map,
        daily_limit,
        profile,
        now=now,
        config=config,
    )

    bank_breakdown = agg.expenses_by_bank(expenses)
    summary = agg.month_summary(expenses, incomes, month, year)
    monthly_budget = profile.monthly_budget or 0

    main_goal = select_main_goal(snapshot.goals)
    goal_prediction = (
        predict_goal_completion(main_goal, summary.balance, now) if main_goal is not None else None
    )

    view = DerivedView(
        now=now,
        month=month,
        year=year,
        totals=totals,
        expense_groups=expense_groups,
        sorted_dates=sorted_dates,
        category_map=category_map,
        date_map=date_map,
        salary_cycle=salary_cycle,
        next_salary=next_salary,
        daily_limit=daily_limit,
        insights=insights,
        trend=agg.get_trend_data(incomes, expenses, config.trend_months, now),
        category_trend=agg.get_category_trend_data(expenses, config.category_trend_months, now),
        weekly_breakdown=agg.get_weekly_breakdown(expenses, config.weeks_count, now),
        category_vs_budget=agg.get_category_vs_budget(expenses, config.placeholder_category_budget, now),
        month_summary=summary,
        day_map=agg.day_of_month_map(summary.expenses),
        weekly_budget=agg.weekly_budget_performance(summary.expenses, monthly_budget),
        cumulative_balance=agg.cumulative_balance(summary.expenses, summary.incomes),
        year_comparison=agg.year_comparison(expenses, incomes, month, year),
        bank_breakdown=bank_breakdown,
        account_summaries=agg.account_summaries(snapshot.accounts, bank_breakdown),
        recurring_summary=agg.recurring_summary(profile, now),
        heatmap=calculate_daily_heatmap(expenses, month, year),
        expense_forecast=predict_next_month_expense(
            agg.monthly_expense_totals(expenses, month, year, config.forecast_months), config
        ),
        budget_depletion=calculate_budget_depletion(
            summary.expense_total, monthly_budget, now.day, days_in_month(year, month), now
        ),
        goal_prediction=goal_prediction,
        income_projection=project_net_income(
            agg.monthly_history(incomes, expenses, month, year, config.forecast_months),
            config.projection_months,
            now,
        ),
    )
    logger.debug(
        "Derived view for %02d/%d: %d expenses, %d incomes, %d insights",
        month, year, len(expenses), len(incomes), len(insights),
    )
    return view


def ai_payload(snapshot: Snapshot, view: DerivedView) -> Dict[str, Any]:
    """JSON-ready data handed to the AI summary collaborator."""
    return {
        "totals": view.totals.to_dict(),
        "expenses": [item.to_dict() for item in snapshot.expenses],
        "incomes": [item.to_dict() for item in snapshot.incomes],
        "nextSalary": view.next_salary.to_dict(),
        "accounts": [item.to_dict() for item in snapshot.accounts],
        "cash": snapshot.cash,
    }

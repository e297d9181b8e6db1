"""Rule-based spending insights.

Rules run in a fixed order and each appends at most one insight (the
recurring-payment rule appends one per qualifying payment).  There is no
sorting or merging, so the returned order is the evaluation order.  The
insights carry translation keys and parameters; wording is left to the
rendering layer.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_CONFIG, AnalyticsConfig
from .dates import days_between_ceil, make_date, resolve_now
from .models import Expense, Insight, UserProfile
from .salary_cycle import calculate_next_salary_info, days_until_next_salary

SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"
SEVERITY_POSITIVE = "positive"

DEFAULT_INCOME_SOURCE = "Income"


def _money(value: float) -> str:
    return f"{value:.2f}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _insight(kind: str, name: str, params: Dict, severity: str, icon: str) -> Insight:
    return Insight(
        kind=kind,
        title_key=f"dashboard.insights.{name}Title",
        text_key=f"dashboard.insights.{name}Text",
        params=params,
        severity=severity,
        icon=icon,
    )


def average_daily_spend(expenses: Sequence[Expense], total_expense: float) -> float:
    """Total spend divided by the number of distinct days with spending."""
    spending_days = len({expense.date for expense in expenses})
    return total_expense / (spending_days or 1)


def top_category(category_map: Dict[str, float]) -> tuple[str, float]:
    """Largest category; ties keep the first one seen."""
    name, total = "", 0.0
    for category, amount in category_map.items():
        if amount > total:
            name, total = category, amount
    return name, total


def generate_analytic_insights(
    expenses: Sequence[Expense],
    total_expense: float,
    net_balance: float,
    category_map: Dict[str, float],
    daily_limit: float,
    profile: UserProfile,
    now: Optional[datetime] = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> List[Insight]:
    now = resolve_now(now)
    insights: List[Insight] = []

    avg_daily_spend = average_daily_spend(expenses, total_expense)

    if net_balance < 0:
        insights.append(_insight(
            "critical-balance", "criticalBalance",
            {"balance": _money(net_balance)},
            SEVERITY_HIGH, "⚠️",
        ))
    elif avg_daily_spend > daily_limit * config.high_spending_ratio:
        insights.append(_insight(
            "high-spending", "highSpending",
            {"avg": _money(avg_daily_spend), "target": _money(daily_limit)},
            SEVERITY_HIGH, "🔥",
        ))
    elif avg_daily_spend < daily_limit * config.budget_control_ratio:
        insights.append(_insight(
            "budget-control", "budgetControl",
            {"avg": _money(avg_daily_spend)},
            SEVERITY_POSITIVE, "🛡️",
        ))

    top_name, top_amount = top_category(category_map)
    top_share = _round_half_up(top_amount / total_expense * 100) if total_expense > 0 else 0
    if top_name and top_share > config.category_share_threshold:
        insights.append(_insight(
            "category-warning", "categoryWarning",
            {"category": top_name, "percent": top_share, "amount": _money(top_amount)},
            SEVERITY_MEDIUM, "📊",
        ))

    next_salary = calculate_next_salary_info(profile, now)
    salary_days = days_until_next_salary(next_salary, now)
    if 0 < salary_days <= config.salary_warning_days:
        insights.append(_insight(
            "payment-approaching", "paymentApproaching",
            {"source": next_salary.next_income.source or DEFAULT_INCOME_SOURCE, "days": salary_days},
            SEVERITY_POSITIVE, "⏳",
        ))

    for payment in profile.recurring_payments:
        # A payment due today still counts; it rolls over only once its day has passed
        if now.day > payment.day:
            due = make_date(now.year, now.month + 1, payment.day)
        else:
            due = make_date(now.year, now.month, payment.day)
        days_until = days_between_ceil(due, now)
        if 0 <= days_until <= config.recurring_warning_days:
            insights.append(_insight(
                "upcoming-payment", "upcomingPayment",
                {"name": payment.name, "days": days_until},
                SEVERITY_HIGH, "🔔",
            ))

    return insights

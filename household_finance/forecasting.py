"""Trend fitting and forward projections over monthly series.

The regressions are plain least-squares lines over the index of each
point (``x = 0..n-1``).  The expense forecast band is a fixed percentage
envelope around the prediction and the reported confidence is a constant;
neither is a statistical interval.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .config import DEFAULT_CONFIG, AnalyticsConfig
from .dates import add_months, parse_date, resolve_now
from .models import Expense, ForecastResult, Goal, GoalPrediction, HeatmapPoint, ProjectionPoint


@dataclass(frozen=True)
class Regression:
    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def linear_regression(values: Sequence[float]) -> Regression:
    """Closed-form least squares of ``values`` against their index.

    Fewer than two points give a flat line through the first value (or 0).
    """
    n = len(values)
    if n < 2:
        return Regression(slope=0.0, intercept=float(values[0]) if n else 0.0)

    y = np.asarray(values, dtype=float)
    x = np.arange(n, dtype=float)
    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_x2 = (x * y).sum(), (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return Regression(slope=float(slope), intercept=float(intercept))


def moving_average(values: Sequence[float], window: int = 3) -> float:
    if not values:
        return 0.0
    recent = values[-window:]
    return float(np.mean(recent))


def calculate_trend(values: Sequence[float]) -> float:
    """Slope of the fitted line; positive means the series is rising."""
    if len(values) < 2:
        return 0.0
    return linear_regression(values).slope


def _total(point: Any) -> float:
    if isinstance(point, Mapping):
        return float(point.get("total", 0.0))
    return float(point)


def predict_next_month_expense(
    monthly_data: Optional[Sequence[Any]],
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> ForecastResult:
    """Extrapolate next month's spend from a run of monthly totals.

    ``monthly_data`` items are mappings with a ``total`` key (plain numbers
    are accepted too).  With fewer than two months the result is all zeros.
    """
    if not monthly_data or len(monthly_data) < 2:
        return ForecastResult(predicted=0.0, min=0.0, max=0.0, confidence=0.0)

    values = [_total(point) for point in monthly_data]
    predicted = linear_regression(values).predict(len(values))
    band = predicted * config.forecast_band

    return ForecastResult(
        predicted=max(0.0, predicted),
        min=max(0.0, predicted - band),
        max=predicted + band,
        confidence=config.forecast_confidence,
    )


def predict_goal_completion(
    goal: Optional[Goal], monthly_savings: float, now: Optional[datetime] = None
) -> GoalPrediction:
    """Estimate when a savings goal is reached at the current savings pace."""
    now = resolve_now(now)
    if goal is None or monthly_savings <= 0:
        return GoalPrediction(
            completion_date=None,
            months_remaining=math.inf,
            required_monthly_saving=0.0,
            is_possible=False,
        )

    remaining = goal.target - goal.current
    if remaining <= 0:
        return GoalPrediction(
            completion_date=now,
            months_remaining=0,
            required_monthly_saving=0.0,
            is_possible=True,
            is_completed=True,
        )

    months_needed = math.ceil(remaining / monthly_savings)
    return GoalPrediction(
        completion_date=add_months(now, months_needed),
        months_remaining=months_needed,
        required_monthly_saving=remaining / months_needed,
        is_possible=True,
        is_completed=False,
    )


def select_main_goal(goals: Sequence[Goal]) -> Optional[Goal]:
    for goal in goals:
        if goal.is_main:
            return goal
    return goals[0] if goals else None


def project_net_income(
    historical_data: Optional[Sequence[Mapping[str, float]]],
    months: int = 6,
    now: Optional[datetime] = None,
) -> List[ProjectionPoint]:
    """Project income, expense and net for the next ``months`` months.

    Income and expense are fitted independently and each projection is
    floored at zero before the net is taken.
    """
    now = resolve_now(now)
    if not historical_data or len(historical_data) < 2:
        return [
            ProjectionPoint(month=add_months(now, i + 1), income=0.0, expense=0.0, net=0.0)
            for i in range(months)
        ]

    income_fit = linear_regression([point["income"] for point in historical_data])
    expense_fit = linear_regression([point["expense"] for point in historical_data])
    base = len(historical_data)

    projections = []
    for i in range(months):
        income = max(0.0, income_fit.predict(base + i))
        expense = max(0.0, expense_fit.predict(base + i))
        projections.append(
            ProjectionPoint(month=add_months(now, i + 1), income=income, expense=expense, net=income - expense)
        )
    return projections


def calculate_daily_heatmap(expenses: Sequence[Expense], month: int, year: int) -> List[HeatmapPoint]:
    """Sum one month's expenses per calendar day, tagged with the weekday.

    Weekdays follow the ``0 = Sunday .. 6 = Saturday`` convention.
    """
    daily: Dict[str, float] = {}
    weekdays: Dict[str, int] = {}
    for expense in expenses:
        when = parse_date(expense.date)
        if pd.isna(when) or when.month != month or when.year != year:
            continue
        key = when.strftime("%Y-%m-%d")
        daily[key] = daily.get(key, 0.0) + expense.amount
        weekdays[key] = (when.weekday() + 1) % 7

    return [HeatmapPoint(date_key=key, weekday=weekdays[key], amount=amount) for key, amount in daily.items()]

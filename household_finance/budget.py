"""Safe daily spending limit and monthly budget depletion."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from .dates import ONE_DAY, add_days, resolve_now
from .models import BudgetDepletion


def calculate_daily_limit(
    net_balance: float, next_target_date: datetime, now: Optional[datetime] = None
) -> float:
    """Spread the net balance evenly over the days left until payday.

    Returns ``0.0`` when the balance is not positive or payday is not in
    the future.
    """
    now = resolve_now(now)
    remaining = max(next_target_date - now, timedelta(0))
    days_remaining = math.ceil(remaining / ONE_DAY)
    if days_remaining > 0 and net_balance > 0:
        return net_balance / days_remaining
    return 0.0


def calculate_budget_depletion(
    spent: float,
    budget: float,
    current_day: int,
    days_in_month: int,
    now: Optional[datetime] = None,
) -> BudgetDepletion:
    """Project when the monthly budget runs out at the current daily pace.

    Args:
        spent: Amount spent so far this month.
        budget: Monthly budget; ``0`` means no budget is configured.
        current_day: Day of the month the spend covers, ``0`` before any day.
        days_in_month: Length of the month being tracked.
        now: Reference instant for the depletion date.
    """
    now = resolve_now(now)
    remaining = budget - spent
    days_remaining = days_in_month - current_day

    if current_day == 0:
        return BudgetDepletion(
            days_left=days_in_month,
            depletion_date=None,
            safe_spending_rate=budget / days_in_month if days_in_month else 0.0,
            current_spending_rate=0.0,
            is_on_track=True,
            percent_used=0.0,
        )

    daily_average = spent / current_day
    if remaining > 0 and daily_average > 0:
        days_until_depletion = math.floor(remaining / daily_average)
    else:
        days_until_depletion = 0

    return BudgetDepletion(
        days_left=days_until_depletion,
        depletion_date=add_days(now, days_until_depletion) if days_until_depletion > 0 else now,
        safe_spending_rate=max(0.0, remaining / max(days_remaining, 1)),
        current_spending_rate=daily_average,
        is_on_track=daily_average <= budget / days_in_month if budget > 0 else True,
        percent_used=spent / budget * 100 if budget > 0 else 0.0,
    )

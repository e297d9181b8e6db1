"""Pay-cycle position from a two-paydays-per-month schedule.

The cycle logic assumes ``salary1.day < salary2.day``.  With the days
reversed or equal the same arithmetic still runs, but the resulting
window is whatever the comparisons below produce; no alternative
interpretation is applied.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .dates import days_between_ceil, make_date, resolve_now
from .models import NextIncome, NextSalaryInfo, PaydayRule, SalaryCycle, UserProfile


def _title(rule: PaydayRule) -> str:
    return f"DAYS UNTIL {rule.label.upper()}"


def compute_cycle(now: datetime, s1: int, s2: int) -> tuple[datetime, datetime, bool]:
    """Return ``(start, target, targets_salary2)`` for the current cycle."""
    year, month, day = now.year, now.month, now.day
    if s1 <= day < s2:
        return make_date(year, month, s1), make_date(year, month, s2), True
    if day >= s2:
        return make_date(year, month, s2), make_date(year, month + 1, s1), False
    return make_date(year, month - 1, s2), make_date(year, month, s1), False


def calculate_salary_cycle(profile: UserProfile, now: Optional[datetime] = None) -> SalaryCycle:
    """Where ``now`` sits between the last payday and the next one."""
    now = resolve_now(now)
    start, target, targets_salary2 = compute_cycle(now, profile.salary1.day, profile.salary2.day)

    total = target - start
    progress = (now - start) / total * 100 if total.total_seconds() else 0.0
    progress = min(max(progress, 0.0), 100.0)

    return SalaryCycle(
        title_text=_title(profile.salary2 if targets_salary2 else profile.salary1),
        start_date=start,
        target_date=target,
        progress=progress,
        days_left=days_between_ceil(target, now),
    )


def _next_occurrence(now: datetime, day: int) -> datetime:
    if now.day >= day:
        return make_date(now.year, now.month + 1, day)
    return make_date(now.year, now.month, day)


def calculate_next_salary_info(profile: UserProfile, now: Optional[datetime] = None) -> NextSalaryInfo:
    """Pick the nearer of the two upcoming paydays.

    Each payday rolls to next month once its day has been reached.  The
    first salary wins only when strictly earlier; on equal dates the
    second salary is reported.
    """
    now = resolve_now(now)
    candidate1 = _next_occurrence(now, profile.salary1.day)
    candidate2 = _next_occurrence(now, profile.salary2.day)

    if candidate1 < candidate2:
        target, rule = candidate1, profile.salary1
    else:
        target, rule = candidate2, profile.salary2

    return NextSalaryInfo(
        target_date=target,
        next_income=NextIncome(date=target, amount=rule.amount, source=rule.label),
    )


def days_until_next_salary(info: NextSalaryInfo, now: Optional[datetime] = None) -> int:
    return days_between_ceil(info.target_date, resolve_now(now))

"""Aggregation of ledger records into totals and chart series.

Every function here takes tuples of frozen :class:`Expense`/:class:`Income`
records and returns plain Python containers or derived dataclasses.
pandas does the grouping; results are converted back to builtin floats
so that they serialise cleanly at the AI-summary boundary.

Month walks are anchored on an explicit ``now``; records whose date fails
to parse never match a month or week window.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

import pandas as pd

from .dates import in_month, make_date, month_shift, parse_date, parse_dates, resolve_now
from .models import (
    Account,
    AccountSummary,
    CategoryBudgetEntry,
    CategoryTrend,
    CumulativePoint,
    Expense,
    Income,
    MonthSummary,
    RecurringSummary,
    Totals,
    TrendPoint,
    UserProfile,
    WeeklyEntry,
    YearComparison,
)

R = TypeVar("R", Expense, Income)

UNKNOWN_BANK = "Unknown"


def records_frame(records: Iterable) -> pd.DataFrame:
    """Build a DataFrame with a parsed ``when`` column from ledger records."""
    rows = [vars(record) for record in records]
    if not rows:
        return pd.DataFrame(
            {
                "date": pd.Series(dtype=object),
                "amount": pd.Series(dtype=float),
                "when": pd.Series(dtype="datetime64[ns]"),
            }
        )
    frame = pd.DataFrame(rows)
    frame["amount"] = pd.to_numeric(frame["amount"], errors="coerce").fillna(0.0)
    frame["when"] = parse_dates(frame["date"]).values
    return frame


def _month_mask(frame: pd.DataFrame, month: int, year: int) -> pd.Series:
    return (frame["when"].dt.month == month) & (frame["when"].dt.year == year)


def _sum(values) -> float:
    return float(sum(values, 0.0))


def count_unparsed_dates(records: Iterable) -> int:
    return sum(1 for record in records if pd.isna(parse_date(record.date)))


# ---------------------------------------------------------------------------
# Whole-ledger aggregates
# ---------------------------------------------------------------------------


def calculate_totals(incomes: Sequence[Income], expenses: Sequence[Expense]) -> Totals:
    total_income = _sum(item.amount for item in incomes)
    total_expense = _sum(item.amount for item in expenses)
    return Totals(total_income, total_expense, total_income - total_expense)


def group_by_date(records: Sequence[R]) -> Tuple[Dict[str, List[R]], List[str]]:
    """Group records by their date string.

    Returns the groups and the date keys sorted newest first.  Keys that
    do not parse sort after every valid date.
    """
    groups: Dict[str, List[R]] = {}
    for record in records:
        groups.setdefault(record.date, []).append(record)

    def sort_key(key: str):
        parsed = parse_date(key)
        return (1, parsed.to_pydatetime()) if not pd.isna(parsed) else (0, datetime.min)

    return groups, sorted(groups, key=sort_key, reverse=True)


def get_chart_data(expenses: Sequence[Expense]) -> Tuple[Dict[str, float], Dict[str, float]]:
    """Sum expenses by category and by date string, in first-seen order."""
    frame = records_frame(expenses)
    if frame.empty:
        return {}, {}
    by_category = frame.groupby("category", sort=False)["amount"].sum()
    by_date = frame.groupby("date", sort=False)["amount"].sum()
    return (
        {str(k): float(v) for k, v in by_category.items()},
        {str(k): float(v) for k, v in by_date.items()},
    )


def expenses_by_bank(expenses: Sequence[Expense]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for expense in expenses:
        bank = expense.bank or UNKNOWN_BANK
        totals[bank] = totals.get(bank, 0.0) + expense.amount
    return totals


def account_summaries(
    accounts: Sequence[Account], bank_breakdown: Dict[str, float]
) -> List[AccountSummary]:
    """Credit usage per account and the balance to display for it.

    An explicit ``balance`` wins.  Otherwise a card with a limit shows its
    unused credit, and anything else shows the negated spend recorded
    against that bank.
    """
    summaries = []
    for account in accounts:
        debt = account.debt or 0.0
        limit = account.total_limit
        used_percent = debt / limit * 100 if debt > 0 and limit else 0.0
        remaining = limit - debt if limit else 0.0
        if account.balance is not None:
            display_balance = account.balance
        elif limit:
            display_balance = remaining
        else:
            display_balance = -bank_breakdown.get(account.bank, 0.0)
        summaries.append(
            AccountSummary(
                bank=account.bank,
                type=account.type,
                debt=debt,
                total_limit=limit,
                used_percent=used_percent,
                remaining=remaining,
                display_balance=display_balance,
            )
        )
    return summaries


def recurring_summary(profile: UserProfile, now: Optional[datetime] = None) -> RecurringSummary:
    """Monthly total of recurring payments and the next one due.

    Payments whose day is before today count as next month's, pushed back
    by a flat 30 days; ties keep the profile order.
    """
    today = resolve_now(now).day
    payments = profile.recurring_payments
    upcoming = sorted(payments, key=lambda p: p.day + 30 if p.day < today else p.day)
    return RecurringSummary(
        total_monthly=_sum(payment.amount for payment in payments),
        active_count=len(payments),
        next_payment=upcoming[0] if upcoming else None,
    )


# ---------------------------------------------------------------------------
# Month filters and walks
# ---------------------------------------------------------------------------


def filter_month(records: Sequence[R], month: int, year: int) -> Tuple[R, ...]:
    return tuple(record for record in records if in_month(parse_date(record.date), month, year))


def month_total(records: Sequence, month: int, year: int) -> float:
    return _sum(record.amount for record in filter_month(records, month, year))


def get_trend_data(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    months_count: int = 6,
    now: Optional[datetime] = None,
) -> List[TrendPoint]:
    """Monthly income and expense totals, oldest month first."""
    now = resolve_now(now)
    income_frame = records_frame(incomes)
    expense_frame = records_frame(expenses)

    result = []
    for offset in range(months_count - 1, -1, -1):
        year, month = month_shift(now.year, now.month, -offset)
        income = income_frame.loc[_month_mask(income_frame, month, year), "amount"].sum()
        expense = expense_frame.loc[_month_mask(expense_frame, month, year), "amount"].sum()
        result.append(
            TrendPoint(
                month=month,
                year=year,
                raw_date=make_date(year, month, 1),
                income=float(income),
                expense=float(expense),
            )
        )
    return result


def get_category_trend_data(
    expenses: Sequence[Expense],
    months_count: int = 4,
    now: Optional[datetime] = None,
) -> CategoryTrend:
    """Per-category monthly expense totals, oldest month first.

    Every category seen anywhere in ``expenses`` gets one value per month,
    ``0.0`` for months where it has no spending.
    """
    now = resolve_now(now)
    frame = records_frame(expenses)
    categories = list(pd.unique(frame["category"])) if not frame.empty else []
    datasets: Dict[str, List[float]] = {str(cat): [] for cat in categories}
    raw_dates = []

    for offset in range(months_count - 1, -1, -1):
        year, month = month_shift(now.year, now.month, -offset)
        raw_dates.append(make_date(year, month, 1))
        if frame.empty:
            continue
        monthly = frame[_month_mask(frame, month, year)]
        totals = monthly.groupby("category")["amount"].sum().reindex(categories, fill_value=0.0)
        for category, total in totals.items():
            datasets[str(category)].append(float(total))

    return CategoryTrend(raw_dates=tuple(raw_dates), datasets=datasets)


def get_weekly_breakdown(
    expenses: Sequence[Expense],
    weeks_count: int = 4,
    now: Optional[datetime] = None,
) -> List[WeeklyEntry]:
    """Expense totals for trailing seven-day windows ending at ``now``.

    Window ``i`` covers ``[now - (i+1)*7 days, now - i*7 days)``.  The
    result is ordered oldest window first, labelled ``"1. Week"`` up to
    ``"{weeks_count}. Week"`` for the window ending now.
    """
    now = resolve_now(now)
    frame = records_frame(expenses)
    result: List[WeeklyEntry] = []
    for i in range(weeks_count):
        start = now - timedelta(days=(i + 1) * 7)
        end = now - timedelta(days=i * 7)
        mask = (frame["when"] >= start) & (frame["when"] < end)
        total = float(frame.loc[mask, "amount"].sum())
        result.insert(0, WeeklyEntry(label=f"{weeks_count - i}. Week", amount=total))
    return result


def get_category_vs_budget(
    expenses: Sequence[Expense],
    placeholder_budget: float = 5000.0,
    now: Optional[datetime] = None,
) -> List[CategoryBudgetEntry]:
    """Current-month spend per category, largest first, against a flat budget."""
    now = resolve_now(now)
    frame = records_frame(expenses)
    if frame.empty:
        return []
    current = frame[_month_mask(frame, now.month, now.year)]
    totals = current.groupby("category", sort=False)["amount"].sum()
    entries = [
        CategoryBudgetEntry(category=str(cat), spent=float(spent), budget=placeholder_budget)
        for cat, spent in totals.items()
    ]
    return sorted(entries, key=lambda entry: entry.spent, reverse=True)


def monthly_expense_totals(
    expenses: Sequence[Expense], month: int, year: int, count: int = 6
) -> List[Dict[str, object]]:
    """Expense totals for the ``count`` months ending at ``month``/``year``."""
    frame = records_frame(expenses)
    totals = []
    for offset in range(count - 1, -1, -1):
        y, m = month_shift(year, month, -offset)
        totals.append({
            "month": make_date(y, m, 1),
            "total": float(frame.loc[_month_mask(frame, m, y), "amount"].sum()),
        })
    return totals


def monthly_history(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    month: int,
    year: int,
    count: int = 6,
) -> List[Dict[str, float]]:
    """Income and expense totals for the ``count`` months ending at ``month``/``year``."""
    income_frame = records_frame(incomes)
    expense_frame = records_frame(expenses)
    history = []
    for offset in range(count - 1, -1, -1):
        y, m = month_shift(year, month, -offset)
        history.append({
            "income": float(income_frame.loc[_month_mask(income_frame, m, y), "amount"].sum()),
            "expense": float(expense_frame.loc[_month_mask(expense_frame, m, y), "amount"].sum()),
        })
    return history


# ---------------------------------------------------------------------------
# Selected-month views
# ---------------------------------------------------------------------------


def month_summary(
    expenses: Sequence[Expense], incomes: Sequence[Income], month: int, year: int
) -> MonthSummary:
    month_expenses = filter_month(expenses, month, year)
    month_incomes = filter_month(incomes, month, year)
    expense_groups, expense_dates = group_by_date(month_expenses)
    income_groups, income_dates = group_by_date(month_incomes)
    category_map, _ = get_chart_data(month_expenses)
    return MonthSummary(
        month=month,
        year=year,
        expenses=month_expenses,
        incomes=month_incomes,
        expense_total=_sum(e.amount for e in month_expenses),
        income_total=_sum(i.amount for i in month_incomes),
        expense_groups=expense_groups,
        expense_dates=expense_dates,
        income_groups=income_groups,
        income_dates=income_dates,
        category_map=category_map,
    )


def _day_part(date: str) -> str:
    return date.split(".")[0]


def day_of_month_map(month_expenses: Sequence[Expense]) -> Dict[str, float]:
    """Sum one month's expenses by the day part of their date string."""
    totals: Dict[str, float] = {}
    for expense in month_expenses:
        day = _day_part(expense.date)
        totals[day] = totals.get(day, 0.0) + expense.amount
    return {day: totals[day] for day in sorted(totals, key=int)}


def weekly_budget_performance(
    month_expenses: Sequence[Expense], monthly_budget: Optional[float], weeks: int = 4
) -> List[WeeklyEntry]:
    """Calendar-week spend for one month against a quarter of the budget.

    Days 1-7 fall in week 1, 8-14 in week 2 and so on; everything from
    day 22 onwards lands in the last week.
    """
    spent = [0.0] * weeks
    for expense in month_expenses:
        index = min((int(_day_part(expense.date)) - 1) // 7, weeks - 1)
        spent[index] += expense.amount
    weekly_budget = (monthly_budget or 0) / weeks
    return [
        WeeklyEntry(label=f"Week {n + 1}", amount=amount, budget=weekly_budget)
        for n, amount in enumerate(spent)
    ]


def cumulative_balance(
    month_expenses: Sequence[Expense], month_incomes: Sequence[Income]
) -> List[CumulativePoint]:
    """Running balance over one month's transactions in date order."""
    frame = pd.concat(
        [
            records_frame(month_expenses).assign(signed=lambda df: -df["amount"]),
            records_frame(month_incomes).assign(signed=lambda df: df["amount"]),
        ],
        ignore_index=True,
    )
    if frame.empty:
        return []
    frame = frame.sort_values("when", kind="mergesort")
    frame["balance"] = frame["signed"].cumsum()
    return [
        CumulativePoint(day=int(when.day), balance=float(balance))
        for when, balance in zip(frame["when"], frame["balance"])
    ]


def year_comparison(
    expenses: Sequence[Expense], incomes: Sequence[Income], month: int, year: int
) -> YearComparison:
    return YearComparison(
        year=year,
        previous_year=year - 1,
        expenses=month_total(expenses, month, year),
        incomes=month_total(incomes, month, year),
        previous_expenses=month_total(expenses, month, year - 1),
        previous_incomes=month_total(incomes, month, year - 1),
    )

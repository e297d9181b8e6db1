"""Tests for household_finance.aggregation."""

from __future__ import annotations

from datetime import datetime

import pytest

from household_finance import aggregation as agg
from household_finance.models import Account, Expense, Income, PaydayRule, RecurringPayment, UserProfile

NOW = datetime(2025, 1, 29)


def _expense(id_, date, amount, category="Food", bank=None):
    return Expense(id=id_, date=date, amount=amount, category=category, bank=bank)


def _income(id_, date, amount, source="Salary"):
    return Income(id=id_, date=date, amount=amount, source=source)


def test_calculate_totals() -> None:
    incomes = [_income("i1", "01.01.2025", 1000)]
    expenses = [_expense("e1", "02.01.2025", 300), _expense("e2", "03.01.2025", 200)]
    totals = agg.calculate_totals(incomes, expenses)
    assert totals.total_income == 1000
    assert totals.total_expense == 500
    assert totals.net_balance == 500


def test_calculate_totals_empty() -> None:
    totals = agg.calculate_totals([], [])
    assert (totals.total_income, totals.total_expense, totals.net_balance) == (0, 0, 0)


def test_group_by_date_sorts_newest_first_with_bad_dates_last() -> None:
    expenses = [
        _expense("a", "02.01.2025", 1),
        _expense("b", "bad", 2),
        _expense("c", "15.12.2024", 3),
        _expense("d", "02.01.2025", 4),
    ]
    groups, dates = agg.group_by_date(expenses)
    assert dates == ["02.01.2025", "15.12.2024", "bad"]
    assert [e.id for e in groups["02.01.2025"]] == ["a", "d"]


def test_get_chart_data_keeps_first_seen_order() -> None:
    expenses = [
        _expense("a", "02.01.2025", 10, "Rent"),
        _expense("b", "01.01.2025", 5, "Food"),
        _expense("c", "02.01.2025", 7, "Rent"),
    ]
    category_map, date_map = agg.get_chart_data(expenses)
    assert list(category_map) == ["Rent", "Food"]
    assert category_map["Rent"] == 17
    assert date_map == {"02.01.2025": 17, "01.01.2025": 5}


def test_expenses_by_bank_labels_missing_bank() -> None:
    expenses = [_expense("a", "01.01.2025", 10, bank="Acme"), _expense("b", "01.01.2025", 5)]
    assert agg.expenses_by_bank(expenses) == {"Acme": 10, "Unknown": 5}


def test_trend_data_walks_back_from_now() -> None:
    incomes = [_income("i", "10.12.2024", 900)]
    expenses = [_expense("e", "05.01.2025", 120), _expense("x", "not a date", 999)]
    trend = agg.get_trend_data(incomes, expenses, months_count=3, now=NOW)
    assert [(p.month, p.year) for p in trend] == [(11, 2024), (12, 2024), (1, 2025)]
    assert trend[1].income == 900
    assert trend[2].expense == 120
    assert trend[0].raw_date == datetime(2024, 11, 1)


def test_category_trend_fills_missing_months_with_zero() -> None:
    expenses = [_expense("a", "03.12.2024", 40, "Fuel"), _expense("b", "04.01.2025", 60, "Food")]
    trend = agg.get_category_trend_data(expenses, months_count=2, now=NOW)
    assert trend.datasets == {"Fuel": [40.0, 0.0], "Food": [0.0, 60.0]}
    assert len(trend.raw_dates) == 2


def test_category_trend_empty_ledger() -> None:
    trend = agg.get_category_trend_data([], months_count=4, now=NOW)
    assert trend.datasets == {}
    assert len(trend.raw_dates) == 4


def test_weekly_breakdown_orders_oldest_window_first() -> None:
    expenses = [
        _expense("a", "28.01.2025", 30),
        _expense("b", "20.01.2025", 20),
        _expense("c", "01.01.2025", 10),
        _expense("d", "29.01.2025", 99),  # on the window end, excluded
    ]
    weeks = agg.get_weekly_breakdown(expenses, weeks_count=4, now=NOW)
    assert [w.label for w in weeks] == ["1. Week", "2. Week", "3. Week", "4. Week"]
    assert [w.amount for w in weeks] == [10, 0, 20, 30]


def test_weekly_breakdown_sums_to_expenses_in_range() -> None:
    expenses = [_expense(str(day), f"{day:02d}.01.2025", day) for day in range(1, 29)]
    weeks = agg.get_weekly_breakdown(expenses, weeks_count=4, now=NOW)
    assert sum(w.amount for w in weeks) == sum(range(1, 29))


def test_category_vs_budget_current_month_only() -> None:
    expenses = [
        _expense("a", "05.01.2025", 10, "Food"),
        _expense("b", "06.01.2025", 50, "Rent"),
        _expense("c", "06.12.2024", 500, "Rent"),
    ]
    entries = agg.get_category_vs_budget(expenses, placeholder_budget=5000, now=NOW)
    assert [(e.category, e.spent) for e in entries] == [("Rent", 50), ("Food", 10)]
    assert all(e.budget == 5000 for e in entries)


def test_month_summary_and_day_map() -> None:
    expenses = [
        _expense("a", "10.01.2025", 5),
        _expense("b", "02.01.2025", 7),
        _expense("c", "10.01.2025", 3),
        _expense("d", "10.02.2025", 100),
    ]
    incomes = [_income("i", "01.01.2025", 50)]
    summary = agg.month_summary(expenses, incomes, 1, 2025)
    assert summary.expense_total == 15
    assert summary.income_total == 50
    assert summary.balance == 35
    assert summary.expense_dates == ["10.01.2025", "02.01.2025"]
    assert agg.day_of_month_map(summary.expenses) == {"02": 7, "10": 8}


def test_weekly_budget_performance_puts_late_days_in_last_week() -> None:
    expenses = [
        _expense("a", "01.01.2025", 10),
        _expense("b", "08.01.2025", 20),
        _expense("c", "22.01.2025", 30),
        _expense("d", "31.01.2025", 40),
    ]
    weeks = agg.weekly_budget_performance(expenses, 400)
    assert [w.amount for w in weeks] == [10, 20, 0, 70]
    assert all(w.budget == 100 for w in weeks)
    assert weeks[0].label == "Week 1"


def test_cumulative_balance_runs_in_date_order() -> None:
    expenses = [_expense("a", "05.01.2025", 30)]
    incomes = [_income("i", "01.01.2025", 100)]
    points = agg.cumulative_balance(expenses, incomes)
    assert [(p.day, p.balance) for p in points] == [(1, 100), (5, 70)]
    assert agg.cumulative_balance([], []) == []


def test_year_comparison() -> None:
    expenses = [_expense("a", "05.01.2025", 30), _expense("b", "05.01.2024", 20)]
    incomes = [_income("i", "01.01.2024", 100)]
    comparison = agg.year_comparison(expenses, incomes, 1, 2025)
    assert comparison.previous_year == 2024
    assert comparison.expenses == 30
    assert comparison.previous_net == pytest.approx(80)


def test_monthly_series_helpers() -> None:
    expenses = [_expense("a", "05.12.2024", 30), _expense("b", "05.01.2025", 20)]
    incomes = [_income("i", "01.01.2025", 100)]
    totals = agg.monthly_expense_totals(expenses, 1, 2025, count=2)
    assert [t["total"] for t in totals] == [30, 20]
    history = agg.monthly_history(incomes, expenses, 1, 2025, count=2)
    assert history == [{"income": 0.0, "expense": 30.0}, {"income": 100.0, "expense": 20.0}]


def test_single_transaction_totals_scenario() -> None:
    totals = agg.calculate_totals(
        [_income("i", "01.01.2024", 1000)], [_expense("e", "01.01.2024", 100)]
    )
    assert totals.to_dict() == {"totalIncome": 1000, "totalExpense": 100, "netBalance": 900}


@pytest.mark.parametrize("weeks_count", [0, 1, 4, 6])
def test_weekly_breakdown_returns_one_entry_per_week(weeks_count) -> None:
    expenses = [_expense(str(n), f"{n:02d}.01.2025", 1) for n in range(1, 29)]
    weeks = agg.get_weekly_breakdown(expenses, weeks_count=weeks_count, now=NOW)
    assert len(weeks) == weeks_count
    if weeks_count:
        assert weeks[-1].label == f"{weeks_count}. Week"


def test_account_summaries() -> None:
    accounts = [
        Account(bank="Card", type="credit", debt=300, total_limit=1000),
        Account(bank="Savings", type="deposit", balance=250),
        Account(bank="Acme", type="debit"),
        Account(bank="Spare", type="credit", debt=0, total_limit=500),
    ]
    card, savings, debit, spare = agg.account_summaries(accounts, {"Acme": 120})

    assert card.used_percent == 30
    assert card.remaining == 700
    assert card.display_balance == 700
    assert savings.display_balance == 250
    assert debit.display_balance == -120
    assert debit.used_percent == 0 and debit.remaining == 0
    assert spare.used_percent == 0
    assert spare.remaining == 500


def test_account_without_spend_shows_zero_balance() -> None:
    (summary,) = agg.account_summaries([Account(bank="New", type="debit")], {})
    assert summary.display_balance == 0


def _profile_with(payments):
    return UserProfile(
        user_name="",
        salary1=PaydayRule(day=1, amount=0, label="Salary 1"),
        salary2=PaydayRule(day=15, amount=0, label="Salary 2"),
        recurring_payments=tuple(payments),
    )


def test_recurring_summary_next_payment_rolls_past_days() -> None:
    payments = [
        RecurringPayment(id="a", day=5, amount=10, name="Gym"),
        RecurringPayment(id="b", day=12, amount=20, name="Phone"),
        RecurringPayment(id="c", day=10, amount=30, name="Rent"),
    ]
    summary = agg.recurring_summary(_profile_with(payments), datetime(2025, 1, 10))
    assert summary.total_monthly == 60
    assert summary.active_count == 3
    assert summary.next_payment.name == "Rent"

    later = agg.recurring_summary(_profile_with(payments), datetime(2025, 1, 13))
    assert later.next_payment.name == "Gym"


def test_recurring_summary_without_payments() -> None:
    summary = agg.recurring_summary(_profile_with([]), NOW)
    assert summary.to_dict() == {"totalMonthly": 0.0, "activeSubscriptions": 0, "nextPayment": None}

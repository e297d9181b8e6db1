from datetime import datetime

import pytest

from household_finance.config import AnalyticsConfig
from household_finance.insights import average_daily_spend, generate_analytic_insights, top_category
from household_finance.models import Expense, PaydayRule, RecurringPayment, UserProfile

NOW = datetime(2025, 1, 10)


def _profile(day1=1, day2=25, recurring=()):
    return UserProfile(
        user_name="Test",
        salary1=PaydayRule(day=day1, amount=2000, label="Salary"),
        salary2=PaydayRule(day=day2, amount=500, label="Bonus"),
        recurring_payments=tuple(recurring),
    )


def _expense(id_, date, amount, category):
    return Expense(id=id_, date=date, amount=amount, category=category)


def test_negative_balance_yields_only_critical_insight():
    insights = generate_analytic_insights([], 0, -50, {}, 0, _profile(), now=NOW)
    assert len(insights) == 1
    assert insights[0].kind == "critical-balance"
    assert insights[0].severity == "high"
    assert insights[0].params == {"balance": "-50.00"}
    assert insights[0].title_key == "dashboard.insights.criticalBalanceTitle"


def test_high_spending_and_category_warning():
    expenses = [_expense("a", "01.01.2025", 300, "Food"), _expense("b", "02.01.2025", 100, "Fuel")]
    insights = generate_analytic_insights(
        expenses, 400, 600, {"Food": 300, "Fuel": 100}, 100, _profile(), now=NOW
    )
    kinds = [i.kind for i in insights]
    assert kinds == ["high-spending", "category-warning"]
    assert insights[0].params == {"avg": "200.00", "target": "100.00"}
    assert insights[1].params["percent"] == 75
    assert insights[1].params["category"] == "Food"


def test_budget_control_when_spending_is_low():
    expenses = [_expense("a", "01.01.2025", 10, "Food")] + [
        _expense(str(n), f"0{n}.01.2025", 10, f"Cat{n}") for n in range(2, 5)
    ]
    category_map = {"Food": 10, "Cat2": 10, "Cat3": 10, "Cat4": 10}
    insights = generate_analytic_insights(expenses, 40, 1000, category_map, 100, _profile(), now=NOW)
    assert [i.kind for i in insights] == ["budget-control"]
    assert insights[0].severity == "positive"


def test_payday_and_recurring_payment_reminders():
    profile = _profile(
        day1=1,
        day2=14,
        recurring=[RecurringPayment(id="r1", day=12, amount=800, name="Rent")],
    )
    insights = generate_analytic_insights([], 0, 1000, {}, 0, profile, now=NOW)
    kinds = [i.kind for i in insights]
    assert "payment-approaching" in kinds
    assert "upcoming-payment" in kinds
    reminder = insights[kinds.index("payment-approaching")]
    assert reminder.params == {"source": "Bonus", "days": 4}
    payment = insights[kinds.index("upcoming-payment")]
    assert payment.params == {"name": "Rent", "days": 2}


def test_recurring_payment_due_today_counts():
    profile = _profile(recurring=[RecurringPayment(id="r1", day=10, amount=50, name="Gym")])
    insights = generate_analytic_insights([], 0, 1000, {}, 0, profile, now=NOW)
    assert [i.params for i in insights if i.kind == "upcoming-payment"] == [{"name": "Gym", "days": 0}]


def test_thresholds_come_from_config():
    expenses = [_expense("a", "01.01.2025", 30, "Food"), _expense("b", "01.01.2025", 70, "Fuel")]
    strict = AnalyticsConfig(category_share_threshold=80.0)
    insights = generate_analytic_insights(
        expenses, 100, 900, {"Food": 30, "Fuel": 70}, 100, _profile(), now=NOW, config=strict
    )
    assert "category-warning" not in [i.kind for i in insights]


def test_helpers():
    expenses = [_expense("a", "01.01.2025", 30, "A"), _expense("b", "01.01.2025", 30, "B")]
    assert average_daily_spend(expenses, 60) == 60
    assert average_daily_spend([], 0) == 0
    assert top_category({"A": 30, "B": 30}) == ("A", 30)


def _kinds(insights):
    return [i.kind for i in insights]


@pytest.mark.parametrize("payday, fires", [(17, True), (18, False)])
def test_payday_reminder_window_ends_at_seven_days(payday, fires):
    insights = generate_analytic_insights([], 0, 1000, {}, 0, _profile(day2=payday), now=NOW)
    assert ("payment-approaching" in _kinds(insights)) is fires


@pytest.mark.parametrize("due_day, fires", [(15, True), (16, False)])
def test_recurring_reminder_window_ends_at_five_days(due_day, fires):
    profile = _profile(recurring=[RecurringPayment(id="r", day=due_day, amount=10, name="Phone")])
    insights = generate_analytic_insights([], 0, 1000, {}, 0, profile, now=NOW)
    assert ("upcoming-payment" in _kinds(insights)) is fires


@pytest.mark.parametrize(
    "category_map, fires",
    [
        ({"A": 35, "B": 33, "C": 32}, False),
        ({"A": 35.4, "B": 32.3, "C": 32.3}, False),
        ({"A": 36, "B": 32, "C": 32}, True),
    ],
)
def test_category_warning_needs_share_above_threshold(category_map, fires):
    insights = generate_analytic_insights([], 100, 1000, category_map, 0, _profile(), now=NOW)
    assert ("category-warning" in _kinds(insights)) is fires


@pytest.mark.parametrize("spent", [110, 85])
def test_pace_exactly_on_a_ratio_yields_no_pace_insight(spent):
    expenses = [_expense("a", "01.01.2025", spent, "Food")]
    insights = generate_analytic_insights(expenses, spent, 1000, {"Food": spent}, 100, _profile(), now=NOW)
    assert not {"high-spending", "budget-control"} & set(_kinds(insights))


def test_pace_just_outside_the_ratios():
    above = generate_analytic_insights(
        [_expense("a", "01.01.2025", 111, "Food")], 111, 1000, {}, 100, _profile(), now=NOW
    )
    below = generate_analytic_insights(
        [_expense("a", "01.01.2025", 84, "Food")], 84, 1000, {}, 100, _profile(), now=NOW
    )
    assert _kinds(above) == ["high-spending"]
    assert _kinds(below) == ["budget-control"]

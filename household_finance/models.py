"""Record types for the household ledger and the views derived from it.

Input records are built once at the ingestion boundary through their
``from_dict`` constructors, which accept the camelCase wire shapes used by
the import collaborator and raise ``ValueError`` when a required field is
missing.  Every calculator downstream receives these frozen records and
can assume they are well formed.

Derived entities expose ``to_dict`` so that the rendering layer and the
AI-summary payload see the same stable camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple


def _require(data: Mapping[str, Any], key: str, record: str) -> Any:
    if key not in data or data[key] is None:
        raise ValueError(f"{record} is missing required field '{key}'")
    return data[key]


def _number(value: Any, key: str, record: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{record} field '{key}' must be numeric, got {value!r}") from exc


def _day(value: Any, key: str, record: str) -> int:
    day = int(_number(value, key, record))
    if not 1 <= day <= 31:
        raise ValueError(f"{record} field '{key}' must be between 1 and 31, got {day}")
    return day


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expense:
    id: str
    date: str  # dd.MM.yyyy
    amount: float
    category: str
    desc: str = ""
    bank: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Expense":
        return cls(
            id=str(data.get("id", "")),
            date=str(_require(data, "date", "Expense")),
            amount=_number(_require(data, "amount", "Expense"), "amount", "Expense"),
            category=str(_require(data, "category", "Expense")),
            desc=str(data.get("desc") or ""),
            bank=data.get("bank"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "date": self.date,
            "amount": self.amount,
            "category": self.category,
            "desc": self.desc,
        }
        if self.bank is not None:
            payload["bank"] = self.bank
        return payload


@dataclass(frozen=True)
class Income:
    id: str
    date: str  # dd.MM.yyyy
    amount: float
    source: str
    desc: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Income":
        # Statement imports label the payer as ``sender``
        source = data.get("source")
        if source is None:
            source = data.get("sender")
        if source is None:
            raise ValueError("Income is missing required field 'source'")
        return cls(
            id=str(data.get("id", "")),
            date=str(_require(data, "date", "Income")),
            amount=_number(_require(data, "amount", "Income"), "amount", "Income"),
            source=str(source),
            desc=str(data.get("desc") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "amount": self.amount,
            "source": self.source,
            "desc": self.desc,
        }


@dataclass(frozen=True)
class Account:
    bank: str
    type: str
    debt: Optional[float] = None
    balance: Optional[float] = None
    total_limit: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Account":
        def optional_number(key: str) -> Optional[float]:
            value = data.get(key)
            return None if value is None else _number(value, key, "Account")

        return cls(
            bank=str(data.get("bank") or ""),
            type=str(data.get("type") or ""),
            debt=optional_number("debt"),
            balance=optional_number("balance"),
            total_limit=optional_number("totalLimit"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"bank": self.bank, "type": self.type}
        if self.debt is not None:
            payload["debt"] = self.debt
        if self.balance is not None:
            payload["balance"] = self.balance
        if self.total_limit is not None:
            payload["totalLimit"] = self.total_limit
        return payload


# ---------------------------------------------------------------------------
# Profile and goals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaydayRule:
    day: int
    amount: float
    label: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PaydayRule":
        return cls(
            day=_day(_require(data, "day", "PaydayRule"), "day", "PaydayRule"),
            amount=_number(data.get("amount", 0), "amount", "PaydayRule"),
            label=str(data.get("label") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "amount": self.amount, "label": self.label}


@dataclass(frozen=True)
class RecurringPayment:
    id: str
    day: int
    amount: float
    name: str
    category: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RecurringPayment":
        return cls(
            id=str(data.get("id", "")),
            day=_day(_require(data, "day", "RecurringPayment"), "day", "RecurringPayment"),
            amount=_number(data.get("amount", 0), "amount", "RecurringPayment"),
            name=str(_require(data, "name", "RecurringPayment")),
            category=str(data.get("category") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "day": self.day,
            "amount": self.amount,
            "name": self.name,
            "category": self.category,
        }


@dataclass(frozen=True)
class UserProfile:
    user_name: str
    salary1: PaydayRule
    salary2: PaydayRule
    recurring_payments: Tuple[RecurringPayment, ...] = ()
    monthly_budget: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        budget = data.get("monthlyBudget")
        return cls(
            user_name=str(data.get("userName") or ""),
            salary1=PaydayRule.from_dict(_require(data, "salary1", "UserProfile")),
            salary2=PaydayRule.from_dict(_require(data, "salary2", "UserProfile")),
            recurring_payments=tuple(
                RecurringPayment.from_dict(item) for item in data.get("recurringPayments") or []
            ),
            monthly_budget=None if budget in (None, "") else _number(budget, "monthlyBudget", "UserProfile"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "userName": self.user_name,
            "salary1": self.salary1.to_dict(),
            "salary2": self.salary2.to_dict(),
            "recurringPayments": [item.to_dict() for item in self.recurring_payments],
        }
        if self.monthly_budget is not None:
            payload["monthlyBudget"] = self.monthly_budget
        return payload


@dataclass(frozen=True)
class Goal:
    id: str
    title: str
    target: float
    current: float = 0.0
    is_main: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Goal":
        return cls(
            id=str(data.get("id", "")),
            title=str(_require(data, "title", "Goal")),
            target=_number(_require(data, "target", "Goal"), "target", "Goal"),
            current=_number(data.get("current") or 0, "current", "Goal"),
            is_main=bool(data.get("isMain", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "target": self.target,
            "current": self.current,
            "isMain": self.is_main,
        }


@dataclass(frozen=True)
class Snapshot:
    """Immutable input to :func:`household_finance.engine.derive`."""

    expenses: Tuple[Expense, ...]
    incomes: Tuple[Income, ...]
    profile: UserProfile
    goals: Tuple[Goal, ...] = ()
    accounts: Tuple[Account, ...] = ()
    cash: float = 0.0
    now: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Derived entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Totals:
    total_income: float
    total_expense: float
    net_balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "netBalance": self.net_balance,
        }


@dataclass(frozen=True)
class SalaryCycle:
    title_text: str
    start_date: datetime
    target_date: datetime
    progress: float
    days_left: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "titleText": self.title_text,
            "startDate": _iso(self.start_date),
            "targetDate": _iso(self.target_date),
            "progress": self.progress,
            "daysLeft": self.days_left,
        }


@dataclass(frozen=True)
class NextIncome:
    date: datetime
    amount: float
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {"date": _iso(self.date), "amount": self.amount, "source": self.source}


@dataclass(frozen=True)
class NextSalaryInfo:
    target_date: datetime
    next_income: NextIncome

    def to_dict(self) -> Dict[str, Any]:
        return {"targetDate": _iso(self.target_date), "nextIncome": self.next_income.to_dict()}


@dataclass(frozen=True)
class Insight:
    kind: str
    title_key: str
    text_key: str
    params: Dict[str, Any]
    severity: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "titleKey": self.title_key,
            "textKey": self.text_key,
            "params": dict(self.params),
            "severity": self.severity,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class TrendPoint:
    month: int
    year: int
    raw_date: datetime
    income: float
    expense: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "rawDate": _iso(self.raw_date),
            "income": self.income,
            "expense": self.expense,
        }


@dataclass(frozen=True)
class CategoryTrend:
    raw_dates: Tuple[datetime, ...]
    datasets: Dict[str, List[float]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rawDates": [_iso(d) for d in self.raw_dates],
            "datasets": [{"label": label, "data": list(data)} for label, data in self.datasets.items()],
        }


@dataclass(frozen=True)
class WeeklyEntry:
    label: str
    amount: float
    budget: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"label": self.label, "amount": self.amount}
        if self.budget is not None:
            payload["budget"] = self.budget
        return payload


@dataclass(frozen=True)
class CategoryBudgetEntry:
    category: str
    spent: float
    budget: float

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "spent": self.spent, "budget": self.budget}


@dataclass(frozen=True)
class AccountSummary:
    """Credit usage and the balance shown for one account."""

    bank: str
    type: str
    debt: float
    total_limit: Optional[float]
    used_percent: float
    remaining: float
    display_balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bank": self.bank,
            "type": self.type,
            "debt": self.debt,
            "totalLimit": self.total_limit,
            "usedPercent": self.used_percent,
            "remaining": self.remaining,
            "displayBalance": self.display_balance,
        }


@dataclass(frozen=True)
class RecurringSummary:
    total_monthly: float
    active_count: int
    next_payment: Optional[RecurringPayment]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalMonthly": self.total_monthly,
            "activeSubscriptions": self.active_count,
            "nextPayment": self.next_payment.to_dict() if self.next_payment else None,
        }


@dataclass(frozen=True)
class CumulativePoint:
    day: int
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "balance": self.balance}


@dataclass(frozen=True)
class YearComparison:
    year: int
    previous_year: int
    expenses: float
    incomes: float
    previous_expenses: float
    previous_incomes: float

    @property
    def net(self) -> float:
        return self.incomes - self.expenses

    @property
    def previous_net(self) -> float:
        return self.previous_incomes - self.previous_expenses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "previousYear": self.previous_year,
            "current": {"expenses": self.expenses, "incomes": self.incomes, "net": self.net},
            "previous": {
                "expenses": self.previous_expenses,
                "incomes": self.previous_incomes,
                "net": self.previous_net,
            },
        }


@dataclass(frozen=True)
class MonthSummary:
    month: int
    year: int
    expenses: Tuple[Expense, ...]
    incomes: Tuple[Income, ...]
    expense_total: float
    income_total: float
    expense_groups: Dict[str, List[Expense]]
    expense_dates: List[str]
    income_groups: Dict[str, List[Income]]
    income_dates: List[str]
    category_map: Dict[str, float]

    @property
    def balance(self) -> float:
        return self.income_total - self.expense_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "monthlyExpenseTotal": self.expense_total,
            "monthlyIncomeTotal": self.income_total,
            "monthlyBalance": self.balance,
            "monthlySortedDates": list(self.expense_dates),
            "monthlySortedIncomeDates": list(self.income_dates),
            "monthlyCategoryMap": dict(self.category_map),
        }


@dataclass(frozen=True)
class ForecastResult:
    predicted: float
    min: float
    max: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {"predicted": self.predicted, "min": self.min, "max": self.max, "confidence": self.confidence}


@dataclass(frozen=True)
class BudgetDepletion:
    days_left: int
    depletion_date: Optional[datetime]
    safe_spending_rate: float
    current_spending_rate: float
    is_on_track: bool
    percent_used: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "daysLeft": self.days_left,
            "depletionDate": _iso(self.depletion_date),
            "safeSpendingRate": self.safe_spending_rate,
            "currentSpendingRate": self.current_spending_rate,
            "isOnTrack": self.is_on_track,
            "percentUsed": self.percent_used,
        }


@dataclass(frozen=True)
class GoalPrediction:
    completion_date: Optional[datetime]
    months_remaining: float
    required_monthly_saving: float
    is_possible: bool
    is_completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completionDate": _iso(self.completion_date),
            # JSON has no infinity; an impossible goal reports null months
            "monthsRemaining": None if self.months_remaining == float("inf") else self.months_remaining,
            "requiredMonthlySaving": self.required_monthly_saving,
            "isPossible": self.is_possible,
            "isCompleted": self.is_completed,
        }


@dataclass(frozen=True)
class ProjectionPoint:
    month: datetime
    income: float
    expense: float
    net: float

    def to_dict(self) -> Dict[str, Any]:
        return {"month": _iso(self.month), "income": self.income, "expense": self.expense, "net": self.net}


@dataclass(frozen=True)
class HeatmapPoint:
    date_key: str  # yyyy-mm-dd
    weekday: int  # 0 = Sunday
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"dateKey": self.date_key, "weekday": self.weekday, "amount": self.amount}


@dataclass(frozen=True)
class DerivedView:
    """Everything the dashboard shows for one snapshot and selected month."""

    now: datetime
    month: int
    year: int
    totals: Totals
    expense_groups: Dict[str, List[Expense]]
    sorted_dates: List[str]
    category_map: Dict[str, float]
    date_map: Dict[str, float]
    salary_cycle: SalaryCycle
    next_salary: NextSalaryInfo
    daily_limit: float
    insights: List[Insight]
    trend: List[TrendPoint]
    category_trend: CategoryTrend
    weekly_breakdown: List[WeeklyEntry]
    category_vs_budget: List[CategoryBudgetEntry]
    month_summary: MonthSummary
    day_map: Dict[str, float]
    weekly_budget: List[WeeklyEntry]
    cumulative_balance: List[CumulativePoint]
    year_comparison: YearComparison
    bank_breakdown: Dict[str, float]
    account_summaries: List[AccountSummary]
    recurring_summary: RecurringSummary
    heatmap: List[HeatmapPoint]
    expense_forecast: ForecastResult
    budget_depletion: BudgetDepletion
    goal_prediction: Optional[GoalPrediction]
    income_projection: List[ProjectionPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "totals": self.totals.to_dict(),
            "sortedDates": list(self.sorted_dates),
            "categoryMap": dict(self.category_map),
            "dateMap": dict(self.date_map),
            "salaryCycle": self.salary_cycle.to_dict(),
            "nextSalary": self.next_salary.to_dict(),
            "dailyLimit": self.daily_limit,
            "insights": [item.to_dict() for item in self.insights],
            "trend": [item.to_dict() for item in self.trend],
            "categoryTrend": self.category_trend.to_dict(),
            "weeklyBreakdown": [item.to_dict() for item in self.weekly_breakdown],
            "categoryVsBudget": [item.to_dict() for item in self.category_vs_budget],
            "monthSummary": self.month_summary.to_dict(),
            "dayMap": dict(self.day_map),
            "weeklyBudget": [item.to_dict() for item in self.weekly_budget],
            "cumulativeBalance": [item.to_dict() for item in self.cumulative_balance],
            "yearComparison": self.year_comparison.to_dict(),
            "bankBreakdown": dict(self.bank_breakdown),
            "accountSummaries": [item.to_dict() for item in self.account_summaries],
            "recurringSummary": self.recurring_summary.to_dict(),
            "heatmap": [item.to_dict() for item in self.heatmap],
            "expenseForecast": self.expense_forecast.to_dict(),
            "budgetDepletion": self.budget_depletion.to_dict(),
            "goalPrediction": self.goal_prediction.to_dict() if self.goal_prediction else None,
            "incomeProjection": [item.to_dict() for item in self.income_projection],
        }

"""Repositories for the ledger, the user profile and savings goals.

The engine never touches storage.  Callers read the stores, freeze the
result into a :class:`Snapshot` with :func:`load_snapshot`, and hand that
snapshot to :func:`household_finance.engine.derive`.

The JSON implementations treat a missing or unreadable file as empty (or
as the default profile) and raise ``OSError`` naming the path when a write
fails.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import GOALS_PATH, LEDGER_PATH, PROFILE_PATH
from .models import Account, Expense, Goal, Income, PaydayRule, Snapshot, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = UserProfile(
    user_name="",
    salary1=PaydayRule(day=1, amount=0.0, label="Salary 1"),
    salary2=PaydayRule(day=15, amount=0.0, label="Salary 2"),
)
EMPTY_LEDGER: Dict[str, Any] = {
    "expenses": [],
    "incomes": [],
    "accounts": [],
    "cash": 0,
}


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Could not read %s, using defaults: %s", path, exc)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=False)
    except OSError as e:
        raise OSError(f"Failed to save {path}: {e}") from e


class GoalStore(ABC):
    @abstractmethod
    def load(self) -> List[Goal]:
        ...

    @abstractmethod
    def save(self, goals: Sequence[Goal]) -> None:
        ...


class ProfileStore(ABC):
    @abstractmethod
    def load(self) -> UserProfile:
        ...

    @abstractmethod
    def save(self, profile: UserProfile) -> None:
        ...


class LedgerStore(ABC):
    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Return ``expenses``, ``incomes``, ``accounts`` and ``cash``."""

    @abstractmethod
    def save(
        self,
        expenses: Sequence[Expense],
        incomes: Sequence[Income],
        accounts: Sequence[Account] = (),
        cash: float = 0.0,
    ) -> None:
        ...


class JsonGoalStore(GoalStore):
    """Goals kept as a JSON list."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else GOALS_PATH

    def load(self) -> List[Goal]:
        data = _read_json(self.path, [])
        if not isinstance(data, list):
            logger.warning("Goals file %s does not hold a list, ignoring it", self.path)
            return []
        return [Goal.from_dict(item) for item in data]

    def save(self, goals: Sequence[Goal]) -> None:
        _write_json(self.path, [goal.to_dict() for goal in goals])

    def deposit(self, goal_id: str, amount: float) -> Goal:
        """Add ``amount`` to one goal's progress and persist the list.

        Raises:
            KeyError: If no goal has ``goal_id``.
        """
        goals = self.load()
        for index, goal in enumerate(goals):
            if goal.id == goal_id:
                updated = Goal(goal.id, goal.title, goal.target, goal.current + amount, goal.is_main)
                goals[index] = updated
                self.save(goals)
                if updated.current >= updated.target > goal.current:
                    logger.info("Goal '%s' reached its target", updated.title)
                return updated
        raise KeyError(goal_id)


class JsonProfileStore(ProfileStore):
    """User profile kept as one JSON object."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else PROFILE_PATH

    def load(self) -> UserProfile:
        data = _read_json(self.path, None)
        if not isinstance(data, dict):
            return DEFAULT_PROFILE
        return UserProfile.from_dict(data)

    def save(self, profile: UserProfile) -> None:
        _write_json(self.path, profile.to_dict())


class JsonLedgerStore(LedgerStore):
    """Expenses, incomes, accounts and cash kept in one JSON object."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else LEDGER_PATH

    def load(self) -> Dict[str, Any]:
        data = _read_json(self.path, EMPTY_LEDGER)
        if not isinstance(data, dict):
            data = EMPTY_LEDGER
        return {
            "expenses": [Expense.from_dict(item) for item in data.get("expenses") or []],
            "incomes": [Income.from_dict(item) for item in data.get("incomes") or []],
            "accounts": [Account.from_dict(item) for item in data.get("accounts") or []],
            "cash": float(data.get("cash") or 0),
        }

    def save(
        self,
        expenses: Sequence[Expense],
        incomes: Sequence[Income],
        accounts: Sequence[Account] = (),
        cash: float = 0.0,
    ) -> None:
        _write_json(self.path, {
            "expenses": [item.to_dict() for item in expenses],
            "incomes": [item.to_dict() for item in incomes],
            "accounts": [item.to_dict() for item in accounts],
            "cash": cash,
        })


def load_snapshot(
    ledger: LedgerStore,
    profiles: ProfileStore,
    goals: GoalStore,
    now: Optional[datetime] = None,
) -> Snapshot:
    """Read every store once and freeze the result."""
    data = ledger.load()
    return Snapshot(
        expenses=tuple(data["expenses"]),
        incomes=tuple(data["incomes"]),
        profile=profiles.load(),
        goals=tuple(goals.load()),
        accounts=tuple(data["accounts"]),
        cash=data["cash"],
        now=now,
    )

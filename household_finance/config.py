"""Configuration management for the household finance engine.

This module centralizes data paths, the tunable heuristic thresholds used
by the insight rules and forecasts, and logging setup.  Paths and the
thresholds file location can be overridden with environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Base project root - assumes this file is in household_finance/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data files
DATA_DIR = Path(os.getenv("HOUSEHOLD_DATA_DIR", _PROJECT_ROOT / "data"))
LEDGER_PATH = Path(os.getenv("HOUSEHOLD_LEDGER_PATH", DATA_DIR / "ledger.json"))
PROFILE_PATH = Path(os.getenv("HOUSEHOLD_PROFILE_PATH", DATA_DIR / "profile.json"))
GOALS_PATH = Path(os.getenv("HOUSEHOLD_GOALS_PATH", DATA_DIR / "goals.json"))

# Heuristic thresholds
THRESHOLDS_PATH = Path(
    os.getenv("HOUSEHOLD_THRESHOLDS_PATH", Path(__file__).parent / "defaults" / "thresholds.json")
)

LOG_LEVEL = os.getenv("HOUSEHOLD_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AnalyticsConfig:
    """Named thresholds for the insight rules and forecasts."""

    high_spending_ratio: float = 1.1
    budget_control_ratio: float = 0.85
    category_share_threshold: float = 35.0
    salary_warning_days: int = 7
    recurring_warning_days: int = 5
    forecast_band: float = 0.15
    forecast_confidence: float = 0.85
    placeholder_category_budget: float = 5000.0
    trend_months: int = 6
    category_trend_months: int = 4
    weeks_count: int = 4
    forecast_months: int = 6
    projection_months: int = 6

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalyticsConfig":
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            default = getattr(cls, key)
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Threshold '{key}' must be numeric, got {value!r}") from exc
            if isinstance(default, int):
                if not number.is_integer():
                    raise ValueError(f"Threshold '{key}' must be a whole number, got {value!r}")
                number = int(number)
            values[key] = number
        return cls(**values)


DEFAULT_CONFIG = AnalyticsConfig()


def load_analytics_config(path: Optional[Path] = None) -> AnalyticsConfig:
    """Load thresholds from a JSON file.

    Args:
        path: Optional override for the thresholds file.  Defaults to
            ``THRESHOLDS_PATH``.

    Returns:
        An :class:`AnalyticsConfig`; the defaults when the file is missing.

    Raises:
        ValueError: If the file exists but is not a JSON object, or a
            threshold is not numeric (or not whole where an integer is
            expected).
    """
    target = Path(path) if path is not None else THRESHOLDS_PATH
    if not target.exists():
        return DEFAULT_CONFIG
    try:
        with target.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid thresholds file {target}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Thresholds file {target} must contain a JSON object")
    logger.debug("Loaded analytics thresholds from %s", target)
    return AnalyticsConfig.from_dict(data)


def ensure_data_directories() -> None:
    """Create the directories holding the ledger, profile and goals files."""
    for path in [DATA_DIR, LEDGER_PATH.parent, PROFILE_PATH.parent, GOALS_PATH.parent]:
        path.mkdir(parents=True, exist_ok=True)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)

"""
Environment-driven settings for the budget tools.

The shell, the report CLI and the MCP server all read the same variables,
so history depth, strict pipeline validation and the budget directory are
configured in one place.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BUDGETS_DIR = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', 'budgets'))
DEFAULT_HISTORY_LIMIT = 10
DEFAULT_LOG_LEVEL = "WARNING"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})

_logging_configured = False


class SettingsError(RuntimeError):
    """Raised when settings cannot be constructed from the environment."""


@dataclass(frozen=True, slots=True)
class BudgetSettings:
    history_limit: int
    strict_stages: bool
    budgets_dir: str
    default_budget: Optional[str]
    log_level: str


def load_settings() -> BudgetSettings:
    """
    Read BudgetSettings from the environment.

    Unset or blank variables fall back to defaults; malformed values raise
    SettingsError naming the offending variable.
    """

    history_limit = _parse_int(os.getenv("BUDGET_HISTORY_LIMIT"), DEFAULT_HISTORY_LIMIT, "BUDGET_HISTORY_LIMIT")
    if history_limit < 1:
        raise SettingsError(f"BUDGET_HISTORY_LIMIT must be at least 1 (received '{history_limit}')")

    return BudgetSettings(
        history_limit=history_limit,
        strict_stages=_parse_bool(os.getenv("BUDGET_STRICT_STAGES"), False, "BUDGET_STRICT_STAGES"),
        budgets_dir=(os.getenv("BUDGET_DIR") or "").strip() or DEFAULT_BUDGETS_DIR,
        default_budget=(os.getenv("BUDGET_DEFAULT") or "").strip() or None,
        log_level=_parse_level(os.getenv("BUDGET_LOG_LEVEL")),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler once; later calls only adjust the level."""
    global _logging_configured

    resolved = _parse_level(level if level is not None else os.getenv("BUDGET_LOG_LEVEL"))
    if not _logging_configured:
        logging.basicConfig(
            level=resolved,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        _logging_configured = True
    else:
        logging.getLogger().setLevel(resolved)


def _parse_int(raw_value: Optional[str], default: int, env_key: str) -> int:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return int(raw_value)
    except ValueError as exc:
        raise SettingsError(f"{env_key} must be an integer (received '{raw_value}')") from exc


def _parse_bool(raw_value: Optional[str], default: bool, env_key: str) -> bool:
    if raw_value is None or raw_value.strip() == "":
        return default

    candidate = raw_value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    raise SettingsError(f"{env_key} must be a boolean (received '{raw_value}')")


def _parse_level(raw_value: Optional[str]) -> str:
    candidate = (raw_value or "").strip().upper() or DEFAULT_LOG_LEVEL
    if candidate not in logging.getLevelNamesMapping():
        raise SettingsError(f"BUDGET_LOG_LEVEL must be a logging level name (received '{raw_value}')")
    return candidate

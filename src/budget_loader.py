"""Budget document loading.

Budgets live at `<budgets_dir>/<name>/budget.json`. Loading is read-only;
edits made in a session stay in memory.
"""

import copy
import json
import logging
import os
from typing import Optional

from model.FinancialData import FinancialData

logger = logging.getLogger(__name__)

BUDGET_FILENAME = 'budget.json'

# Seed budget used when no budget file is given. Amounts are cents.
DEFAULT_BUDGET = {
    "monthlyIncome": 566600,
    "oneTimeSpend": {
        "breakdown": {
            "Vacation": 100000,
            "Laptop": 200000,
        }
    },
    "steps": {
        "Total Income": {
            "children": {
                "Pre-Tax Deductions": {
                    "kind": "investment",
                    "breakdown": {"Employer 401K": 50000},
                },
                "Taxes": {
                    "kind": "spend",
                    "breakdown": {"Federal": 100000, "State": 10000},
                },
            }
        },
        "Takehome": {
            "children": {
                "Fixed Spend": {
                    "kind": "spend",
                    "breakdown": {
                        "Rent": 200000,
                        "Utilities": 15000,
                        "Insurance": 20000,
                        "Car Payment": 50000,
                    },
                },
            }
        },
        "Free Cash": {
            "children": {
                "Variable Spend": {
                    "kind": "spend",
                    "breakdown": {
                        "Groceries": 10000,
                        "Restaurants": 10000,
                        "Entertainment": 10000,
                        "Other": 10000,
                    },
                },
            }
        },
        "Net Income": {
            "children": {
                "Investments": {
                    "kind": "investment",
                    "breakdown": {"Long Term Taxable": 10000, "Roth IRA": 10000},
                },
                "Emergency Fund": {
                    "kind": "investment",
                    "breakdown": {"Emergency Fund": 100000},
                },
            }
        },
    },
}


def default_budget() -> FinancialData:
    """Return a fresh copy of the built-in seed budget."""
    return FinancialData.from_dict(copy.deepcopy(DEFAULT_BUDGET))


def budget_path(name: str, base_dir: str) -> str:
    return os.path.join(base_dir, name, BUDGET_FILENAME)


def load_budget(name: str, base_dir: str) -> FinancialData:
    """Load and validate a budget document.

    Args:
        name: Budget folder name under `base_dir`
        base_dir: Directory holding one folder per budget

    Raises:
        FileNotFoundError: if the budget does not exist
        ValueError: if the document is malformed
    """
    path = budget_path(name, base_dir)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Budget file not found: {path}")
    with open(path, 'r') as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Budget '{name}' is not valid JSON: {exc}") from exc
    data = FinancialData.from_dict(raw)
    logger.info("Loaded budget '%s' from %s", name, path)
    return data


def load_budget_or_default(name: Optional[str], base_dir: str) -> FinancialData:
    """Load the named budget, or the seed budget when no name is given."""
    if name is None:
        return default_budget()
    return load_budget(name, base_dir)


def list_budgets(base_dir: str) -> list[str]:
    """List all budget names that have a budget.json under `base_dir`.

    Args:
        base_dir: Directory holding one folder per budget

    Returns:
        Sorted list of budget names
    """
    if not os.path.isdir(base_dir):
        return []
    return sorted(
        name for name in os.listdir(base_dir)
        if os.path.isfile(budget_path(name, base_dir))
    )

"""Pure edit operations over a budget.

Each function returns a new, fully independent FinancialData; the input
is never mutated, so earlier states kept in the undo history stay valid.
A target step that does not exist (or that has no breakdown) makes the
edit a no-op rather than an error.
"""

import copy

from model.FinancialData import FinancialData
from model.money import normalize_amount


def _copy_with_breakdown(data: FinancialData, step_name: str):
    new_data = copy.deepcopy(data)
    return new_data, new_data.breakdown_for(step_name)


def update_item(data: FinancialData, step_name: str, item_name: str, value: int) -> FinancialData:
    """Set `breakdown[item_name] = value` on the named step."""
    value = normalize_amount(value)
    new_data, breakdown = _copy_with_breakdown(data, step_name)
    if breakdown is not None:
        breakdown[item_name] = value
    return new_data


def add_item(data: FinancialData, step_name: str, item_name: str, value: int) -> FinancialData:
    """Insert a new breakdown item (overwrites an item of the same name)."""
    return update_item(data, step_name, item_name, value)


def remove_item(data: FinancialData, step_name: str, item_name: str) -> FinancialData:
    """Delete a breakdown item; absent items are ignored."""
    new_data, breakdown = _copy_with_breakdown(data, step_name)
    if breakdown is not None:
        breakdown.pop(item_name, None)
    return new_data


def rename_item(data: FinancialData, step_name: str, old_name: str, new_name: str) -> FinancialData:
    """Move an item's amount to a new name, keeping its position."""
    new_data, breakdown = _copy_with_breakdown(data, step_name)
    if breakdown is None or old_name not in breakdown or old_name == new_name:
        return new_data

    renamed = {}
    for name, amount in breakdown.items():
        if name == old_name:
            renamed[new_name] = amount
        elif name != new_name:
            renamed[name] = amount
    breakdown.clear()
    breakdown.update(renamed)
    return new_data


def update_income(data: FinancialData, value: int) -> FinancialData:
    """Replace the monthly income; the step tree is untouched."""
    new_data = copy.deepcopy(data)
    new_data.monthly_income = normalize_amount(value)
    return new_data

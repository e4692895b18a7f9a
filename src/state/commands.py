"""Command records and dispatch for the budget state machine.

Front ends describe what the user did with one of the command classes
below and hand it to `dispatch`, which returns the complete new state
(or the same state when the command changes nothing).
"""

from dataclasses import dataclass
from functools import partial
from typing import Tuple, Union

from calc import edit_operations
from model.ScenarioChange import ScenarioChange
from state.financial_state import FinancialState


@dataclass(frozen=True)
class UpdateMonthlyIncome:
    amount: int


@dataclass(frozen=True)
class UpdateBreakdownItem:
    step_name: str
    item_name: str
    amount: int


@dataclass(frozen=True)
class AddBreakdownItem:
    step_name: str
    item_name: str
    amount: int


@dataclass(frozen=True)
class RemoveBreakdownItem:
    step_name: str
    item_name: str


@dataclass(frozen=True)
class RenameBreakdownItem:
    step_name: str
    old_name: str
    new_name: str


@dataclass(frozen=True)
class PreviewScenario:
    changes: Tuple[ScenarioChange, ...]


@dataclass(frozen=True)
class ApplyScenario:
    pass


@dataclass(frozen=True)
class ClearPreview:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Redo:
    pass


Command = Union[
    UpdateMonthlyIncome, UpdateBreakdownItem, AddBreakdownItem, RemoveBreakdownItem,
    RenameBreakdownItem, PreviewScenario, ApplyScenario, ClearPreview, Undo, Redo,
]

# Wire names used by `command_from_dict`
COMMAND_TYPES = {
    "UPDATE_MONTHLY_INCOME": UpdateMonthlyIncome,
    "UPDATE_BREAKDOWN_ITEM": UpdateBreakdownItem,
    "ADD_BREAKDOWN_ITEM": AddBreakdownItem,
    "REMOVE_BREAKDOWN_ITEM": RemoveBreakdownItem,
    "RENAME_BREAKDOWN_ITEM": RenameBreakdownItem,
    "PREVIEW_SCENARIO": PreviewScenario,
    "APPLY_SCENARIO": ApplyScenario,
    "CLEAR_PREVIEW": ClearPreview,
    "UNDO": Undo,
    "REDO": Redo,
}


def dispatch(state: FinancialState, command: Command) -> FinancialState:
    """Apply a command to a state and return the resulting state."""
    if isinstance(command, UpdateMonthlyIncome):
        return state.commit_edit(partial(edit_operations.update_income, value=command.amount))
    if isinstance(command, UpdateBreakdownItem):
        return state.commit_edit(partial(
            edit_operations.update_item,
            step_name=command.step_name, item_name=command.item_name, value=command.amount,
        ))
    if isinstance(command, AddBreakdownItem):
        return state.commit_edit(partial(
            edit_operations.add_item,
            step_name=command.step_name, item_name=command.item_name, value=command.amount,
        ))
    if isinstance(command, RemoveBreakdownItem):
        return state.commit_edit(partial(
            edit_operations.remove_item,
            step_name=command.step_name, item_name=command.item_name,
        ))
    if isinstance(command, RenameBreakdownItem):
        return state.commit_edit(partial(
            edit_operations.rename_item,
            step_name=command.step_name, old_name=command.old_name, new_name=command.new_name,
        ))
    if isinstance(command, PreviewScenario):
        return state.preview_scenario(command.changes)
    if isinstance(command, ApplyScenario):
        return state.apply_scenario()
    if isinstance(command, ClearPreview):
        return state.clear_preview()
    if isinstance(command, Undo):
        return state.undo()
    if isinstance(command, Redo):
        return state.redo()
    raise TypeError(f"Unsupported command: {command!r}")


def command_from_dict(payload: dict) -> Command:
    """Build a command from a JSON payload such as
    {"type": "UPDATE_BREAKDOWN_ITEM", "stepName": "Fixed Spend", "itemName": "Rent", "amount": 210000}.

    Raises:
        ValueError: for an unknown command type or a missing field
    """
    command_type = payload.get('type')
    if command_type not in COMMAND_TYPES:
        raise ValueError(f"Unknown command type '{command_type}'. Expected one of {sorted(COMMAND_TYPES)}")

    def required(key: str):
        if key not in payload:
            raise ValueError(f"Command {command_type} requires '{key}'")
        return payload[key]

    if command_type == "UPDATE_MONTHLY_INCOME":
        return UpdateMonthlyIncome(required('amount'))
    if command_type == "UPDATE_BREAKDOWN_ITEM":
        return UpdateBreakdownItem(required('stepName'), required('itemName'), required('amount'))
    if command_type == "ADD_BREAKDOWN_ITEM":
        return AddBreakdownItem(required('stepName'), required('itemName'), required('amount'))
    if command_type == "REMOVE_BREAKDOWN_ITEM":
        return RemoveBreakdownItem(required('stepName'), required('itemName'))
    if command_type == "RENAME_BREAKDOWN_ITEM":
        return RenameBreakdownItem(required('stepName'), required('oldName'), required('newName'))
    if command_type == "PREVIEW_SCENARIO":
        return PreviewScenario(tuple(ScenarioChange.from_dict(change) for change in required('changes')))
    return COMMAND_TYPES[command_type]()

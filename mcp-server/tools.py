"""Budget Waterfall Tools for MCP Server.

This module provides the tool implementations that wrap the budget state
machine and expose it through MCP. Amounts cross this boundary in
dollars; everything behind it works in integer cents. Edits live only in
memory for the lifetime of the server.
"""

import os
import sys
import logging
from typing import Any, Dict, List, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from budget_loader import default_budget, list_budgets, load_budget
from calc.projection_calculator import ProjectionCalculator
from calc.scenario_engine import compare_steps
from calc.waterfall_calculator import WaterfallCalculator
from model.CalculatedStep import CalculatedStep
from model.FinancialData import FinancialData, ONE_TIME_SPEND
from model.ScenarioChange import ScenarioChange
from model.money import from_cents, to_cents
from state import commands
from state.financial_state import FinancialState, HISTORY_LIMIT
from state.session import BudgetSession

logger = logging.getLogger(__name__)

SEED_BUDGET_NAME = "default"


def _step_to_dollars(step: CalculatedStep) -> dict:
    return {
        "name": step.name,
        "value": from_cents(step.value),
        "kind": step.kind,
        "category_kind": step.category_kind,
        "level": step.level,
        "remaining": from_cents(step.remaining),
    }


def _breakdown_to_dollars(breakdown: Dict[str, int]) -> Dict[str, float]:
    return {item: from_cents(amount) for item, amount in breakdown.items()}


def change_from_arguments(raw: Dict[str, Any]) -> ScenarioChange:
    """Build a ScenarioChange from a tool argument whose delta is in dollars."""
    if 'delta' not in raw:
        raise ValueError("Each change needs a 'delta' in dollars")
    payload = dict(raw)
    payload['delta'] = to_cents(raw['delta'])
    return ScenarioChange.from_dict(payload)


class BudgetTools:
    """Tools that wrap one budget's editing session for MCP access."""

    def __init__(self, budget_name: str, data: FinancialData,
                 calculator: Optional[WaterfallCalculator] = None,
                 history_limit: int = HISTORY_LIMIT):
        """Initialize with a loaded budget.

        Args:
            budget_name: Name the budget is registered under
            data: The budget to edit
            calculator: Waterfall calculator (strict or lenient)
            history_limit: Undo/redo cap
        """
        self.budget_name = budget_name
        self.session = BudgetSession(data, name=budget_name, calculator=calculator,
                                     history_limit=history_limit)

    @property
    def state(self) -> FinancialState:
        return self.session.state

    def _summary(self, state: FinancialState) -> dict:
        return {
            "true_surplus": from_cents(state.surplus),
            "is_illegal": state.is_illegal,
        }

    def _dispatch(self, command) -> dict:
        before = self.session.state
        after = self.session.dispatch(command)
        result = {
            "budget": self.budget_name,
            "changed": after is not before,
            **self._summary(after),
            "can_undo": after.can_undo,
            "can_redo": after.can_redo,
            "is_previewing": after.is_previewing,
        }
        if after.is_previewing:
            result["preview"] = self._summary(after.pending_scenario.preview_state)
        return result

    def get_waterfall(self) -> dict:
        """Get the committed waterfall and, when one is pending, the preview."""
        state = self.state
        result = {
            "budget": self.budget_name,
            "monthly_income": from_cents(state.data.monthly_income),
            "steps": [_step_to_dollars(step) for step in state.calculated_steps],
            "totals": {
                kind: from_cents(total)
                for kind, total in WaterfallCalculator.totals_by_category_kind(list(state.calculated_steps)).items()
            },
            **self._summary(state),
            "is_previewing": state.is_previewing,
        }
        if state.is_previewing:
            preview = state.pending_scenario.preview_state
            result["preview"] = {
                "steps": [_step_to_dollars(step) for step in preview.calculated_steps],
                **self._summary(preview),
            }
        return result

    def get_breakdown(self, step_name: Optional[str] = None) -> dict:
        """Get line items of one category, or of every category."""
        data = self.state.data
        if step_name is not None:
            breakdown = data.breakdown_for(step_name)
            if breakdown is None:
                return {"error": f"No breakdown found for step '{step_name}'. Available steps: {self._breakdown_names()}"}
            return {
                "budget": self.budget_name,
                "step": step_name,
                "items": _breakdown_to_dollars(breakdown),
                "total": from_cents(sum(breakdown.values())),
            }
        return {
            "budget": self.budget_name,
            "steps": {
                name: _breakdown_to_dollars(data.breakdown_for(name))
                for name in self._breakdown_names()
            },
            "one_time_spend_total": from_cents(data.one_time_spend.total),
        }

    def _breakdown_names(self) -> List[str]:
        return self.state.data.step_names() + [ONE_TIME_SPEND]

    def update_monthly_income(self, amount: float) -> dict:
        return self._dispatch(commands.UpdateMonthlyIncome(to_cents(amount)))

    def update_breakdown_item(self, step_name: str, item_name: str, amount: float) -> dict:
        return self._dispatch(commands.UpdateBreakdownItem(step_name, item_name, to_cents(amount)))

    def add_breakdown_item(self, step_name: str, item_name: str, amount: float) -> dict:
        return self._dispatch(commands.AddBreakdownItem(step_name, item_name, to_cents(amount)))

    def remove_breakdown_item(self, step_name: str, item_name: str) -> dict:
        return self._dispatch(commands.RemoveBreakdownItem(step_name, item_name))

    def rename_breakdown_item(self, step_name: str, old_name: str, new_name: str) -> dict:
        return self._dispatch(commands.RenameBreakdownItem(step_name, old_name, new_name))

    def preview_scenario(self, changes: List[Dict[str, Any]]) -> dict:
        """Preview what-if changes; deltas are in dollars and additive."""
        scenario = tuple(change_from_arguments(raw) for raw in changes)
        result = self._dispatch(commands.PreviewScenario(scenario))
        state = self.state
        result["differences"] = [
            {
                "name": diff.name,
                "before": from_cents(diff.before) if diff.before is not None else None,
                "after": from_cents(diff.after) if diff.after is not None else None,
                "difference": from_cents(diff.difference),
            }
            for diff in compare_steps(list(state.calculated_steps),
                                      list(state.pending_scenario.preview_state.calculated_steps))
        ]
        return result

    def apply_scenario(self) -> dict:
        return self._dispatch(commands.ApplyScenario())

    def clear_preview(self) -> dict:
        return self._dispatch(commands.ClearPreview())

    def undo(self) -> dict:
        return self._dispatch(commands.Undo())

    def redo(self) -> dict:
        return self._dispatch(commands.Redo())

    def get_history(self) -> dict:
        """Get undo/redo depths and the true surplus of each stored budget."""
        state = self.state
        calculator = state.calculator

        def surplus(data: FinancialData) -> float:
            return from_cents(calculator.calculate(data)[-1].remaining)

        return {
            "budget": self.budget_name,
            "history_limit": state.history_limit,
            "undo_depth": len(state.undo_stack),
            "redo_depth": len(state.redo_stack),
            "current_true_surplus": from_cents(state.surplus),
            "undo_true_surplus": [surplus(data) for data in state.undo_stack],
            "redo_true_surplus": [surplus(data) for data in state.redo_stack],
        }

    def project_net_worth(self, months: int = 60, starting_net_worth: Optional[float] = None,
                          annual_growth_rate: float = 0.0) -> dict:
        """Project net worth from the committed budget's investment rows."""
        kwargs = {"months": months, "annual_growth_rate": annual_growth_rate}
        if starting_net_worth is not None:
            kwargs["starting_net_worth"] = to_cents(starting_net_worth)
        calculator = ProjectionCalculator(**kwargs)
        steps = list(self.state.calculated_steps)
        points = calculator.calculate(steps)
        return {
            "budget": self.budget_name,
            "starting_net_worth": from_cents(calculator.starting_net_worth),
            "monthly_contribution": from_cents(ProjectionCalculator.monthly_contribution(steps)),
            "months": [
                {
                    "month": point.month,
                    "label": point.label,
                    "contribution": from_cents(point.contribution),
                    "growth": from_cents(point.growth),
                    "net_worth": from_cents(point.net_worth),
                }
                for point in points
            ],
            "final_net_worth": from_cents(points[-1].net_worth) if points else from_cents(calculator.starting_net_worth),
        }


class MultiBudgetTools:
    """Manager for multiple budgets.

    Discovers all budgets under the budgets directory and keeps one
    editing session per budget, allowing queries to specify which budget
    to use. When the directory holds no budgets the built-in seed budget
    is registered as 'default'.
    """

    def __init__(self, budgets_dir: str, default_budget: Optional[str] = None,
                 strict: bool = False, history_limit: int = HISTORY_LIMIT):
        """Initialize and discover all available budgets.

        Args:
            budgets_dir: Directory holding one folder per budget
            default_budget: Default budget to use when none specified
            strict: Reject budgets missing waterfall sections
            history_limit: Undo/redo cap for every session
        """
        self.budgets_dir = budgets_dir
        self.budgets: Dict[str, BudgetTools] = {}
        self.default_budget = default_budget
        self.strict = strict
        self.history_limit = history_limit
        self._discover_budgets()

    def _make_tools(self, name: str, data: FinancialData) -> BudgetTools:
        return BudgetTools(name, data, calculator=WaterfallCalculator(strict=self.strict),
                           history_limit=self.history_limit)

    def _discover_budgets(self):
        """Discover and load all available budgets."""
        for name in list_budgets(self.budgets_dir):
            try:
                self.budgets[name] = self._make_tools(name, load_budget(name, self.budgets_dir))
            except (KeyError, TypeError, ValueError) as e:
                # Log but don't fail on individual budget errors
                logger.warning("Failed to load budget '%s': %s", name, e)

        if not self.budgets:
            self.budgets[SEED_BUDGET_NAME] = self._make_tools(SEED_BUDGET_NAME, default_budget())

        # Set default if not specified
        if self.default_budget is None:
            self.default_budget = list(self.budgets.keys())[0]

    def _get_budget(self, budget: Optional[str] = None) -> BudgetTools:
        """Get the specified budget or the default."""
        budget_name = budget or self.default_budget
        if budget_name not in self.budgets:
            available = list(self.budgets.keys())
            raise ValueError(f"Budget '{budget_name}' not found. Available budgets: {available}")
        return self.budgets[budget_name]

    def list_budgets(self) -> dict:
        """List all available budgets."""
        budgets_info = {}
        for name, tools in self.budgets.items():
            state = tools.state
            budgets_info[name] = {
                "monthly_income": from_cents(state.data.monthly_income),
                "true_surplus": from_cents(state.surplus),
                "is_illegal": state.is_illegal,
                "can_undo": state.can_undo,
            }
        return {
            "available_budgets": list(self.budgets.keys()),
            "default_budget": self.default_budget,
            "budgets_info": budgets_info,
        }

    def reload_budgets(self) -> dict:
        """Reload all budgets from disk, discarding in-memory edits and history."""
        old_budgets = set(self.budgets.keys())
        requested_default = self.default_budget if self.default_budget in old_budgets else None

        self.budgets.clear()
        self.default_budget = requested_default
        self._discover_budgets()
        if self.default_budget not in self.budgets:
            self.default_budget = list(self.budgets.keys())[0]

        new_budgets = set(self.budgets.keys())
        logger.info("Reloaded %d budget(s) from %s", len(self.budgets), self.budgets_dir)
        return {
            "status": "success",
            "message": f"Reloaded {len(self.budgets)} budgets",
            "budgets_loaded": list(self.budgets.keys()),
            "default_budget": self.default_budget,
            "changes": {
                "added": sorted(new_budgets - old_budgets),
                "removed": sorted(old_budgets - new_budgets),
                "reloaded": sorted(old_budgets & new_budgets),
            },
        }

    def get_waterfall(self, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).get_waterfall()

    def get_breakdown(self, step_name: Optional[str] = None, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).get_breakdown(step_name)

    def update_monthly_income(self, amount: float, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).update_monthly_income(amount)

    def update_breakdown_item(self, step_name: str, item_name: str, amount: float,
                              budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).update_breakdown_item(step_name, item_name, amount)

    def add_breakdown_item(self, step_name: str, item_name: str, amount: float,
                           budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).add_breakdown_item(step_name, item_name, amount)

    def remove_breakdown_item(self, step_name: str, item_name: str, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).remove_breakdown_item(step_name, item_name)

    def rename_breakdown_item(self, step_name: str, old_name: str, new_name: str,
                              budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).rename_breakdown_item(step_name, old_name, new_name)

    def preview_scenario(self, changes: List[Dict[str, Any]], budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).preview_scenario(changes)

    def apply_scenario(self, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).apply_scenario()

    def clear_preview(self, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).clear_preview()

    def undo(self, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).undo()

    def redo(self, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).redo()

    def get_history(self, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).get_history()

    def project_net_worth(self, months: int = 60, starting_net_worth: Optional[float] = None,
                          annual_growth_rate: float = 0.0, budget: Optional[str] = None) -> dict:
        return self._get_budget(budget).project_net_worth(months, starting_net_worth, annual_growth_rate)

"""Renderer classes for displaying budget waterfall results.

This module contains renderer classes that handle the presentation logic
for the budget state. Each renderer takes a FinancialState and prints
the part of it it is responsible for.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

from calc.projection_calculator import ProjectionCalculator
from calc.scenario_engine import compare_steps
from calc.waterfall_calculator import WaterfallCalculator
from model.CalculatedStep import CalculatedStep
from model.FinancialData import ONE_TIME_SPEND
from model.field_metadata import get_short_name
from model.money import format_currency
from state.financial_state import FinancialState


REPORT_WIDTH = 64


def _banner(title: str, width: int = REPORT_WIDTH) -> None:
    print()
    print("=" * width)
    print(f"{title:^{width}}")
    print("=" * width)


def _section(title: str, width: int = REPORT_WIDTH) -> None:
    print()
    print("-" * width)
    print(title)
    print("-" * width)


def _share(amount: int, total: int) -> str:
    if total == 0:
        return "-"
    return f"{amount / total:.1%}"


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    def __init__(self, budget_name: Optional[str] = None):
        self.budget_name = budget_name

    def _title(self, title: str) -> str:
        return f"{title} - {self.budget_name}" if self.budget_name else title

    @abstractmethod
    def render(self, state: FinancialState) -> None:
        """Render the state to output.

        Args:
            state: The FinancialState to display
        """
        pass


class WaterfallRenderer(BaseRenderer):
    """Renderer for the ordered waterfall of deductions and checkpoints."""

    def __init__(self, budget_name: Optional[str] = None, show_preview: bool = True):
        super().__init__(budget_name)
        self.show_preview = show_preview

    @staticmethod
    def print_steps(steps: List[CalculatedStep]) -> None:
        print(f"  {'Step':<30} {'Amount':>14} {'Remaining':>14}")
        print(f"  {'-' * 30} {'-' * 14} {'-' * 14}")
        for step in steps:
            indent = "  " * step.level
            label = f"{indent}{step.name}"
            if step.is_deduction:
                amount = f"-{format_currency(step.value)}" if step.value >= 0 else f"+{format_currency(-step.value)}"
            else:
                amount = format_currency(step.value)
            marker = "  !!" if step.is_negative else ""
            print(f"  {label:<30} {amount:>14} {format_currency(step.remaining):>14}{marker}")

    def render(self, state: FinancialState) -> None:
        """Render the waterfall, using the pending preview when one exists.

        Args:
            state: FinancialState to display
        """
        display = state
        title = "BUDGET WATERFALL"
        if self.show_preview and state.pending_scenario is not None:
            display = state.pending_scenario.preview_state
            title = "BUDGET WATERFALL (SCENARIO PREVIEW)"

        _banner(self._title(title))
        print()
        self.print_steps(list(display.calculated_steps))

        totals = WaterfallCalculator.totals_by_category_kind(list(display.calculated_steps))
        _section("TOTALS")
        print(f"  {'Invested:':<40} {format_currency(totals['investment']):>14}")
        print(f"  {'Spent:':<40} {format_currency(totals['spend']):>14}")
        print(f"  {'True Surplus:':<40} {format_currency(display.surplus):>14}")

        if display.is_illegal:
            print()
            print("  ILLEGAL BUDGET: the running balance drops below zero (marked !!)")
        print()


class BreakdownRenderer(BaseRenderer):
    """Renderer for the line items of each deduction category."""

    def __init__(self, budget_name: Optional[str] = None, step_name: Optional[str] = None):
        """Initialize with an optional single step to show.

        Args:
            budget_name: Budget label for the title
            step_name: Only show this category (or 'one_time_spend'); all when None
        """
        super().__init__(budget_name)
        self.step_name = step_name

    @staticmethod
    def _print_items(title: str, breakdown: Dict[str, int]) -> None:
        total = sum(breakdown.values())
        _section(f"{title.upper()} ({format_currency(total)})")
        if not breakdown:
            print("  (no items)")
            return
        for item, amount in breakdown.items():
            print(f"  {item + ':':<36} {format_currency(amount):>14} {_share(amount, total):>8}")

    def render(self, state: FinancialState) -> None:
        data = state.data
        _banner(self._title("BUDGET BREAKDOWN"))

        if self.step_name is not None:
            breakdown = data.breakdown_for(self.step_name)
            if breakdown is None:
                print(f"\n  No breakdown found for '{self.step_name}'")
                print()
                return
            label = "One-Time Spend" if self.step_name == ONE_TIME_SPEND else self.step_name
            self._print_items(label, breakdown)
            print()
            return

        for step in state.calculated_steps:
            if step.is_deduction:
                self._print_items(step.name, step.breakdown or {})
        self._print_items("One-Time Spend", data.one_time_spend.breakdown)
        print()


class ScenarioRenderer(BaseRenderer):
    """Renderer comparing the settled waterfall with a pending scenario."""

    def render(self, state: FinancialState) -> None:
        _banner(self._title("SCENARIO PREVIEW"))
        pending = state.pending_scenario
        if pending is None:
            print("\n  No scenario pending. Use 'whatif' to preview changes.")
            print()
            return

        _section("PROPOSED CHANGES")
        for change in pending.changes:
            target = change.step_name if change.item_name is None else f"{change.step_name} > {change.item_name}"
            sign = "+" if change.delta >= 0 else "-"
            description = f"  ({change.description})" if change.description else ""
            print(f"  {target:<36} {sign}{format_currency(abs(change.delta)):>13} {change.recurrence}{description}")

        _section("IMPACT")
        print(f"  {'Step':<22} {'Current':>13} {'Preview':>13} {'Change':>13}")
        print(f"  {'-' * 22} {'-' * 13} {'-' * 13} {'-' * 13}")
        differences = compare_steps(list(state.calculated_steps), list(pending.preview_state.calculated_steps))
        for diff in differences:
            before = format_currency(diff.before) if diff.before is not None else "-"
            after = format_currency(diff.after) if diff.after is not None else "-"
            change = format_currency(diff.difference) if diff.difference else ""
            print(f"  {get_short_name(diff.name):<22} {before:>13} {after:>13} {change:>13}")

        if pending.preview_state.is_illegal:
            print()
            print("  WARNING: applying this scenario leaves the budget illegal")
        print()


class HistoryRenderer(BaseRenderer):
    """Renderer for the undo/redo history."""

    def render(self, state: FinancialState) -> None:
        _banner(self._title("EDIT HISTORY"))
        calculator = state.calculator

        def surplus(data) -> int:
            return calculator.calculate(data)[-1].remaining

        print()
        print(f"  {'Undo steps available:':<40} {len(state.undo_stack):>6}")
        print(f"  {'Redo steps available:':<40} {len(state.redo_stack):>6}")
        print(f"  {'History limit:':<40} {state.history_limit:>6}")

        _section("TRUE SURPLUS BY ENTRY")
        for depth, data in reversed(list(enumerate(state.redo_stack, start=1))):
            print(f"  {'redo ' + str(depth):<12} {format_currency(surplus(data)):>14}")
        print(f"  {'current':<12} {format_currency(state.surplus):>14}")
        for depth, data in enumerate(state.undo_stack, start=1):
            print(f"  {'undo ' + str(depth):<12} {format_currency(surplus(data)):>14}")
        print()


class ProjectionRenderer(BaseRenderer):
    """Renderer for the projected net worth table."""

    def __init__(self, budget_name: Optional[str] = None, months: int = 12,
                 calculator: Optional[ProjectionCalculator] = None):
        super().__init__(budget_name)
        self.calculator = calculator or ProjectionCalculator(months=months)

    def render(self, state: FinancialState) -> None:
        points = self.calculator.calculate(list(state.calculated_steps))
        _banner(self._title("NET WORTH PROJECTION"))
        print()
        print(f"  {'Starting net worth:':<40} {format_currency(self.calculator.starting_net_worth):>14}")
        print(f"  {'Monthly contribution:':<40} "
              f"{format_currency(ProjectionCalculator.monthly_contribution(list(state.calculated_steps))):>14}")
        print()
        print(f"  {'Month':<8} {'Contribution':>14} {'Growth':>14} {'Net Worth':>16}")
        print(f"  {'-' * 8} {'-' * 14} {'-' * 14} {'-' * 16}")
        for point in points:
            print(f"  {point.label:<8} {format_currency(point.contribution):>14} "
                  f"{format_currency(point.growth):>14} {format_currency(point.net_worth):>16}")
        print()


# Registry of available renderers
RENDERER_REGISTRY: Dict[str, Type[BaseRenderer]] = {
    'Waterfall': WaterfallRenderer,
    'Breakdown': BreakdownRenderer,
    'Scenario': ScenarioRenderer,
    'History': HistoryRenderer,
    'Projection': ProjectionRenderer,
}

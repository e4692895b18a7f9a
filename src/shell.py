#!/usr/bin/env python3
"""Interactive command shell for editing a budget waterfall.

This module provides an interactive shell that loads a budget at startup
and lets you edit line items, preview what-if scenarios and step through
undo/redo history while the waterfall is recomputed after every change.

Usage:
    python src/shell.py [budget_name]

Commands:
    show                                   - Show the waterfall
    breakdown [step]                       - Show category line items
    steps                                  - List editable categories
    income <dollars>                       - Set monthly income
    set <step> <item> <dollars>            - Set (or add) a line item
    add <step> <item> <dollars>            - Add a line item
    remove <step> <item>                   - Remove a line item
    rename <step> <old> <new>              - Rename a line item
    whatif <step> <item|-> <delta> [...]   - Preview scenario changes
    apply / cancel                         - Commit or discard the preview
    undo / redo                            - Step through history
    history                                - Show undo/redo history
    project [months]                       - Project net worth
    render <mode>                          - Render with a named renderer
    budgets / load <name>                  - List or load budgets
    exit/quit                              - Exit the shell

Examples:
    > set "Fixed Spend" Rent 2100
    > whatif "Monthly Income" - 6000 recurring "New job"
    > whatif "Fixed Spend" Rent -200; "Variable Spend" Groceries 50
"""

import sys
import os
import cmd
import shlex
import readline

# Configure readline for tab completion
try:
    if 'libedit' in (readline.__doc__ or ''):
        readline.parse_and_bind("bind ^I rl_complete")
    else:
        readline.parse_and_bind("tab: complete")
except (AttributeError, TypeError):
    pass  # readline might not be fully available

# Add src directory to path for imports
sys.path.insert(0, os.path.dirname(__file__))

from budget_loader import list_budgets, load_budget_or_default
from calc.waterfall_calculator import WaterfallCalculator, IncompleteBudgetError
from model.FinancialData import FinancialData, ONE_TIME_SPEND
from model.ScenarioChange import ScenarioChange, RECURRENCES, RECURRING
from model.field_metadata import get_description
from model.money import parse_dollars, format_currency
from render.renderers import (
    RENDERER_REGISTRY,
    WaterfallRenderer,
    BreakdownRenderer,
    ScenarioRenderer,
    HistoryRenderer,
    ProjectionRenderer,
)
from settings import BudgetSettings, configure_logging, load_settings
from state import commands
from state.session import BudgetSession


def parse_change(tokens: list) -> ScenarioChange:
    """Build a ScenarioChange from `<step> <item|-> <delta> [recurrence] [description...]`.

    The delta is in dollars. '-' as the item targets the step itself
    (only meaningful for Monthly Income).
    """
    if len(tokens) < 3:
        raise ValueError("A change needs <step> <item|-> <delta>")
    step_name, item_name, delta = tokens[0], tokens[1], tokens[2]
    rest = tokens[3:]
    recurrence = RECURRING
    if rest and rest[0] in RECURRENCES:
        recurrence = rest[0]
        rest = rest[1:]
    return ScenarioChange(
        step_name=step_name,
        item_name=None if item_name == '-' else item_name,
        delta=parse_dollars(delta),
        recurrence=recurrence,
        description=' '.join(rest),
    )


class BudgetShell(cmd.Cmd):
    """Interactive shell for editing a budget waterfall."""

    prompt = '> '

    def __init__(self, data: FinancialData = None, budget_name: str = "default",
                 settings: BudgetSettings = None):
        super().__init__()
        self.settings = settings or load_settings()
        self.session = None
        if data is not None:
            self._start_session(data, budget_name)
        self._update_intro()

    def _start_session(self, data: FinancialData, budget_name: str):
        calculator = WaterfallCalculator(strict=self.settings.strict_stages)
        self.session = BudgetSession(
            data,
            name=budget_name,
            calculator=calculator,
            history_limit=self.settings.history_limit,
        )

    def _update_intro(self):
        """Update the intro message based on current state."""
        if self.session is not None:
            state = self.session.state
            self.intro = f"""
Budget Waterfall Interactive Shell
==================================
Budget: {self.session.name}
Monthly income: {format_currency(state.data.monthly_income)}
True surplus:   {format_currency(state.surplus)}{'  (ILLEGAL)' if state.is_illegal else ''}

Type 'help' for available commands.
Type 'exit' or 'quit' to exit.
"""
        else:
            self.intro = """
Budget Waterfall Interactive Shell
==================================
No budget loaded. Use 'load <budget_name>' to get started.

Type 'help' for available commands.
Type 'exit' or 'quit' to exit.
"""

    def _require_session(self) -> bool:
        """Check if a budget is loaded. Returns True if loaded, False otherwise."""
        if self.session is None:
            print("No budget loaded. Use 'load <budget_name>' first.")
            return False
        return True

    def _split(self, arg: str):
        try:
            return shlex.split(arg)
        except ValueError as e:
            print(f"Error: {e}")
            return None

    def _dispatch(self, command) -> None:
        """Dispatch a command and report the outcome."""
        try:
            before = self.session.state
            after = self.session.dispatch(command)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Error: {e}")
            return
        if after is before:
            print("No change.")
            return
        if after.is_previewing:
            preview = after.pending_scenario.preview_state
            print(f"Preview true surplus: {format_currency(preview.surplus)}"
                  f"{'  (ILLEGAL)' if preview.is_illegal else ''}")
            return
        print(f"True surplus: {format_currency(after.surplus)}"
              f"{'  (ILLEGAL)' if after.is_illegal else ''}")

    def _edit_item(self, arg: str, command_class, usage: str):
        if not self._require_session():
            return
        parts = self._split(arg)
        if parts is None:
            return
        if len(parts) != 3:
            print(f"Usage: {usage}")
            return
        try:
            amount = parse_dollars(parts[2])
        except (TypeError, ValueError) as e:
            print(f"Error: {e}")
            return
        self._dispatch(command_class(parts[0], parts[1], amount))

    def do_show(self, arg: str):
        """Show the waterfall (the preview when a scenario is pending).

        Usage: show
        """
        if not self._require_session():
            return
        WaterfallRenderer(budget_name=self.session.name).render(self.session.state)

    def do_breakdown(self, arg: str):
        """Show line items for every category, or for one.

        Usage: breakdown [step]

        Examples:
            breakdown
            breakdown "Fixed Spend"
            breakdown one_time_spend
        """
        if not self._require_session():
            return
        parts = self._split(arg)
        if parts is None:
            return
        step_name = parts[0] if parts else None
        BreakdownRenderer(budget_name=self.session.name, step_name=step_name).render(self.session.display_state)

    def do_steps(self, arg: str):
        """List the categories that hold line items.

        Usage: steps
        """
        if not self._require_session():
            return
        print()
        for name in self.session.state.data.step_names() + [ONE_TIME_SPEND]:
            print(f"  {name:<24} {get_description(name)}")
        print()

    def do_income(self, arg: str):
        """Set the monthly income.

        Usage: income <dollars>

        Example:
            income 6000
        """
        if not self._require_session():
            return
        if not arg.strip():
            print(f"Monthly income: {format_currency(self.session.state.data.monthly_income)}")
            return
        try:
            amount = parse_dollars(arg.strip())
        except (TypeError, ValueError) as e:
            print(f"Error: {e}")
            return
        self._dispatch(commands.UpdateMonthlyIncome(amount))

    def do_set(self, arg: str):
        """Set a line item amount, adding it when missing.

        Usage: set <step> <item> <dollars>

        Example:
            set "Fixed Spend" Rent 2100
        """
        self._edit_item(arg, commands.UpdateBreakdownItem, "set <step> <item> <dollars>")

    def do_add(self, arg: str):
        """Add a line item.

        Usage: add <step> <item> <dollars>

        Example:
            add "Variable Spend" Gym 45
        """
        self._edit_item(arg, commands.AddBreakdownItem, "add <step> <item> <dollars>")

    def do_remove(self, arg: str):
        """Remove a line item.

        Usage: remove <step> <item>
        """
        if not self._require_session():
            return
        parts = self._split(arg)
        if parts is None:
            return
        if len(parts) != 2:
            print("Usage: remove <step> <item>")
            return
        self._dispatch(commands.RemoveBreakdownItem(parts[0], parts[1]))

    def do_rename(self, arg: str):
        """Rename a line item, keeping its amount and position.

        Usage: rename <step> <old_name> <new_name>
        """
        if not self._require_session():
            return
        parts = self._split(arg)
        if parts is None:
            return
        if len(parts) != 3:
            print("Usage: rename <step> <old_name> <new_name>")
            return
        self._dispatch(commands.RenameBreakdownItem(parts[0], parts[1], parts[2]))

    def do_whatif(self, arg: str):
        """Preview one or more changes without committing them.

        Usage: whatif <step> <item|-> <delta> [recurring|one_time] [description]; ...

        Deltas are in dollars and are added to the current amount. Use '-'
        as the item to change the step itself (Monthly Income). Separate
        multiple changes with ';'.

        Examples:
            whatif "Monthly Income" - 6000 recurring "New job"
            whatif "Fixed Spend" Rent -200; "Variable Spend" Groceries 50
        """
        if not self._require_session():
            return
        if not arg.strip():
            ScenarioRenderer(budget_name=self.session.name).render(self.session.state)
            return
        changes = []
        for chunk in arg.split(';'):
            if not chunk.strip():
                continue
            tokens = self._split(chunk)
            if tokens is None:
                return
            try:
                changes.append(parse_change(tokens))
            except (TypeError, ValueError) as e:
                print(f"Error: {e}")
                return
        self._dispatch(commands.PreviewScenario(tuple(changes)))
        ScenarioRenderer(budget_name=self.session.name).render(self.session.state)

    def do_apply(self, arg: str):
        """Commit the pending scenario preview."""
        if not self._require_session():
            return
        if not self.session.state.is_previewing:
            print("No scenario pending.")
            return
        self._dispatch(commands.ApplyScenario())

    def do_cancel(self, arg: str):
        """Discard the pending scenario preview."""
        if not self._require_session():
            return
        self._dispatch(commands.ClearPreview())

    def do_undo(self, arg: str):
        """Undo the last committed change."""
        if not self._require_session():
            return
        if not self.session.state.can_undo:
            print("Nothing to undo.")
            return
        self._dispatch(commands.Undo())

    def do_redo(self, arg: str):
        """Redo the last undone change."""
        if not self._require_session():
            return
        if not self.session.state.can_redo:
            print("Nothing to redo.")
            return
        self._dispatch(commands.Redo())

    def do_history(self, arg: str):
        """Show undo/redo history with the true surplus of each entry."""
        if not self._require_session():
            return
        HistoryRenderer(budget_name=self.session.name).render(self.session.state)

    def do_project(self, arg: str):
        """Project net worth from monthly investment contributions.

        Usage: project [months]
        """
        if not self._require_session():
            return
        months = 12
        if arg.strip():
            try:
                months = int(arg.strip())
            except ValueError:
                print(f"Error: Invalid month count '{arg.strip()}'")
                return
            if months < 0:
                print("Error: Month count cannot be negative")
                return
        ProjectionRenderer(budget_name=self.session.name, months=months).render(self.session.display_state)

    def do_render(self, arg: str):
        """Render the budget using a named renderer.

        Usage: render [mode]

        If no mode is specified, shows available render modes.
        """
        if not self._require_session():
            return
        mode = arg.strip()
        if not mode:
            print("\nAvailable render modes:")
            print("=" * 40)
            for name in RENDERER_REGISTRY.keys():
                print(f"  - {name}")
            print()
            return
        renderer_class = RENDERER_REGISTRY.get(mode)
        if renderer_class is None:
            print(f"Error: Unknown render mode '{mode}'")
            print(f"Available modes: {', '.join(RENDERER_REGISTRY.keys())}")
            return
        renderer_class(budget_name=self.session.name).render(self.session.state)

    def complete_render(self, text, line, begidx, endidx):
        """Tab completion for the render command."""
        return [m for m in RENDERER_REGISTRY.keys() if m.startswith(text)]

    def do_budgets(self, arg: str):
        """List available budgets."""
        names = list_budgets(self.settings.budgets_dir)
        if not names:
            print(f"No budgets found in {self.settings.budgets_dir}")
            return
        print()
        for name in names:
            marker = " *" if self.session is not None and self.session.name == name else ""
            print(f"  {name}{marker}")
        print()

    def do_load(self, arg: str):
        """Load a budget, discarding the current session and its history.

        Usage: load <budget_name>
        """
        name = arg.strip()
        if not name:
            print("Usage: load <budget_name>")
            return
        try:
            data = load_budget_or_default(name, self.settings.budgets_dir)
        except FileNotFoundError as e:
            print(f"Error: {e}")
            return
        except (KeyError, TypeError, ValueError) as e:
            print(f"Error loading budget '{name}': {e}")
            return
        try:
            self._start_session(data, name)
        except IncompleteBudgetError as e:
            print(f"Error: {e}")
            return
        print(f"Loaded budget '{name}'.")
        self._update_intro()

    def complete_load(self, text, line, begidx, endidx):
        """Tab completion for the load command."""
        return [b for b in list_budgets(self.settings.budgets_dir) if b.startswith(text)]

    def do_exit(self, arg: str):
        """Exit the shell."""
        print("Goodbye!")
        return True

    def do_quit(self, arg: str):
        """Exit the shell."""
        return self.do_exit(arg)

    def do_EOF(self, arg: str):
        """Handle Ctrl+D to exit."""
        print()  # Print newline for clean exit
        return self.do_exit(arg)

    def emptyline(self):
        """Do nothing on empty line."""
        pass

    def default(self, line: str):
        """Handle unknown commands."""
        print(f"Unknown command: {line}")
        print("Type 'help' for available commands.")


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    budget_name = sys.argv[1] if len(sys.argv) > 1 else settings.default_budget

    try:
        data = load_budget_or_default(budget_name, settings.budgets_dir)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error loading budget: {e}")
        sys.exit(1)

    try:
        shell = BudgetShell(data, budget_name or "default", settings=settings)
    except IncompleteBudgetError as e:
        print(f"Error: {e}")
        sys.exit(1)
    shell.cmdloop()


if __name__ == "__main__":
    main()

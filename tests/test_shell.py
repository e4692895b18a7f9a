"""Tests for the interactive shell functionality."""

import pytest
import sys
import os
import json
import shutil
from dataclasses import replace

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shell import BudgetShell, parse_change, main
from model.ScenarioChange import ScenarioChange, ONE_TIME, RECURRING
from settings import BudgetSettings


# Path to test fixtures
FIXTURES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), 'mcp_server_tests', 'fixtures'))


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a temp budgets directory with the fixtures."""
    for name in ("testbudget", "brokenbudget"):
        shutil.copytree(os.path.join(FIXTURES_PATH, name), tmp_path / name)
    return BudgetSettings(
        history_limit=10,
        strict_stages=False,
        budgets_dir=str(tmp_path),
        default_budget=None,
        log_level="WARNING",
    )


@pytest.fixture
def shell(seed_data, test_settings):
    return BudgetShell(seed_data, "seed", settings=test_settings)


def run(shell, line, capsys):
    shell.onecmd(line)
    return capsys.readouterr().out


class TestParseChange:
    """Tests for parsing whatif changes."""

    def test_income_change(self):
        change = parse_change(["Monthly Income", "-", "6000", "one_time", "New", "job"])
        assert change == ScenarioChange("Monthly Income", 600000, None, ONE_TIME, "New job")

    def test_item_change_defaults_to_recurring(self):
        change = parse_change(["Fixed Spend", "Rent", "-200"])
        assert change == ScenarioChange("Fixed Spend", -20000, "Rent", RECURRING, "")

    def test_too_few_tokens(self):
        with pytest.raises(ValueError):
            parse_change(["Fixed Spend", "Rent"])

    def test_bad_amount(self):
        with pytest.raises(ValueError):
            parse_change(["Fixed Spend", "Rent", "lots"])


class TestShellStartup:
    """Tests for shell construction."""

    def test_intro_shows_budget(self, shell):
        assert "Budget: seed" in shell.intro
        assert "$5,666.00" in shell.intro
        assert "ILLEGAL" in shell.intro

    def test_without_budget(self, test_settings, capsys):
        shell = BudgetShell(settings=test_settings)
        assert "No budget loaded" in shell.intro
        assert "No budget loaded" in run(shell, "show", capsys)

    def test_history_limit_from_settings(self, seed_data, test_settings):
        settings = BudgetSettings(3, False, test_settings.budgets_dir, None, "WARNING")
        shell = BudgetShell(seed_data, "seed", settings=settings)
        assert shell.session.state.history_limit == 3


class TestEditCommands:
    """Tests for editing commands."""

    def test_show(self, shell, capsys):
        out = run(shell, "show", capsys)
        assert "BUDGET WATERFALL - seed" in out

    def test_set(self, shell, capsys):
        out = run(shell, 'set "Fixed Spend" Rent 1600', capsys)
        assert "True surplus: $16.00" in out
        assert shell.session.state.data.breakdown_for("Fixed Spend")["Rent"] == 160000

    def test_set_usage(self, shell, capsys):
        assert "Usage: set" in run(shell, "set Rent 1600", capsys)

    def test_set_bad_amount(self, shell, capsys):
        assert "Error:" in run(shell, 'set "Fixed Spend" Rent lots', capsys)

    def test_unbalanced_quotes(self, shell, capsys):
        assert "Error:" in run(shell, 'set "Fixed Spend Rent 1600', capsys)

    def test_add(self, shell, capsys):
        run(shell, 'add "Variable Spend" Gym 45', capsys)
        assert shell.session.state.data.breakdown_for("Variable Spend")["Gym"] == 4500

    def test_remove(self, shell, capsys):
        out = run(shell, 'remove "Fixed Spend" "Car Payment"', capsys)
        assert "True surplus: $116.00" in out

    def test_remove_missing_is_no_change(self, shell, capsys):
        assert "No change." in run(shell, 'remove "Fixed Spend" Boat', capsys)
        assert not shell.session.state.can_undo

    def test_rename(self, shell, capsys):
        run(shell, 'rename "Fixed Spend" Rent Mortgage', capsys)
        assert list(shell.session.state.data.breakdown_for("Fixed Spend"))[0] == "Mortgage"

    def test_income(self, shell, capsys):
        assert "Monthly income: $5,666.00" in run(shell, "income", capsys)
        run(shell, "income $6,000", capsys)
        assert shell.session.state.data.monthly_income == 600000

    def test_undo_redo(self, shell, capsys):
        assert "Nothing to undo." in run(shell, "undo", capsys)
        run(shell, "income 6000", capsys)
        run(shell, "undo", capsys)
        assert shell.session.state.data.monthly_income == 566600
        run(shell, "redo", capsys)
        assert shell.session.state.data.monthly_income == 600000
        assert "Nothing to redo." in run(shell, "redo", capsys)


class TestScenarioCommands:
    """Tests for whatif/apply/cancel."""

    def test_whatif_preview(self, shell, capsys):
        out = run(shell, 'whatif "Monthly Income" - 6000 one_time "New job"', capsys)
        assert "Preview true surplus: $5,616.00" in out
        assert "SCENARIO PREVIEW" in out
        assert shell.session.state.data.monthly_income == 566600
        assert shell.session.state.pending_scenario.preview_state.data.monthly_income == 1166600

    def test_whatif_multiple_changes(self, shell, capsys):
        run(shell, 'whatif "Fixed Spend" Rent -200; "Variable Spend" Groceries 50', capsys)
        changes = shell.session.state.pending_scenario.changes
        assert [c.item_name for c in changes] == ["Rent", "Groceries"]
        preview = shell.session.state.pending_scenario.preview_state
        assert preview.data.breakdown_for("Fixed Spend")["Rent"] == 180000
        assert preview.data.breakdown_for("Variable Spend")["Groceries"] == 15000

    def test_whatif_without_args_shows_pending(self, shell, capsys):
        assert "No scenario pending" in run(shell, "whatif", capsys)

    def test_whatif_error(self, shell, capsys):
        assert "Error:" in run(shell, 'whatif "Fixed Spend" Rent', capsys)
        assert not shell.session.state.is_previewing

    def test_apply(self, shell, capsys):
        assert "No scenario pending." in run(shell, "apply", capsys)
        run(shell, 'whatif "Monthly Income" - 6000', capsys)
        run(shell, "apply", capsys)
        assert shell.session.state.data.monthly_income == 1166600
        assert not shell.session.state.is_previewing

    def test_cancel(self, shell, capsys):
        run(shell, 'whatif "Monthly Income" - 6000', capsys)
        run(shell, "cancel", capsys)
        assert not shell.session.state.is_previewing
        assert shell.session.state.data.monthly_income == 566600


class TestReportCommands:
    """Tests for read-only commands."""

    def test_breakdown(self, shell, capsys):
        out = run(shell, 'breakdown "Fixed Spend"', capsys)
        assert "FIXED SPEND ($2,850.00)" in out

    def test_steps(self, shell, capsys):
        out = run(shell, "steps", capsys)
        assert "Emergency Fund" in out
        assert "one_time_spend" in out

    def test_history(self, shell, capsys):
        run(shell, "income 6000", capsys)
        assert "Undo steps available:" in run(shell, "history", capsys)

    def test_project(self, shell, capsys):
        assert "NET WORTH PROJECTION" in run(shell, "project 3", capsys)

    @pytest.mark.parametrize("arg", ["x", "-1"])
    def test_project_bad_months(self, shell, capsys, arg):
        assert "Error:" in run(shell, f"project {arg}", capsys)

    def test_render_lists_modes(self, shell, capsys):
        out = run(shell, "render", capsys)
        assert "Waterfall" in out
        assert "Projection" in out

    def test_render_mode(self, shell, capsys):
        assert "BUDGET BREAKDOWN" in run(shell, "render Breakdown", capsys)

    def test_render_unknown_mode(self, shell, capsys):
        assert "Error: Unknown render mode 'Bogus'" in run(shell, "render Bogus", capsys)

    def test_complete_render(self, shell):
        assert shell.complete_render("Wa", "render Wa", 7, 9) == ["Waterfall"]


class TestBudgetCommands:
    """Tests for listing and loading budgets."""

    def test_budgets(self, shell, capsys):
        out = run(shell, "budgets", capsys)
        assert "testbudget" in out
        assert "brokenbudget" in out

    def test_load(self, shell, capsys):
        run(shell, "income 1", capsys)
        out = run(shell, "load testbudget", capsys)
        assert "Loaded budget 'testbudget'." in out
        assert shell.session.name == "testbudget"
        assert shell.session.state.surplus == 70000
        assert not shell.session.state.can_undo

    def test_load_missing(self, shell, capsys):
        assert "Error:" in run(shell, "load nope", capsys)
        assert shell.session.name == "seed"

    def test_load_broken(self, shell, capsys):
        assert "Error loading budget 'brokenbudget'" in run(shell, "load brokenbudget", capsys)

    def test_load_incomplete_budget_in_strict_mode(self, seed_data, test_settings, capsys):
        partial = os.path.join(test_settings.budgets_dir, "partial")
        os.makedirs(partial)
        with open(os.path.join(partial, "budget.json"), "w") as f:
            json.dump({"monthlyIncome": 100, "steps": {}}, f)
        shell = BudgetShell(seed_data, "seed", settings=replace(test_settings, strict_stages=True))
        out = run(shell, "load partial", capsys)
        assert "Error: Budget is missing waterfall sections" in out
        assert shell.session.name == "seed"
        assert shell.session.state.surplus == -38400

    def test_main_exits_on_incomplete_budget_in_strict_mode(self, test_settings, monkeypatch, capsys):
        partial = os.path.join(test_settings.budgets_dir, "partial")
        os.makedirs(partial)
        with open(os.path.join(partial, "budget.json"), "w") as f:
            json.dump({"monthlyIncome": 100, "steps": {}}, f)
        monkeypatch.setenv("BUDGET_DIR", test_settings.budgets_dir)
        monkeypatch.setenv("BUDGET_STRICT_STAGES", "true")
        monkeypatch.setattr(sys, "argv", ["shell.py", "partial"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "Error: Budget is missing waterfall sections" in capsys.readouterr().out

    def test_complete_load(self, shell):
        assert shell.complete_load("test", "load test", 5, 9) == ["testbudget"]


class TestShellBasics:
    """Tests for exit and fallbacks."""

    def test_exit(self, shell, capsys):
        assert shell.onecmd("exit") is True
        assert "Goodbye!" in capsys.readouterr().out

    def test_quit(self, shell):
        assert shell.onecmd("quit") is True

    def test_eof(self, shell):
        assert shell.onecmd("EOF") is True

    def test_unknown_command(self, shell, capsys):
        assert "Unknown command: frobnicate" in run(shell, "frobnicate", capsys)

    def test_emptyline(self, shell, capsys):
        assert shell.emptyline() is None

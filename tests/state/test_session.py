"""Tests for BudgetSession."""

import os
import sys
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from calc.waterfall_calculator import WaterfallCalculator
from model.ScenarioChange import ScenarioChange
from state import commands
from state.session import BudgetSession


class TestBudgetSession:
    """Tests for the mutable session holder."""

    def test_initial_state(self, seed_data):
        session = BudgetSession(seed_data, name="seed")
        assert session.name == "seed"
        assert session.state.surplus == -38400

    def test_dispatch_swaps_state(self, seed_data):
        session = BudgetSession(seed_data)
        initial = session.state
        result = session.dispatch(commands.UpdateMonthlyIncome(700000))
        assert session.state is result
        assert session.state is not initial

    def test_history_limit_passed_through(self, seed_data):
        session = BudgetSession(seed_data, history_limit=2)
        for amount in (1, 2, 3):
            session.dispatch(commands.UpdateMonthlyIncome(amount))
        assert len(session.state.undo_stack) == 2

    def test_calculator_passed_through(self, seed_data):
        calculator = WaterfallCalculator(strict=True)
        assert BudgetSession(seed_data, calculator=calculator).state.calculator is calculator

    def test_display_state_prefers_preview(self, seed_data):
        session = BudgetSession(seed_data)
        assert session.display_state is session.state
        session.dispatch(commands.PreviewScenario((ScenarioChange("Monthly Income", 600000),)))
        assert session.display_state.data.monthly_income == 1166600
        assert session.state.data.monthly_income == 566600

    def test_noop_logged(self, seed_data, caplog):
        session = BudgetSession(seed_data, name="seed")
        with caplog.at_level(logging.DEBUG, logger="state.session"):
            session.dispatch(commands.Undo())
        assert "made no change" in caplog.text

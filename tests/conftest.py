"""Pytest configuration for the budget-waterfall test suite."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from budget_loader import default_budget
from model.FinancialData import FinancialData

# Configure pytest-asyncio to use auto mode so all async tests are automatically run
pytest_plugins = ('pytest_asyncio',)


# Set the default asyncio mode - this tells pytest-asyncio to automatically
# apply the asyncio mark to async test functions
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


@pytest.fixture
def seed_data() -> FinancialData:
    """The built-in seed budget (illegal: True Surplus is -$384.00)."""
    return default_budget()


@pytest.fixture
def small_data() -> FinancialData:
    """A small legal budget with every waterfall section present.

    5000.00 income; balances: Takehome 3700.00, Free Cash 2100.00,
    Net Income 1500.00, True Surplus 700.00.
    """
    return FinancialData.from_dict({
        "monthlyIncome": 500000,
        "oneTimeSpend": {"breakdown": {"Vacation": 120000}},
        "steps": {
            "Total Income": {"children": {
                "Pre-Tax Deductions": {"kind": "investment", "breakdown": {"401K": 50000}},
                "Taxes": {"kind": "spend", "breakdown": {"Federal": 60000, "State": 20000}},
            }},
            "Takehome": {"children": {
                "Fixed Spend": {"kind": "spend", "breakdown": {"Rent": 150000, "Utilities": 10000}},
            }},
            "Free Cash": {"children": {
                "Variable Spend": {"kind": "spend", "breakdown": {"Groceries": 40000, "Fun": 20000}},
            }},
            "Net Income": {"children": {
                "Investments": {"kind": "investment", "breakdown": {"Brokerage": 50000}},
                "Emergency Fund": {"kind": "investment", "breakdown": {"Savings": 30000}},
            }},
        },
    })

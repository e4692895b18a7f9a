"""Pytest configuration for MCP server tests."""

import os
import shutil

import pytest

FIXTURES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), 'fixtures'))


@pytest.fixture
def budgets_dir(tmp_path):
    """A budgets directory holding a copy of every fixture budget."""
    for name in os.listdir(FIXTURES_PATH):
        shutil.copytree(os.path.join(FIXTURES_PATH, name), tmp_path / name)
    return str(tmp_path)


@pytest.fixture
def good_budgets_dir(tmp_path):
    """A budgets directory holding only the valid test budget."""
    shutil.copytree(os.path.join(FIXTURES_PATH, 'testbudget'), tmp_path / 'testbudget')
    return str(tmp_path)

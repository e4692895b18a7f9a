"""Tests for the budget input model and its JSON codec."""

import os
import sys
import copy

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from budget_loader import DEFAULT_BUDGET
from model.CalculatedStep import CalculatedStep, STEP_DEDUCTION
from model.FinancialData import (
    FinancialData,
    FlowStep,
    OneTimeSpend,
    DuplicateStepError,
    ONE_TIME_SPEND,
)
from model.ScenarioChange import ScenarioChange, ONE_TIME, RECURRING
from model.field_metadata import STEP_METADATA, get_short_name, get_description, get_field_info
from calc.waterfall_calculator import WATERFALL_PIPELINE


class TestFlowStep:
    """Tests for FlowStep."""

    def test_default_kind_is_spend(self):
        assert FlowStep(breakdown={}).kind == "spend"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            FlowStep(kind="savings")

    def test_total_sums_breakdown(self):
        assert FlowStep(breakdown={"a": 100, "b": -30}).total == 70

    def test_total_without_breakdown_is_zero(self):
        assert FlowStep(children={}).total == 0

    def test_from_dict_accepts_original_aliases(self):
        step = FlowStep.from_dict("Net Income", {
            "value": "[calculated]",
            "outflow": {"Investments": {"type": "investment", "breakdown": {"Roth": 1000}}},
        })
        assert step.value is None
        assert step.children["Investments"].kind == "investment"
        assert step.children["Investments"].breakdown == {"Roth": 1000}

    def test_from_dict_rejects_non_numeric_amount(self):
        with pytest.raises(TypeError):
            FlowStep.from_dict("Taxes", {"breakdown": {"Federal": "lots"}})

    def test_from_dict_rejects_non_finite_amount(self):
        with pytest.raises(ValueError):
            FlowStep.from_dict("Taxes", {"breakdown": {"Federal": float('nan')}})


class TestFinancialData:
    """Tests for FinancialData construction, lookup and round-trip."""

    def test_seed_loads(self, seed_data):
        assert seed_data.monthly_income == 566600
        assert seed_data.one_time_spend.total == 300000

    def test_find_step_anywhere_in_tree(self, seed_data):
        assert seed_data.find_step("Emergency Fund").breakdown == {"Emergency Fund": 100000}
        assert seed_data.find_step("Total Income").children is not None
        assert seed_data.find_step("Nope") is None

    def test_breakdown_for_one_time_spend(self, seed_data):
        assert seed_data.breakdown_for(ONE_TIME_SPEND) == {"Vacation": 100000, "Laptop": 200000}

    def test_breakdown_for_parent_is_none(self, seed_data):
        assert seed_data.breakdown_for("Takehome") is None

    def test_step_names_lists_breakdown_steps_in_tree_order(self, seed_data):
        assert seed_data.step_names() == [
            "Pre-Tax Deductions", "Taxes", "Fixed Spend", "Variable Spend",
            "Investments", "Emergency Fund",
        ]

    def test_duplicate_step_names_rejected(self):
        raw = copy.deepcopy(DEFAULT_BUDGET)
        raw["steps"]["Takehome"]["children"]["Taxes"] = {"breakdown": {"Sales": 100}}
        with pytest.raises(DuplicateStepError):
            FinancialData.from_dict(raw)

    def test_reserved_step_name_rejected(self):
        with pytest.raises(DuplicateStepError):
            FinancialData(monthly_income=0, steps={"Monthly Income": FlowStep(breakdown={})})

    def test_duplicate_is_a_value_error(self):
        assert issubclass(DuplicateStepError, ValueError)

    def test_missing_income_rejected(self):
        with pytest.raises(ValueError):
            FinancialData.from_dict({"steps": {}})

    def test_snake_case_keys_accepted(self):
        data = FinancialData.from_dict({
            "monthly_income": 1000,
            "one_time_spend": {"breakdown": {"TV": 500}},
            "steps": {},
        })
        assert data.monthly_income == 1000
        assert data.one_time_spend.breakdown == {"TV": 500}

    def test_to_dict_round_trip(self, seed_data):
        assert FinancialData.from_dict(seed_data.to_dict()) == seed_data

    def test_to_dict_matches_seed_document(self, seed_data):
        document = seed_data.to_dict()
        assert document["monthlyIncome"] == DEFAULT_BUDGET["monthlyIncome"]
        assert document["oneTimeSpend"] == DEFAULT_BUDGET["oneTimeSpend"]
        fixed = document["steps"]["Takehome"]["children"]["Fixed Spend"]
        assert fixed["breakdown"] == DEFAULT_BUDGET["steps"]["Takehome"]["children"]["Fixed Spend"]["breakdown"]

    def test_equality_ignores_index(self, seed_data):
        assert copy.deepcopy(seed_data) == seed_data

    def test_income_normalized_to_cents(self):
        assert FinancialData(monthly_income=100.6).monthly_income == 101

    def test_one_time_spend_total(self):
        assert OneTimeSpend({"a": 100, "b": 250}).total == 350
        assert OneTimeSpend().total == 0


class TestCalculatedStep:
    """Tests for CalculatedStep."""

    def test_to_dict_uses_category_kind_key(self):
        step = CalculatedStep(name="Taxes", value=100, kind=STEP_DEDUCTION, level=1,
                              remaining=-50, category_kind="spend", breakdown={"Federal": 100})
        result = step.to_dict()
        assert result["categoryKind"] == "spend"
        assert result["breakdown"] == {"Federal": 100}
        assert step.is_deduction
        assert step.is_negative

    def test_to_dict_omits_unset_fields(self):
        step = CalculatedStep(name="Takehome", value=0, kind="checkpoint", level=0, remaining=0)
        assert not step.is_deduction
        assert not step.is_negative
        assert "categoryKind" not in step.to_dict()
        assert "breakdown" not in step.to_dict()


class TestScenarioChange:
    """Tests for ScenarioChange."""

    def test_defaults(self):
        change = ScenarioChange("Monthly Income", 600000)
        assert change.recurrence == RECURRING
        assert change.item_name is None
        assert change.description == ""

    def test_delta_normalized(self):
        assert ScenarioChange("Fixed Spend", 10.5, item_name="Rent").delta == 11

    def test_unknown_recurrence_rejected(self):
        with pytest.raises(ValueError):
            ScenarioChange("Monthly Income", 100, recurrence="weekly")

    def test_empty_step_rejected(self):
        with pytest.raises(ValueError):
            ScenarioChange("", 100)

    def test_from_dict_camel_case(self):
        change = ScenarioChange.from_dict({
            "stepName": "Fixed Spend", "itemName": "Rent", "delta": -20000,
            "recurrence": ONE_TIME, "description": "Cheaper lease",
        })
        assert change == ScenarioChange("Fixed Spend", -20000, "Rent", ONE_TIME, "Cheaper lease")

    def test_from_dict_requires_delta(self):
        with pytest.raises(ValueError, match="requires 'delta'"):
            ScenarioChange.from_dict({"stepName": "Fixed Spend", "itemName": "Rent"})

    def test_from_dict_original_type_key(self):
        change = ScenarioChange.from_dict({"stepName": "Monthly Income", "delta": 5, "type": "one_time"})
        assert change.recurrence == ONE_TIME

    def test_to_dict_round_trip(self):
        change = ScenarioChange("Fixed Spend", -20000, "Rent", ONE_TIME, "Cheaper lease")
        assert ScenarioChange.from_dict(change.to_dict()) == change


class TestStepMetadata:
    """Tests for step display metadata."""

    def test_every_pipeline_row_has_metadata(self):
        for row in WATERFALL_PIPELINE:
            assert row.name in STEP_METADATA

    def test_lookups(self):
        assert get_short_name("Pre-Tax Deductions") == "Pre-Tax"
        assert get_description("True Surplus") != ""
        assert get_field_info("one_time_spend").short_name == "One-Time"

    def test_unknown_names_fall_back(self):
        assert get_short_name("Custom") == "Custom"
        assert get_description("Custom") == ""
        assert get_field_info("Custom") is None

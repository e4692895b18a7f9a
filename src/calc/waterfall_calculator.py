from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from model.FinancialData import FinancialData, FlowStep, KIND_INVESTMENT, KIND_SPEND, MONTHLY_INCOME
from model.CalculatedStep import CalculatedStep, STEP_INCOME, STEP_DEDUCTION, STEP_CHECKPOINT


class IncompleteBudgetError(ValueError):
    """Raised in strict mode when pipeline sections are missing from a budget."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Budget is missing waterfall sections: {', '.join(missing)}")


@dataclass(frozen=True)
class PipelineRow:
    """One stage of the waterfall.

    A deduction row reads `steps[parent].children[name].breakdown`; a
    checkpoint row (no parent) records the running balance under `name`.
    """
    name: str
    parent: Optional[str] = None

    @property
    def is_checkpoint(self) -> bool:
        return self.parent is None


# Order matters: balances are carried from row to row
WATERFALL_PIPELINE: Tuple[PipelineRow, ...] = (
    PipelineRow("Pre-Tax Deductions", parent="Total Income"),
    PipelineRow("Taxes", parent="Total Income"),
    PipelineRow("Takehome"),
    PipelineRow("Fixed Spend", parent="Takehome"),
    PipelineRow("Free Cash"),
    PipelineRow("Variable Spend", parent="Free Cash"),
    PipelineRow("Net Income"),
    PipelineRow("Investments", parent="Net Income"),
    PipelineRow("Emergency Fund", parent="Net Income"),
    PipelineRow("True Surplus"),
)


class WaterfallCalculator:
    """Turns a budget into the ordered list of running-balance steps.

    The pipeline is fixed (see `WATERFALL_PIPELINE`): the monthly income is
    reduced by each deduction category in turn, with checkpoint rows
    recording the balance between stages. A section missing from the
    budget is skipped unless `strict` is set.
    """

    def __init__(self, pipeline: Tuple[PipelineRow, ...] = WATERFALL_PIPELINE, strict: bool = False):
        self.pipeline = pipeline
        self.strict = strict

    @staticmethod
    def _section(data: FinancialData, row: PipelineRow) -> Optional[FlowStep]:
        parent = data.steps.get(row.parent)
        if parent is None or not parent.children:
            return None
        section = parent.children.get(row.name)
        if section is None or section.breakdown is None:
            return None
        return section

    def missing_sections(self, data: FinancialData) -> List[str]:
        """Names of deduction rows the budget does not provide."""
        return [
            f"{row.parent} > {row.name}"
            for row in self.pipeline
            if not row.is_checkpoint and self._section(data, row) is None
        ]

    def apply_row(self, row: PipelineRow, data: FinancialData, balance: int) -> Tuple[Optional[CalculatedStep], int]:
        """Apply a single pipeline row to the running balance.

        Returns:
            (emitted step or None when the section is absent, new balance)
        """
        if row.is_checkpoint:
            return CalculatedStep(
                name=row.name,
                value=balance,
                kind=STEP_CHECKPOINT,
                level=0,
                remaining=balance,
            ), balance

        section = self._section(data, row)
        if section is None:
            return None, balance

        total = section.total
        balance -= total
        return CalculatedStep(
            name=row.name,
            value=total,
            kind=STEP_DEDUCTION,
            category_kind=section.kind,
            level=1,
            breakdown=dict(section.breakdown),
            remaining=balance,
        ), balance

    def calculate(self, data: FinancialData) -> List[CalculatedStep]:
        """Compute the full waterfall for a budget.

        Args:
            data: The budget to evaluate

        Returns:
            Steps in application order, starting with the income row

        Raises:
            IncompleteBudgetError: only in strict mode, when sections are missing
        """
        if self.strict:
            missing = self.missing_sections(data)
            if missing:
                raise IncompleteBudgetError(missing)

        balance = data.monthly_income
        steps = [CalculatedStep(
            name=MONTHLY_INCOME,
            value=balance,
            kind=STEP_INCOME,
            level=0,
            remaining=balance,
        )]
        for row in self.pipeline:
            step, balance = self.apply_row(row, data, balance)
            if step is not None:
                steps.append(step)
        return steps

    @staticmethod
    def is_illegal(steps: List[CalculatedStep]) -> bool:
        """True when the running balance goes negative anywhere."""
        return any(step.is_negative for step in steps)

    @staticmethod
    def totals_by_category_kind(steps: List[CalculatedStep]) -> Dict[str, int]:
        """Sum deduction values per category kind (investment vs spend)."""
        totals = {KIND_INVESTMENT: 0, KIND_SPEND: 0}
        for step in steps:
            if step.is_deduction:
                kind = step.category_kind or KIND_SPEND
                totals[kind] = totals.get(kind, 0) + step.value
        return totals

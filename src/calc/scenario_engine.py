import copy
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from calc import edit_operations
from model.CalculatedStep import CalculatedStep
from model.FinancialData import FinancialData, MONTHLY_INCOME
from model.ScenarioChange import ScenarioChange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepDifference:
    """How one waterfall row differs between the settled and preview budgets."""
    name: str
    before: Optional[int]
    after: Optional[int]

    @property
    def difference(self) -> int:
        return (self.after or 0) - (self.before or 0)


class ScenarioEngine:
    """Applies batches of what-if changes to a copy of a budget.

    Every change's delta is additive: income becomes income + delta and a
    breakdown item becomes its current amount + delta (a missing item
    starts from zero). Changes apply in order against the same working
    copy; the input budget is never modified.
    """

    def apply_change(self, data: FinancialData, change: ScenarioChange) -> FinancialData:
        """Apply one change, returning a new budget (or an unchanged copy if skipped)."""
        if change.step_name == MONTHLY_INCOME:
            return edit_operations.update_income(data, data.monthly_income + change.delta)

        if change.item_name is None:
            logger.warning("Skipping scenario change '%s': no item named for step '%s'",
                           change.description, change.step_name)
            return copy.deepcopy(data)

        breakdown = data.breakdown_for(change.step_name)
        if breakdown is None:
            logger.warning("Skipping scenario change '%s': unknown step '%s'",
                           change.description, change.step_name)
            return copy.deepcopy(data)

        current = breakdown.get(change.item_name, 0)
        return edit_operations.update_item(data, change.step_name, change.item_name, current + change.delta)

    def apply_changes(self, data: FinancialData, changes: Iterable[ScenarioChange]) -> FinancialData:
        """Apply every change in list order and return the preview budget."""
        working = copy.deepcopy(data)
        for change in changes:
            working = self.apply_change(working, change)
        return working


def compare_steps(settled: List[CalculatedStep], preview: List[CalculatedStep]) -> List[StepDifference]:
    """Pair waterfall rows by name, keeping waterfall order.

    Rows present in only one sequence get None on the other side.
    """
    before = {step.name: step.value for step in settled}
    after = {step.name: step.value for step in preview}

    names = [step.name for step in settled]
    for step in preview:
        if step.name not in before:
            names.append(step.name)

    return [StepDifference(name, before.get(name), after.get(name)) for name in names]

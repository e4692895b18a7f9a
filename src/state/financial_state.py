"""Budget state machine.

A FinancialState bundles a budget with its computed waterfall, the
illegal-budget flag, bounded undo/redo history and an optional pending
scenario preview. States are immutable: every transition returns a new
state and the computed fields are always derived from `data` by the
calculator, never patched.

History entries store only the FinancialData of earlier states; their
waterfalls are recomputed when they are restored.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple

from calc.scenario_engine import ScenarioEngine
from calc.waterfall_calculator import WaterfallCalculator
from model.CalculatedStep import CalculatedStep
from model.FinancialData import FinancialData
from model.ScenarioChange import ScenarioChange

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10

EditFunction = Callable[[FinancialData], FinancialData]


def _push(stack: Tuple[FinancialData, ...], entry: FinancialData, limit: int) -> Tuple[FinancialData, ...]:
    """Push onto the front of a history stack, dropping the oldest beyond `limit`."""
    return ((entry,) + stack)[:limit]


@dataclass(frozen=True)
class PendingScenario:
    """A computed but uncommitted what-if preview."""
    changes: Tuple[ScenarioChange, ...]
    preview_state: 'FinancialState'


@dataclass(frozen=True)
class FinancialState:
    data: FinancialData
    calculated_steps: Tuple[CalculatedStep, ...]
    is_illegal: bool
    undo_stack: Tuple[FinancialData, ...] = ()
    redo_stack: Tuple[FinancialData, ...] = ()
    pending_scenario: Optional[PendingScenario] = None
    calculator: WaterfallCalculator = field(default_factory=WaterfallCalculator, repr=False, compare=False)
    history_limit: int = field(default=HISTORY_LIMIT, repr=False, compare=False)

    @classmethod
    def create(cls, data: FinancialData,
               calculator: Optional[WaterfallCalculator] = None,
               history_limit: int = HISTORY_LIMIT,
               undo_stack: Tuple[FinancialData, ...] = (),
               redo_stack: Tuple[FinancialData, ...] = ()) -> 'FinancialState':
        """Build a settled state, computing the waterfall from `data`."""
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        calculator = calculator or WaterfallCalculator()
        steps = tuple(calculator.calculate(data))
        return cls(
            data=data,
            calculated_steps=steps,
            is_illegal=calculator.is_illegal(steps),
            undo_stack=undo_stack,
            redo_stack=redo_stack,
            calculator=calculator,
            history_limit=history_limit,
        )

    def _derive(self, data: FinancialData, undo_stack, redo_stack) -> 'FinancialState':
        new_state = FinancialState.create(
            data,
            calculator=self.calculator,
            history_limit=self.history_limit,
            undo_stack=undo_stack,
            redo_stack=redo_stack,
        )
        if new_state.is_illegal and not self.is_illegal:
            logger.warning("Budget became illegal: running balance drops below zero")
        return new_state

    @property
    def is_previewing(self) -> bool:
        return self.pending_scenario is not None

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    @property
    def surplus(self) -> int:
        """Balance after the last waterfall row."""
        return self.calculated_steps[-1].remaining

    def commit_edit(self, edit: EditFunction) -> 'FinancialState':
        """Apply an edit operation and record the current budget for undo.

        An edit that leaves the budget unchanged returns this state as-is.
        A pending preview is discarded because it was computed from the
        budget being replaced.
        """
        new_data = edit(self.data)
        if new_data == self.data:
            logger.debug("Edit left the budget unchanged; no history entry recorded")
            return self
        state = self._derive(
            new_data,
            undo_stack=_push(self.undo_stack, self.data, self.history_limit),
            redo_stack=(),
        )
        logger.debug("Committed edit (undo depth %d)", len(state.undo_stack))
        return state

    def preview_scenario(self, changes, engine: Optional[ScenarioEngine] = None) -> 'FinancialState':
        """Attach a preview of `changes` without touching the committed budget."""
        changes = tuple(changes)
        engine = engine or ScenarioEngine()
        preview_data = engine.apply_changes(self.data, changes)
        preview_state = FinancialState.create(
            preview_data,
            calculator=self.calculator,
            history_limit=self.history_limit,
        )
        logger.debug("Previewing %d scenario change(s)", len(changes))
        return replace(self, pending_scenario=PendingScenario(changes, preview_state))

    def apply_scenario(self) -> 'FinancialState':
        """Commit the pending preview; without one this is a no-op."""
        if self.pending_scenario is None:
            return self
        state = self._derive(
            self.pending_scenario.preview_state.data,
            undo_stack=_push(self.undo_stack, self.data, self.history_limit),
            redo_stack=(),
        )
        logger.info("Applied scenario with %d change(s)", len(self.pending_scenario.changes))
        return state

    def clear_preview(self) -> 'FinancialState':
        """Drop the pending preview, leaving everything else unchanged."""
        if self.pending_scenario is None:
            return self
        return self.settled()

    def settled(self) -> 'FinancialState':
        """This state without any pending preview."""
        return replace(self, pending_scenario=None)

    def undo(self) -> 'FinancialState':
        """Restore the previous budget; no-op when there is no history."""
        if not self.undo_stack:
            return self
        previous, remaining = self.undo_stack[0], self.undo_stack[1:]
        state = self._derive(
            previous,
            undo_stack=remaining,
            redo_stack=_push(self.redo_stack, self.data, self.history_limit),
        )
        logger.debug("Undo (undo depth %d, redo depth %d)", len(state.undo_stack), len(state.redo_stack))
        return state

    def redo(self) -> 'FinancialState':
        """Re-apply the most recently undone budget; no-op when nothing was undone."""
        if not self.redo_stack:
            return self
        following, remaining = self.redo_stack[0], self.redo_stack[1:]
        state = self._derive(
            following,
            undo_stack=_push(self.undo_stack, self.data, self.history_limit),
            redo_stack=remaining,
        )
        logger.debug("Redo (undo depth %d, redo depth %d)", len(state.undo_stack), len(state.redo_stack))
        return state

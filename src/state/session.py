import logging
from typing import Optional

from calc.waterfall_calculator import WaterfallCalculator
from model.FinancialData import FinancialData
from state.commands import Command, dispatch
from state.financial_state import FinancialState, HISTORY_LIMIT

logger = logging.getLogger(__name__)


class BudgetSession:
    """Holds the current state for one interactive front end.

    The state objects themselves are immutable; the session only swaps
    which one is current.
    """

    def __init__(self, data: FinancialData, name: str = "default",
                 calculator: Optional[WaterfallCalculator] = None,
                 history_limit: int = HISTORY_LIMIT):
        self.name = name
        self.state = FinancialState.create(data, calculator=calculator, history_limit=history_limit)

    def dispatch(self, command: Command) -> FinancialState:
        """Apply a command and make the result current.

        Returns:
            The new current state
        """
        new_state = dispatch(self.state, command)
        if new_state is self.state:
            logger.debug("[%s] %s made no change", self.name, type(command).__name__)
        else:
            logger.debug("[%s] %s applied", self.name, type(command).__name__)
        self.state = new_state
        return new_state

    @property
    def display_state(self) -> FinancialState:
        """The preview when one is pending, otherwise the settled state."""
        pending = self.state.pending_scenario
        return pending.preview_state if pending else self.state

"""Net worth projection.

Projects net worth month by month from the monthly investment
contributions found in a computed waterfall.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from model.CalculatedStep import CalculatedStep
from model.FinancialData import KIND_INVESTMENT
from model.money import normalize_amount


@dataclass
class NetWorthPoint:
    """Projected net worth at the end of one month."""
    month: int
    label: str
    contribution: int
    growth: int
    net_worth: int


class ProjectionCalculator:
    """Calculator for projected net worth over a number of months.

    Each month the current balance grows by `annual_growth_rate / 12`
    and then receives the month's investment contributions.
    """

    def __init__(self, starting_net_worth: int = 5_000_000, months: int = 60,
                 annual_growth_rate: float = 0.0, start_month: Optional[date] = None):
        """Initialize the projection.

        Args:
            starting_net_worth: Net worth in cents before the first month
            months: Number of months to project
            annual_growth_rate: Expected yearly appreciation as a fraction (0.07 = 7%)
            start_month: First projected month (defaults to the current month)
        """
        if months < 0:
            raise ValueError("months must not be negative")
        self.starting_net_worth = normalize_amount(starting_net_worth)
        self.months = months
        self.annual_growth_rate = annual_growth_rate
        self.start_month = start_month or date.today().replace(day=1)

    @staticmethod
    def monthly_contribution(steps: List[CalculatedStep]) -> int:
        """Sum of the deduction rows that flow into investments."""
        return sum(
            step.value for step in steps
            if step.is_deduction and step.category_kind == KIND_INVESTMENT
        )

    def _label(self, offset: int) -> str:
        month_index = self.start_month.month - 1 + offset
        year = self.start_month.year + month_index // 12
        return f"{year:04d}-{month_index % 12 + 1:02d}"

    def calculate(self, steps: List[CalculatedStep]) -> List[NetWorthPoint]:
        contribution = self.monthly_contribution(steps)
        monthly_rate = self.annual_growth_rate / 12

        points: List[NetWorthPoint] = []
        net_worth = self.starting_net_worth
        for offset in range(self.months):
            growth = normalize_amount(net_worth * monthly_rate) if monthly_rate else 0
            net_worth = net_worth + growth + contribution
            points.append(NetWorthPoint(
                month=offset + 1,
                label=self._label(offset),
                contribution=contribution,
                growth=growth,
                net_worth=net_worth,
            ))
        return points

from dataclasses import dataclass
from typing import Dict, Optional

STEP_INCOME = "income"
STEP_DEDUCTION = "deduction"
STEP_CHECKPOINT = "checkpoint"


@dataclass(frozen=True)
class CalculatedStep:
    """One row of the computed waterfall.

    `remaining` is the running balance after this step is applied; for
    income and checkpoint rows it equals `value`.
    """
    name: str
    value: int
    kind: str
    level: int
    remaining: int
    category_kind: Optional[str] = None
    breakdown: Optional[Dict[str, int]] = None

    @property
    def is_deduction(self) -> bool:
        return self.kind == STEP_DEDUCTION

    @property
    def is_negative(self) -> bool:
        return self.remaining < 0

    def to_dict(self) -> dict:
        result = {
            'name': self.name,
            'value': self.value,
            'kind': self.kind,
            'level': self.level,
            'remaining': self.remaining,
        }
        if self.category_kind is not None:
            result['categoryKind'] = self.category_kind
        if self.breakdown is not None:
            result['breakdown'] = dict(self.breakdown)
        return result

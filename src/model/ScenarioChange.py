from dataclasses import dataclass
from typing import Optional

from model.money import normalize_amount

RECURRING = "recurring"
ONE_TIME = "one_time"
RECURRENCES = (RECURRING, ONE_TIME)


@dataclass(frozen=True)
class ScenarioChange:
    """A proposed what-if adjustment.

    `delta` (cents) is added to the target: monthly income when
    `step_name` is "Monthly Income", otherwise the breakdown item
    `item_name` of the named step.
    """
    step_name: str
    delta: int
    item_name: Optional[str] = None
    recurrence: str = RECURRING
    description: str = ""

    def __post_init__(self):
        if self.recurrence not in RECURRENCES:
            raise ValueError(f"Unknown recurrence '{self.recurrence}' (expected one of {RECURRENCES})")
        if not self.step_name:
            raise ValueError("Scenario change needs a step name")
        object.__setattr__(self, 'delta', normalize_amount(self.delta))

    @classmethod
    def from_dict(cls, raw: dict) -> 'ScenarioChange':
        if 'delta' not in raw:
            raise ValueError("Scenario change requires 'delta'")
        return cls(
            step_name=raw.get('stepName', raw.get('step_name', '')),
            item_name=raw.get('itemName', raw.get('item_name')),
            delta=raw['delta'],
            recurrence=raw.get('recurrence', raw.get('type', RECURRING)),
            description=raw.get('description', ''),
        )

    def to_dict(self) -> dict:
        return {
            'stepName': self.step_name,
            'itemName': self.item_name,
            'delta': self.delta,
            'recurrence': self.recurrence,
            'description': self.description,
        }

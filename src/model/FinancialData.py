"""Budget input model.

A budget is a monthly income plus a small tree of named flow steps. Leaf
steps hold a breakdown (item name -> cents); parent steps hold children.
The one-time spend bucket sits beside the tree and is not part of the
monthly waterfall.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from model.money import normalize_amount


BreakdownMap = Dict[str, int]

MONTHLY_INCOME = "Monthly Income"
ONE_TIME_SPEND = "one_time_spend"

KIND_INVESTMENT = "investment"
KIND_SPEND = "spend"
CATEGORY_KINDS = (KIND_INVESTMENT, KIND_SPEND)

# Top-level steps the waterfall pipeline reads, in pipeline order
TOP_LEVEL_STEPS = ("Total Income", "Takehome", "Free Cash", "Net Income")


class DuplicateStepError(ValueError):
    """Raised when two steps anywhere in the tree share a name."""


def _normalize_breakdown(breakdown: Dict[str, object], owner: str) -> BreakdownMap:
    if not isinstance(breakdown, dict):
        raise ValueError(f"Breakdown of '{owner}' must be an object")
    normalized = {}
    for item_name, amount in breakdown.items():
        if not isinstance(item_name, str) or not item_name:
            raise ValueError(f"Breakdown item names in '{owner}' must be non-empty strings")
        normalized[item_name] = normalize_amount(amount)
    return normalized


@dataclass
class FlowStep:
    """A node in the budget tree.

    `value` is a computed amount and is never read by the calculator; it is
    kept so documents round-trip. Exactly one of `breakdown` or `children`
    is meaningful for nodes the waterfall reads.
    """
    kind: str = KIND_SPEND
    breakdown: Optional[BreakdownMap] = None
    children: Optional[Dict[str, 'FlowStep']] = None
    value: Optional[int] = None

    def __post_init__(self):
        if self.kind not in CATEGORY_KINDS:
            raise ValueError(f"Unknown step kind '{self.kind}' (expected one of {CATEGORY_KINDS})")

    @property
    def total(self) -> int:
        """Sum of the breakdown, 0 for a step without one."""
        return sum(self.breakdown.values()) if self.breakdown else 0

    @classmethod
    def from_dict(cls, name: str, raw: dict) -> 'FlowStep':
        if not isinstance(raw, dict):
            raise ValueError(f"Step '{name}' must be an object")
        kind = raw.get('kind', raw.get('type', KIND_SPEND))
        breakdown = raw.get('breakdown')
        children = raw.get('children', raw.get('outflow'))
        value = raw.get('value')
        if children is not None and not isinstance(children, dict):
            raise ValueError(f"Children of step '{name}' must be an object")
        return cls(
            kind=kind,
            breakdown=_normalize_breakdown(breakdown, name) if breakdown is not None else None,
            children={child: cls.from_dict(child, body) for child, body in children.items()}
            if children is not None else None,
            # The original documents use the "[calculated]" placeholder
            value=normalize_amount(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else None,
        )

    def to_dict(self) -> dict:
        result: dict = {'kind': self.kind}
        if self.value is not None:
            result['value'] = self.value
        if self.breakdown is not None:
            result['breakdown'] = dict(self.breakdown)
        if self.children is not None:
            result['children'] = {name: child.to_dict() for name, child in self.children.items()}
        return result


@dataclass
class OneTimeSpend:
    """Bucket of one-off expenses shown next to the waterfall."""
    breakdown: BreakdownMap = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.breakdown.values())


def iter_steps(steps: Dict[str, FlowStep]) -> Iterator[Tuple[str, FlowStep]]:
    """Yield (name, step) for every node of the tree, depth first."""
    for name, step in steps.items():
        yield name, step
        if step.children:
            yield from iter_steps(step.children)


def build_step_index(steps: Dict[str, FlowStep]) -> Dict[str, FlowStep]:
    """Map every step name in the tree to its node.

    Raises:
        DuplicateStepError: if a name appears more than once
    """
    index: Dict[str, FlowStep] = {}
    for name, step in iter_steps(steps):
        if name in index:
            raise DuplicateStepError(f"Step name '{name}' appears more than once in the budget")
        if name in (MONTHLY_INCOME, ONE_TIME_SPEND):
            raise DuplicateStepError(f"Step name '{name}' is reserved")
        index[name] = step
    return index


@dataclass
class FinancialData:
    """Complete budget document.

    All amounts are integer cents. The step index is rebuilt on
    construction, so a FinancialData with ambiguous step names cannot exist.
    """
    monthly_income: int
    one_time_spend: OneTimeSpend = field(default_factory=OneTimeSpend)
    steps: Dict[str, FlowStep] = field(default_factory=dict)
    _index: Dict[str, FlowStep] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.monthly_income = normalize_amount(self.monthly_income)
        self._index = build_step_index(self.steps)

    def find_step(self, name: str) -> Optional[FlowStep]:
        """Look up a step anywhere in the tree by name."""
        return self._index.get(name)

    def breakdown_for(self, step_name: str) -> Optional[BreakdownMap]:
        """Return the live breakdown for a step name, or None.

        `one_time_spend` addresses the one-time bucket. Steps without a
        breakdown (parents) return None.
        """
        if step_name == ONE_TIME_SPEND:
            return self.one_time_spend.breakdown
        step = self.find_step(step_name)
        if step is None:
            return None
        return step.breakdown

    def step_names(self) -> list:
        """Names of all steps that carry a breakdown, in tree order."""
        return [name for name, step in iter_steps(self.steps) if step.breakdown is not None]

    @classmethod
    def from_dict(cls, raw: dict) -> 'FinancialData':
        """Build from a JSON document (camelCase or the original snake_case keys)."""
        if not isinstance(raw, dict):
            raise ValueError("Budget document must be an object")
        if 'monthlyIncome' in raw:
            income = raw['monthlyIncome']
        elif 'monthly_income' in raw:
            income = raw['monthly_income']
        else:
            raise ValueError("Budget document is missing 'monthlyIncome'")
        one_time = raw.get('oneTimeSpend', raw.get(ONE_TIME_SPEND)) or {}
        if not isinstance(one_time, dict):
            raise ValueError("'oneTimeSpend' must be an object")
        steps = raw.get('steps', {})
        if not isinstance(steps, dict):
            raise ValueError("'steps' must be an object")
        return cls(
            monthly_income=income,
            one_time_spend=OneTimeSpend(_normalize_breakdown(one_time.get('breakdown', {}), ONE_TIME_SPEND)),
            steps={name: FlowStep.from_dict(name, body) for name, body in steps.items()},
        )

    def to_dict(self) -> dict:
        return {
            'monthlyIncome': self.monthly_income,
            'oneTimeSpend': {'breakdown': dict(self.one_time_spend.breakdown)},
            'steps': {name: step.to_dict() for name, step in self.steps.items()},
        }

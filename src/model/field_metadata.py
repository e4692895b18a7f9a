"""Display metadata for waterfall steps.

Short names are used as row labels in compact tables and by the shell
'steps' command; descriptions explain what each stage of the waterfall
represents.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class FieldInfo:
    """Metadata for a single waterfall step."""
    short_name: str  # Compact label (unique, concise)
    description: str  # Full description of the step


STEP_METADATA: Dict[str, FieldInfo] = {
    # Income
    "Monthly Income": FieldInfo("Income", "Gross monthly income before any deduction"),

    # Total Income outflows
    "Pre-Tax Deductions": FieldInfo("Pre-Tax", "Deductions taken before tax (401k, HSA, ...)"),
    "Taxes": FieldInfo("Taxes", "Federal, state and other income taxes"),
    "Takehome": FieldInfo("Takehome", "Pay left after pre-tax deductions and taxes"),

    # Takehome outflows
    "Fixed Spend": FieldInfo("Fixed", "Recurring obligations: rent, utilities, insurance, loans"),
    "Free Cash": FieldInfo("Free Cash", "Cash left after fixed obligations"),

    # Free Cash outflows
    "Variable Spend": FieldInfo("Variable", "Discretionary spending: groceries, dining, entertainment"),
    "Net Income": FieldInfo("Net", "Cash left after all spending"),

    # Net Income outflows
    "Investments": FieldInfo("Invest", "Monthly contributions to investment accounts"),
    "Emergency Fund": FieldInfo("Emergency", "Monthly contribution to the emergency fund"),
    "True Surplus": FieldInfo("Surplus", "Unallocated cash; negative means the budget is infeasible"),

    # Outside the waterfall
    "one_time_spend": FieldInfo("One-Time", "One-off expenses tracked beside the monthly waterfall"),
}


def get_short_name(step_name: str) -> str:
    """Get the short name for a step, or the step name if not found."""
    info = STEP_METADATA.get(step_name)
    return info.short_name if info else step_name


def get_description(step_name: str) -> str:
    """Get the description for a step, or empty string if not found."""
    info = STEP_METADATA.get(step_name)
    return info.description if info else ""


def get_field_info(step_name: str) -> FieldInfo | None:
    """Get the full FieldInfo for a step, or None if not found."""
    return STEP_METADATA.get(step_name)

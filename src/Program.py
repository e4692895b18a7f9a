import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(__file__))

from budget_loader import load_budget_or_default
from calc.waterfall_calculator import WaterfallCalculator, IncompleteBudgetError
from render.renderers import ProjectionRenderer, RENDERER_REGISTRY
from settings import SettingsError, configure_logging, load_settings
from state.financial_state import FinancialState


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Budget waterfall calculator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  Waterfall   Print the waterfall of deductions and checkpoints (default)
  Breakdown   Print line items for every category
  Scenario    Print the pending scenario (none for a freshly loaded budget)
  History     Print undo/redo history
  Projection  Print projected net worth from monthly investments

Examples:
  python src/Program.py
  python src/Program.py starter
  python src/Program.py starter --mode Breakdown
  python src/Program.py starter --mode Projection --months 24
        """
    )
    parser.add_argument('budget_name', nargs='?', help='Name of the budget (folder in budgets/); built-in seed when omitted')
    parser.add_argument('--mode', '-m',
                        choices=list(RENDERER_REGISTRY.keys()),
                        default='Waterfall',
                        help='Output mode: Waterfall (default), Breakdown, Scenario, History or Projection')
    parser.add_argument('--months',
                        type=int,
                        default=12,
                        help='Months to project in Projection mode (default 12)')

    args = parser.parse_args(argv)
    if args.months < 0:
        parser.error("--months cannot be negative")

    try:
        settings = load_settings()
    except SettingsError as e:
        print(f"Error: {e}")
        sys.exit(1)
    configure_logging(settings.log_level)

    budget_name = args.budget_name or settings.default_budget
    try:
        data = load_budget_or_default(budget_name, settings.budgets_dir)
    except FileNotFoundError as e:
        print(str(e))
        sys.exit(1)
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error loading budget: {e}")
        sys.exit(1)

    calculator = WaterfallCalculator(strict=settings.strict_stages)
    try:
        state = FinancialState.create(data, calculator=calculator, history_limit=settings.history_limit)
    except IncompleteBudgetError as e:
        print(f"Error: {e}")
        sys.exit(1)

    label = budget_name or 'default'
    if args.mode == 'Projection':
        renderer = ProjectionRenderer(budget_name=label, months=args.months)
    else:
        renderer = RENDERER_REGISTRY[args.mode](budget_name=label)
    renderer.render(state)


if __name__ == '__main__':
    main()

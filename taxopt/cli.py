"""CLI for running the tax engine from a terminal.

Usage:
    python -m taxopt.cli tax --income 50000 --state CA
    python -m taxopt.cli gains --amount 25000 --base-income 75000 --state CA --type short_term
    python -m taxopt.cli roth --income 75000 --amount 50000 --state NY --horizon 20
    python -m taxopt.cli optimize --income 60000 --traditional 250000 --gains 40000 --state CA --risk 4
    python -m taxopt.cli optimize ... --json
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from taxopt.config import settings
from taxopt.engine.capital_gains import compute_capital_gains_tax
from taxopt.engine.federal import federal_tax
from taxopt.engine.money import format_currency, format_percentage
from taxopt.engine.optimizer import optimize_tax_strategy
from taxopt.engine.roth_conversion import compute_roth_conversion_tax
from taxopt.engine.state import compute_state_tax, state_effective_rate, state_marginal_rate
from taxopt.errors import InputValidationError
from taxopt.models.optimization import OptimizationConfig, OptimizationResult
from taxopt.models.schemas import CombinedOptimizationSchema
from taxopt.models.tax import TaxCalculationResult


# ── Helpers ──────────────────────────────────────────────────────────────────

def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")


def _header(title: str) -> None:
    print(f"\n{'=' * 64}")
    print(f"  {title}")
    print(f"{'=' * 64}")


def _row(label: str, value: str) -> None:
    print(f"  {label + ':':<22}{value}")


def print_tax_impact(impact: TaxCalculationResult) -> None:
    _row("Federal impact", format_currency(impact.federal_tax_impact))
    _row("State impact", format_currency(impact.state_tax_impact))
    _row("Effective rate", format_percentage(impact.effective_tax_rate))
    _row("Marginal rate", format_percentage(impact.marginal_tax_rate))
    _row("Taxable income", format_currency(impact.taxable_income))


def print_optimization(title: str, result: OptimizationResult) -> None:
    _header(title)
    _row("Recommended amount", format_currency(result.recommended_amount))
    _row("NPV savings", format_currency(result.npv_savings))
    _row("Potential savings", format_currency(result.potential_savings))
    print_tax_impact(result.tax_impact)
    if result.alternative_scenarios:
        print(f"\n  {'Amount':>14}  {'NPV':>14}")
        for sample in result.alternative_scenarios[:10]:
            print(f"  {format_currency(sample.amount):>14}  {format_currency(sample.savings):>14}")
        if len(result.alternative_scenarios) > 10:
            print(f"  ... {len(result.alternative_scenarios) - 10} more")


# ── Subcommands ──────────────────────────────────────────────────────────────

def cmd_tax(args: argparse.Namespace) -> None:
    fed = federal_tax(args.income, args.filing_status, args.tax_year)
    state = compute_state_tax(args.income, args.state, args.filing_status)

    _header(f"Tax on {format_currency(args.income)} ({args.filing_status.upper()}, {args.state.upper()})")
    _row("Federal tax", format_currency(fed.tax))
    _row("Federal marginal", format_percentage(fed.marginal_rate))
    _row("Federal effective", format_percentage(fed.effective_rate))
    _row("State tax", format_currency(state))
    _row("State marginal", format_percentage(state_marginal_rate(args.income, args.state, args.filing_status)))
    _row("State effective", format_percentage(state_effective_rate(args.income, args.state, args.filing_status)))
    print()


def cmd_gains(args: argparse.Namespace) -> None:
    impact = compute_capital_gains_tax(
        args.amount, args.type, args.base_income, args.filing_status, args.state,
        tax_year=args.tax_year,
    )
    _header(f"Realizing {format_currency(args.amount)} of {args.type.lower()} gains")
    print_tax_impact(impact)
    print()


def cmd_roth(args: argparse.Namespace) -> None:
    result = compute_roth_conversion_tax(
        args.income, args.amount, args.filing_status, args.state,
        args.horizon, args.discount_rate, tax_year=args.tax_year,
    )
    _header(f"Converting {format_currency(args.amount)} to Roth")
    print_tax_impact(result)
    _row("Future value", format_currency(result.future_value))
    _row("NPV", format_currency(result.npv))
    print()


def cmd_optimize(args: argparse.Namespace) -> None:
    config = OptimizationConfig(
        time_horizon_years=args.horizon,
        discount_rate=args.discount_rate,
        risk_tolerance=args.risk,
        state_tax_weight=args.state_weight,
    )
    result = optimize_tax_strategy(
        args.income, args.traditional, args.gains, args.filing_status, args.state, config,
        tax_year=args.tax_year,
    )

    if args.json:
        print(CombinedOptimizationSchema.from_result(result).model_dump_json(indent=2))
        return

    print_optimization("Roth Conversion", result.roth_conversion)
    print_optimization("Capital Gains Realization", result.capital_gains)
    _header("Combined")
    _row("Combined NPV", format_currency(result.combined_savings))
    _row("Risk-adjusted score", format_currency(result.risk_adjusted_score))
    print()


# ── Entry point ──────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Roth conversion and capital gains tax optimizer")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--state", required=True, help="Two-letter state code")
    common.add_argument("--filing-status", default="SINGLE",
                        help="SINGLE, MARRIED_JOINT or HEAD_OF_HOUSEHOLD (default: SINGLE)")
    common.add_argument("--tax-year", type=int, default=None,
                        help=f"Federal table year (default: {settings.default_tax_year})")

    p = sub.add_parser("tax", parents=[common], help="Federal and state tax on an income")
    p.add_argument("--income", type=_decimal, required=True)
    p.set_defaults(func=cmd_tax)

    p = sub.add_parser("gains", parents=[common], help="Tax impact of realizing capital gains")
    p.add_argument("--amount", type=_decimal, required=True)
    p.add_argument("--base-income", type=_decimal, required=True)
    p.add_argument("--type", default="LONG_TERM", help="LONG_TERM or SHORT_TERM (default: LONG_TERM)")
    p.set_defaults(func=cmd_gains)

    horizon = argparse.ArgumentParser(add_help=False)
    horizon.add_argument("--horizon", type=int, default=20, help="Years (default: 20)")
    horizon.add_argument("--discount-rate", type=_decimal, default=Decimal("0.07"),
                         help="Discount rate (default: 0.07)")

    p = sub.add_parser("roth", parents=[common, horizon], help="Tax impact of a Roth conversion")
    p.add_argument("--income", type=_decimal, required=True)
    p.add_argument("--amount", type=_decimal, required=True)
    p.set_defaults(func=cmd_roth)

    p = sub.add_parser("optimize", parents=[common, horizon], help="Combined optimization")
    p.add_argument("--income", type=_decimal, default=Decimal("0"))
    p.add_argument("--traditional", type=_decimal, required=True, help="Traditional IRA balance")
    p.add_argument("--gains", type=_decimal, default=Decimal("0"), help="Available capital gains")
    p.add_argument("--risk", type=int, default=3, help="Risk tolerance 1-5 (default: 3)")
    p.add_argument("--state-weight", type=_decimal, default=Decimal("1.0"),
                   help="State tax weight 0-1 (default: 1.0)")
    p.add_argument("--json", action="store_true", help="Print the result as JSON")
    p.set_defaults(func=cmd_optimize)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (InputValidationError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

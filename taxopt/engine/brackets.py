"""Progressive bracket tax computation.

Pure functions: Decimal in, dataclass out. No I/O.
"""

from decimal import Decimal
from typing import Sequence

from taxopt.engine.money import ZERO, round_money, round_rate
from taxopt.engine.validation import require_amount
from taxopt.errors import (
    BracketCoverageGap,
    BracketTableInvalid,
    BracketTableMissing,
    RateOutOfRange,
)
from taxopt.models.tax import UNBOUNDED, BracketTaxResult, FilingStatus, TaxBracket


def build_bracket_table(
    thresholds: Sequence[Decimal],
    rates: Sequence[Decimal],
    filing_status: FilingStatus | None,
    tax_year: int,
) -> tuple[TaxBracket, ...]:
    """Build a gapless table from upper thresholds.

    thresholds holds one upper bound per bracket except the last, which is unbounded,
    so len(rates) == len(thresholds) + 1.
    """
    if len(rates) != len(thresholds) + 1:
        raise BracketTableInvalid(
            f"Expected {len(thresholds) + 1} rates for {len(thresholds)} thresholds, got {len(rates)}"
        )

    brackets = []
    lower = ZERO
    for rate, upper in zip(rates, [*thresholds, UNBOUNDED]):
        brackets.append(
            TaxBracket(
                rate=rate,
                minimum_income=lower,
                maximum_income=upper,
                filing_status=filing_status,
                tax_year=tax_year,
            )
        )
        lower = upper
    table = tuple(brackets)
    validate_bracket_table(table)
    return table


def validate_bracket_table(brackets: Sequence[TaxBracket]) -> None:
    """Table must be ordered, gapless, non-overlapping and cover [0, inf)."""
    if not brackets:
        raise BracketTableMissing("Bracket table is empty")

    for bracket in brackets:
        if not Decimal("0") <= bracket.rate <= Decimal("1"):
            raise BracketTableInvalid(f"Bracket rate {bracket.rate} is outside [0, 1]")
        if bracket.maximum_income <= bracket.minimum_income:
            raise BracketTableInvalid(
                f"Bracket maximum {bracket.maximum_income} does not exceed minimum {bracket.minimum_income}"
            )

    if brackets[0].minimum_income != 0:
        raise BracketCoverageGap(
            f"Table starts at {brackets[0].minimum_income}, incomes below it are not covered"
        )
    for prev, nxt in zip(brackets, brackets[1:]):
        if nxt.minimum_income != prev.maximum_income:
            kind = "gap" if nxt.minimum_income > prev.maximum_income else "overlap"
            raise BracketCoverageGap(
                f"Bracket {kind} between {prev.maximum_income} and {nxt.minimum_income}"
            )
    if not brackets[-1].is_unbounded:
        raise BracketCoverageGap(
            f"Top bracket ends at {brackets[-1].maximum_income}; it must be unbounded"
        )


def marginal_rate_for(income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Rate of the bracket containing income, found by scan."""
    for bracket in brackets:
        if bracket.contains(income):
            return bracket.rate
    raise BracketCoverageGap(f"No applicable tax bracket found for income level {income}")


def compute_bracket_tax(income: Decimal, brackets: Sequence[TaxBracket]) -> BracketTaxResult:
    """Tax owed on income under a progressive bracket table.

    The tax is accumulated unrounded and quantized to cents on return;
    the effective rate is kept to four places.
    """
    income = require_amount(income, "income")
    validate_bracket_table(brackets)

    total_tax = ZERO
    remaining = income
    for bracket in brackets:
        if remaining <= 0:
            break
        portion = min(remaining, bracket.width)
        total_tax += portion * bracket.rate
        remaining -= portion

    marginal_rate = marginal_rate_for(income, brackets)
    effective_rate = round_rate(total_tax / income) if income > 0 else ZERO
    if not ZERO <= effective_rate <= Decimal("1"):
        raise RateOutOfRange(
            f"Calculated effective rate {effective_rate} is outside [0, 1]; bracket table is malformed"
        )

    return BracketTaxResult(
        tax=round_money(total_tax),
        marginal_rate=marginal_rate,
        effective_rate=effective_rate,
        brackets=tuple(brackets),
    )

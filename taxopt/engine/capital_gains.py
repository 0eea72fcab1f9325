"""Marginal federal + state tax impact of realizing capital gains.

The impact is tax(base + gains) - tax(base) on the ordinary tables, which
captures bracket crossings. Long- and short-term gains flow through the same
differencing; CapitalGainsType is validated and only selects state
capital-gains metadata.

Pure functions. No I/O.
"""

import logging
from decimal import Decimal
from typing import Sequence

from taxopt.config import settings
from taxopt.engine.cache import CalculationCache
from taxopt.engine.federal import federal_tax
from taxopt.engine.money import ZERO, round_money, round_rate
from taxopt.engine.state import compute_state_tax, get_state_profile
from taxopt.engine.validation import coerce_filing_status, coerce_gains_type, require_amount
from taxopt.models.tax import (
    CapitalGainsType,
    FilingStatus,
    GainsRealizationResult,
    TaxCalculationResult,
)

logger = logging.getLogger(__name__)


def compute_capital_gains_tax(
    gains_amount: Decimal,
    gains_type: CapitalGainsType | str,
    base_income: Decimal,
    filing_status: FilingStatus | str,
    state_code: str,
    *,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> TaxCalculationResult:
    """Tax impact of realizing gains_amount on top of base_income.

    Args:
        gains_amount: Gains to realize, finite and >= 0
        gains_type: SHORT_TERM or LONG_TERM
        base_income: Taxable income before the gains
        filing_status: Federal table selector
        state_code: Two-letter state code
        tax_year: Federal table year (default from settings)
        cache: Optional memo for the underlying bracket computations
    """
    gains = require_amount(gains_amount, "gains_amount")
    coerce_gains_type(gains_type)
    base = require_amount(base_income, "base_income")
    status = coerce_filing_status(filing_status)
    get_state_profile(state_code)

    total_income = base + gains

    base_federal = federal_tax(base, status, tax_year, cache=cache)
    total_federal = federal_tax(total_income, status, tax_year, cache=cache)
    federal_impact = total_federal.tax - base_federal.tax

    base_state = compute_state_tax(base, state_code, status, cache=cache)
    total_state = compute_state_tax(total_income, state_code, status, cache=cache)
    state_impact = total_state - base_state

    total_impact = federal_impact + state_impact
    effective_rate = round_rate(total_impact / gains) if gains > 0 else ZERO

    return TaxCalculationResult(
        federal_tax_impact=round_money(federal_impact),
        state_tax_impact=round_money(state_impact),
        effective_tax_rate=effective_rate,
        marginal_tax_rate=round_rate(total_federal.marginal_rate),
        taxable_income=round_money(total_income),
        applicable_brackets=total_federal.brackets,
    )


def compute_optimal_gains_realization(
    total_available: Decimal,
    base_income: Decimal,
    filing_status: FilingStatus | str,
    state_code: str,
    *,
    thresholds: Sequence[Decimal] | None = None,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> GainsRealizationResult:
    """Pick the realization amount with the lowest effective rate from a coarse grid.

    Candidates are min(threshold, total_available) for each threshold
    (low/medium/high from settings unless supplied) plus the full amount.
    This is a grid heuristic, not a search; pass denser thresholds for more
    granularity.
    """
    total = require_amount(total_available, "total_available")
    grid = settings.gains_thresholds if thresholds is None else thresholds
    candidates = [min(require_amount(t, "threshold"), total) for t in grid] + [total]

    def impact_of(amount: Decimal) -> TaxCalculationResult:
        return compute_capital_gains_tax(
            amount,
            CapitalGainsType.LONG_TERM,
            base_income,
            filing_status,
            state_code,
            tax_year=tax_year,
            cache=cache,
        )

    best_amount = candidates[0]
    best_impact = impact_of(best_amount)
    for amount in candidates[1:]:
        impact = impact_of(amount)
        if impact.effective_tax_rate < best_impact.effective_tax_rate:
            best_amount, best_impact = amount, impact

    full_impact = impact_of(total)
    rate_gap = full_impact.effective_tax_rate - best_impact.effective_tax_rate
    potential_savings = rate_gap * best_amount if rate_gap > 0 else ZERO

    logger.debug(
        "Gains grid %s -> %s at %s effective",
        [str(c) for c in candidates],
        best_amount,
        best_impact.effective_tax_rate,
    )

    return GainsRealizationResult(
        recommended_amount=round_money(best_amount),
        tax_impact=best_impact,
        potential_savings=round_money(potential_savings),
    )

"""Roth conversion tax impact and conversion-amount search.

Pure functions. No I/O.
"""

import logging
from decimal import Decimal

from taxopt.config import settings
from taxopt.engine.cache import CalculationCache
from taxopt.engine.federal import federal_tax
from taxopt.engine.money import round_dollars, round_money, round_rate
from taxopt.engine.npv import (
    future_value,
    present_value,
    risk_weighted_npv,
    weighted_marginal_rate,
    weighted_tax_impact,
)
from taxopt.engine.state import compute_state_tax, get_state_profile, state_marginal_rate
from taxopt.engine.validation import (
    coerce_filing_status,
    require_amount,
    require_discount_rate,
    require_risk_tolerance,
    require_state_tax_weight,
    require_time_horizon,
)
from taxopt.errors import InvalidAmount, SearchExhausted
from taxopt.models.optimization import OptimizationResult, ScenarioSample
from taxopt.models.tax import FilingStatus, RothConversionTaxResult

logger = logging.getLogger(__name__)

DEFAULT_TIME_HORIZON = 20
DEFAULT_DISCOUNT_RATE = Decimal("0.07")
DEFAULT_RISK_TOLERANCE = 3
DEFAULT_STATE_TAX_WEIGHT = Decimal("1.0")


def compute_roth_conversion_tax(
    current_income: Decimal,
    conversion_amount: Decimal,
    filing_status: FilingStatus | str,
    state_code: str,
    time_horizon_years: int = DEFAULT_TIME_HORIZON,
    discount_rate: Decimal = DEFAULT_DISCOUNT_RATE,
    *,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> RothConversionTaxResult:
    """Tax impact of converting conversion_amount, plus its future value and NPV.

    conversion_amount must sit inside [settings.min_conversion, settings.max_conversion];
    amounts outside the band are rejected, not clamped.
    """
    income = require_amount(current_income, "current_income")
    amount = require_amount(
        conversion_amount,
        "conversion_amount",
        minimum=settings.min_conversion,
        maximum=settings.max_conversion,
    )
    status = coerce_filing_status(filing_status)
    get_state_profile(state_code)
    years = require_time_horizon(time_horizon_years)
    rate = require_discount_rate(discount_rate)

    total_income = income + amount

    baseline_federal = federal_tax(income, status, tax_year, cache=cache)
    converted_federal = federal_tax(total_income, status, tax_year, cache=cache)
    federal_impact = converted_federal.tax - baseline_federal.tax

    baseline_state = compute_state_tax(income, state_code, status, cache=cache)
    converted_state = compute_state_tax(total_income, state_code, status, cache=cache)
    state_impact = converted_state - baseline_state

    fv = future_value(amount, years)
    npv = present_value(fv, years, rate)

    return RothConversionTaxResult(
        federal_tax_impact=round_money(federal_impact),
        state_tax_impact=round_money(state_impact),
        effective_tax_rate=round_rate((federal_impact + state_impact) / amount),
        marginal_tax_rate=round_rate(converted_federal.marginal_rate),
        taxable_income=round_money(total_income),
        applicable_brackets=converted_federal.brackets,
        future_value=round_money(fv),
        npv=round_money(npv),
    )


def optimize_roth_conversion(
    current_income: Decimal,
    traditional_balance: Decimal,
    filing_status: FilingStatus | str,
    state_code: str,
    time_horizon_years: int = DEFAULT_TIME_HORIZON,
    discount_rate: Decimal = DEFAULT_DISCOUNT_RATE,
    risk_tolerance: int = DEFAULT_RISK_TOLERANCE,
    state_tax_weight: Decimal = DEFAULT_STATE_TAX_WEIGHT,
    *,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> OptimizationResult:
    """Binary search for the conversion amount with the best risk-weighted NPV.

    The search moves up one step while the risk- and state-weighted marginal
    rate at the midpoint is below settings.baseline_discount_rate, and down
    otherwise. NPV is not monotonic in the midpoints, so the best candidate
    seen is kept rather than the last one. This is a bounded local heuristic,
    not a guaranteed global optimum.
    """
    income = require_amount(current_income, "current_income")
    balance = require_amount(traditional_balance, "traditional_balance")
    status = coerce_filing_status(filing_status)
    years = require_time_horizon(time_horizon_years)
    rate = require_discount_rate(discount_rate)
    rt = require_risk_tolerance(risk_tolerance)
    weight = require_state_tax_weight(state_tax_weight)

    if balance < settings.min_conversion:
        raise InvalidAmount(
            "traditional_balance",
            balance,
            minimum=settings.min_conversion,
            message=(
                f"Traditional balance {balance} is below the minimum conversion of "
                f"{settings.min_conversion}"
            ),
        )

    step = settings.optimization_step
    left = settings.min_conversion
    right = min(balance, settings.max_conversion)

    best: tuple[Decimal, Decimal, RothConversionTaxResult] | None = None
    samples: list[ScenarioSample] = []

    while left <= right:
        mid = round_dollars((left + right) / 2)
        result = compute_roth_conversion_tax(
            income, mid, status, state_code, years, rate, tax_year=tax_year, cache=cache
        )
        weighted = weighted_tax_impact(
            result.federal_tax_impact, result.state_tax_impact, weight, rt
        )
        score = risk_weighted_npv(mid, weighted, years, rate)
        samples.append(ScenarioSample(amount=mid, savings=round_money(score)))

        if best is None or score > best[1]:
            best = (mid, score, result)

        marginal = weighted_marginal_rate(
            result.marginal_tax_rate,
            state_marginal_rate(income + mid, state_code, status),
            weight,
            rt,
        )
        logger.debug(
            "Roth search [%s, %s] mid=%s npv=%s weighted_marginal=%s",
            left, right, mid, round_money(score), marginal,
        )
        if marginal < settings.baseline_discount_rate:
            left = mid + step
        else:
            right = mid - step

    if best is None:
        raise SearchExhausted("Failed to find optimal conversion amount")

    amount, score, result = best
    return OptimizationResult(
        recommended_amount=amount,
        tax_impact=result,
        npv_savings=round_money(score),
        potential_savings=round_money(
            future_value(amount, years) - result.federal_tax_impact - result.state_tax_impact
        ),
        alternative_scenarios=tuple(sorted(samples, key=lambda s: s.amount)),
    )

"""Combined Roth conversion + capital gains optimization.

Roth conversion is optimized first against current income; capital gains are
then swept on top of income + the recommended conversion, since each
strategy moves the taxable base the other works against.

Pure functions. No I/O.
"""

import logging
from decimal import Decimal

from taxopt.config import settings
from taxopt.engine.cache import CalculationCache, CallMemo, cache_key, memoize
from taxopt.engine.capital_gains import compute_capital_gains_tax
from taxopt.engine.money import ZERO, round_money
from taxopt.engine.npv import risk_weighted_npv, weighted_marginal_rate, weighted_tax_impact
from taxopt.engine.roth_conversion import optimize_roth_conversion
from taxopt.engine.state import get_state_profile, state_marginal_rate
from taxopt.engine.validation import coerce_filing_status, require_amount
from taxopt.errors import SearchExhausted
from taxopt.models.optimization import (
    CalculationParameters,
    CombinedOptimizationResult,
    OptimizationConfig,
    OptimizationResult,
    ScenarioSample,
)
from taxopt.models.tax import CapitalGainsType, FilingStatus, TaxCalculationResult

logger = logging.getLogger(__name__)


def optimize_capital_gains(
    base_income: Decimal,
    available_gains: Decimal,
    filing_status: FilingStatus | str,
    state_code: str,
    config: OptimizationConfig,
    *,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> OptimizationResult:
    """Step-sized sweep over long-term gains realization amounts.

    Candidates run from one step up to available_gains and are scored with
    the same risk-weighted NPV as the Roth search. The Roth conversion band
    does not cap the sweep. It stops after the first candidate whose weighted marginal rate
    reaches the baseline rate; the best candidate seen is returned.

    Raises:
        SearchExhausted: the range holds no candidate (available < one step).
    """
    base = require_amount(base_income, "base_income")
    available = require_amount(available_gains, "available_gains")
    status = coerce_filing_status(filing_status)

    step = settings.optimization_step
    years = config.time_horizon_years
    rate = config.discount_rate
    rt = config.risk_tolerance
    weight = config.state_tax_weight

    def impact_of(amount: Decimal) -> TaxCalculationResult:
        return compute_capital_gains_tax(
            amount,
            CapitalGainsType.LONG_TERM,
            base,
            status,
            state_code,
            tax_year=tax_year,
            cache=cache,
        )

    best: tuple[Decimal, Decimal, TaxCalculationResult] | None = None
    samples: list[ScenarioSample] = []

    amount = step
    while amount <= available:
        impact = impact_of(amount)
        weighted = weighted_tax_impact(
            impact.federal_tax_impact, impact.state_tax_impact, weight, rt
        )
        score = risk_weighted_npv(amount, weighted, years, rate)
        samples.append(ScenarioSample(amount=amount, savings=round_money(score)))

        if best is None or score > best[1]:
            best = (amount, score, impact)

        marginal = weighted_marginal_rate(
            impact.marginal_tax_rate,
            state_marginal_rate(base + amount, state_code, status),
            weight,
            rt,
        )
        if marginal >= settings.baseline_discount_rate:
            logger.debug("Gains sweep stopped at %s (weighted marginal %s)", amount, marginal)
            break
        amount += step

    if best is None:
        raise SearchExhausted(
            f"No capital gains candidate between {step} and {available} could be evaluated"
        )

    chosen, score, impact = best
    full_impact = impact_of(available)
    rate_gap = full_impact.effective_tax_rate - impact.effective_tax_rate
    potential_savings = rate_gap * chosen if rate_gap > 0 else ZERO

    return OptimizationResult(
        recommended_amount=chosen,
        tax_impact=impact,
        npv_savings=round_money(score),
        potential_savings=round_money(potential_savings),
        alternative_scenarios=tuple(samples),
    )


def _no_realization(
    base_income: Decimal,
    filing_status: FilingStatus,
    state_code: str,
    tax_year: int | None,
    cache: CalculationCache | None,
) -> OptimizationResult:
    impact = compute_capital_gains_tax(
        ZERO,
        CapitalGainsType.LONG_TERM,
        base_income,
        filing_status,
        state_code,
        tax_year=tax_year,
        cache=cache,
    )
    return OptimizationResult(
        recommended_amount=ZERO,
        tax_impact=impact,
        npv_savings=round_money(ZERO),
        potential_savings=round_money(ZERO),
    )


def optimize_tax_strategy(
    current_income: Decimal,
    traditional_balance: Decimal,
    capital_gains: Decimal,
    filing_status: FilingStatus | str,
    state_code: str,
    config: OptimizationConfig | None = None,
    *,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> CombinedOptimizationResult:
    """Optimize Roth conversion and capital gains realization together.

    Args:
        current_income: Taxable income before either strategy
        traditional_balance: Traditional IRA balance available to convert
        capital_gains: Unrealized gains available to harvest
        filing_status: Federal table selector
        state_code: Two-letter state code
        config: Horizon, discount rate, risk tolerance, state weight (defaults if None)
        tax_year: Federal table year (default from settings)
        cache: Caller-owned cache. When given, the combined result is memoized
            too; when None a CallMemo scoped to this call is used.
    """
    income = require_amount(current_income, "current_income")
    balance = require_amount(traditional_balance, "traditional_balance")
    gains = require_amount(capital_gains, "capital_gains")
    status = coerce_filing_status(filing_status)
    profile = get_state_profile(state_code)
    config = config or OptimizationConfig()

    def run(memo: CalculationCache) -> CombinedOptimizationResult:
        roth = optimize_roth_conversion(
            income,
            balance,
            status,
            profile.state_code,
            config.time_horizon_years,
            config.discount_rate,
            config.risk_tolerance,
            config.state_tax_weight,
            tax_year=tax_year,
            cache=memo,
        )

        adjusted_income = income + roth.recommended_amount
        if gains < settings.optimization_step:
            logger.info(
                "Capital gains %s below the %s step; no realization recommended",
                gains, settings.optimization_step,
            )
            harvest = _no_realization(adjusted_income, status, profile.state_code, tax_year, memo)
        else:
            harvest = optimize_capital_gains(
                adjusted_income,
                gains,
                status,
                profile.state_code,
                config,
                tax_year=tax_year,
                cache=memo,
            )

        combined = roth.npv_savings + harvest.npv_savings
        result = CombinedOptimizationResult(
            roth_conversion=roth,
            capital_gains=harvest,
            combined_savings=combined,
            risk_adjusted_score=round_money(combined * config.risk_factor),
        )
        logger.info(
            "Optimized %s/%s: convert %s, realize %s, combined NPV %s",
            status.value, profile.state_code,
            roth.recommended_amount, harvest.recommended_amount, combined,
        )
        return result

    if cache is None:
        return run(CallMemo())

    key = cache_key(
        "strategy",
        income.normalize(),
        balance.normalize(),
        gains.normalize(),
        status.value,
        profile.state_code,
        tax_year if tax_year is not None else settings.default_tax_year,
        config.model_dump_json(),
    )
    return memoize(cache, key, lambda: run(cache))


def optimize_calculation_parameters(
    params: CalculationParameters,
    config: OptimizationConfig | None = None,
    *,
    current_income: Decimal = ZERO,
    tax_year: int | None = None,
    cache: CalculationCache | None = None,
) -> CombinedOptimizationResult:
    """Run the combined optimization for the orchestration layer's parameters.

    Current income defaults to zero: the parameters carry balances, not wages.
    """
    return optimize_tax_strategy(
        current_income,
        params.traditional_ira_balance,
        params.capital_gains,
        params.filing_status,
        params.tax_state,
        config,
        tax_year=tax_year,
        cache=cache,
    )

"""Time value and risk weighting shared by both optimizers.

Pure functions. Results are unrounded; callers quantize at their boundary.
"""

from decimal import Decimal

from taxopt.config import settings
from taxopt.engine.validation import require_risk_tolerance


def future_value(amount: Decimal, years: int, growth_rate: Decimal | None = None) -> Decimal:
    """amount * (1 + g)^years. g defaults to the assumed growth rate, not the discount rate."""
    g = settings.assumed_growth_rate if growth_rate is None else growth_rate
    return amount * (1 + g) ** years


def present_value(amount: Decimal, years: int, discount_rate: Decimal) -> Decimal:
    return amount / (1 + discount_rate) ** years


def risk_factor(risk_tolerance: int) -> Decimal:
    """Map risk tolerance 1..5 to 1.0..0.2. Higher tolerance discounts the tax penalty."""
    rt = require_risk_tolerance(risk_tolerance)
    return Decimal(6 - rt) / 5


def weighted_tax_impact(
    federal_impact: Decimal,
    state_impact: Decimal,
    state_tax_weight: Decimal,
    risk_tolerance: int,
) -> Decimal:
    return (federal_impact + state_impact * state_tax_weight) * risk_factor(risk_tolerance)


def weighted_marginal_rate(
    federal_rate: Decimal,
    state_rate: Decimal,
    state_tax_weight: Decimal,
    risk_tolerance: int,
) -> Decimal:
    return (federal_rate + state_rate * state_tax_weight) * risk_factor(risk_tolerance)


def risk_weighted_npv(
    amount: Decimal,
    weighted_impact: Decimal,
    years: int,
    discount_rate: Decimal,
) -> Decimal:
    """Present value of the grown amount net of its risk-weighted tax cost."""
    return present_value(future_value(amount, years) - weighted_impact, years, discount_rate)

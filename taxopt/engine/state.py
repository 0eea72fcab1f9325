"""State income tax adapter.

Wraps the bracket calculator with state metadata: no-income-tax states,
fixed special deductions taken off the computed tax, and capital-gains rules.

Pure functions. No I/O.
"""

import logging
from decimal import Decimal

from taxopt.engine.brackets import compute_bracket_tax, marginal_rate_for
from taxopt.engine.cache import CalculationCache, cache_key, memoize
from taxopt.engine.money import ZERO, round_money, round_rate
from taxopt.engine.tables import STATE_TAX_PROFILES
from taxopt.engine.validation import coerce_filing_status, coerce_gains_type, require_amount
from taxopt.errors import UnknownJurisdiction
from taxopt.models.tax import CapitalGainsType, FilingStatus, StateTaxProfile

logger = logging.getLogger(__name__)

NO_TAX = Decimal("0.00")


def get_state_profile(state_code: str) -> StateTaxProfile:
    """Look up a state by two-letter code. Unknown codes are an error, never 'no tax'."""
    if not isinstance(state_code, str) or len(state_code.strip()) != 2:
        raise UnknownJurisdiction(state_code)
    profile = STATE_TAX_PROFILES.get(state_code.strip().upper())
    if profile is None:
        raise UnknownJurisdiction(state_code)
    return profile


def _state_tax(income: Decimal, profile: StateTaxProfile) -> Decimal:
    if not profile.has_income_tax:
        return NO_TAX
    bracket_tax = compute_bracket_tax(income, profile.brackets).tax
    # Deductions reduce tax, never below zero
    return round_money(max(ZERO, bracket_tax - profile.total_special_deductions))


def compute_state_tax(
    income: Decimal,
    state_code: str,
    filing_status: FilingStatus | str,
    *,
    cache: CalculationCache | None = None,
) -> Decimal:
    """Total state tax liability on income, rounded to cents."""
    income = require_amount(income, "income")
    status = coerce_filing_status(filing_status)
    profile = get_state_profile(state_code)

    key = cache_key("state", income.normalize(), profile.state_code, status.value)
    return memoize(cache, key, lambda: _state_tax(income, profile))


def state_marginal_rate(
    income: Decimal,
    state_code: str,
    filing_status: FilingStatus | str,
) -> Decimal:
    income = require_amount(income, "income")
    coerce_filing_status(filing_status)
    profile = get_state_profile(state_code)
    if not profile.has_income_tax:
        return ZERO
    return marginal_rate_for(income, profile.brackets)


def state_effective_rate(
    income: Decimal,
    state_code: str,
    filing_status: FilingStatus | str,
    *,
    cache: CalculationCache | None = None,
) -> Decimal:
    tax = compute_state_tax(income, state_code, filing_status, cache=cache)
    income = require_amount(income, "income")
    if income == 0:
        return ZERO
    return round_rate(tax / income)


def state_capital_gains_rate(
    state_code: str,
    gains_type: CapitalGainsType | str,
) -> Decimal:
    """State capital-gains rate for a gains type, from the profile's rules."""
    profile = get_state_profile(state_code)
    kind = coerce_gains_type(gains_type)
    rate = profile.capital_gains_rules.rate_for(kind)
    logger.debug("%s %s capital gains rate: %s", profile.state_code, kind.value, rate)
    return rate

"""Federal income tax on the published bracket tables.

Pure functions. No I/O.
"""

from decimal import Decimal

from taxopt.config import settings
from taxopt.engine.brackets import compute_bracket_tax
from taxopt.engine.cache import CalculationCache, cache_key, memoize
from taxopt.engine.tables import get_federal_table
from taxopt.engine.validation import coerce_filing_status, require_amount
from taxopt.models.tax import BracketTaxResult, FilingStatus


def federal_tax(
    income: Decimal,
    filing_status: FilingStatus | str,
    tax_year: int | None = None,
    *,
    cache: CalculationCache | None = None,
) -> BracketTaxResult:
    """Federal tax, marginal rate and effective rate for a taxable income.

    Args:
        income: Taxable income, finite and >= 0
        filing_status: Selects the bracket table
        tax_year: Table year; defaults to settings.default_tax_year
        cache: Optional memo for repeated identical calls
    """
    income = require_amount(income, "income")
    status = coerce_filing_status(filing_status)
    year = tax_year if tax_year is not None else settings.default_tax_year
    table = get_federal_table(status, year)

    key = cache_key("federal", income.normalize(), status.value, year)
    return memoize(cache, key, lambda: compute_bracket_tax(income, table))


def federal_marginal_rate(
    income: Decimal,
    filing_status: FilingStatus | str,
    tax_year: int | None = None,
    *,
    cache: CalculationCache | None = None,
) -> Decimal:
    return federal_tax(income, filing_status, tax_year, cache=cache).marginal_rate


def federal_effective_rate(
    income: Decimal,
    filing_status: FilingStatus | str,
    tax_year: int | None = None,
    *,
    cache: CalculationCache | None = None,
) -> Decimal:
    return federal_tax(income, filing_status, tax_year, cache=cache).effective_rate

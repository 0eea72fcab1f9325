"""Published bracket tables.

Federal thresholds per IRS revenue procedures (2022: Rev. Proc. 2021-45,
2023: 2022-38, 2024: 2023-34, 2025: 2024-40). State schedules are the 2024
single-filer schedules and apply to every filing status.
"""

from decimal import Decimal

from taxopt.engine.brackets import build_bracket_table
from taxopt.errors import BracketTableMissing
from taxopt.models.tax import (
    CapitalGainsRules,
    FilingStatus,
    StateTaxProfile,
    TaxBracket,
)


def _d(*values: str) -> list[Decimal]:
    return [Decimal(v) for v in values]


FEDERAL_RATES = _d("0.10", "0.12", "0.22", "0.24", "0.32", "0.35", "0.37")

# Upper bound of every bracket but the top one
FEDERAL_THRESHOLDS: dict[int, dict[FilingStatus, list[Decimal]]] = {
    2022: {
        FilingStatus.SINGLE: _d("10275", "41775", "89075", "170050", "215950", "539900"),
        FilingStatus.MARRIED_JOINT: _d("20550", "83550", "178150", "340100", "431900", "647850"),
        FilingStatus.HEAD_OF_HOUSEHOLD: _d("14650", "55900", "89050", "170050", "215950", "539900"),
    },
    2023: {
        FilingStatus.SINGLE: _d("11000", "44725", "95375", "182100", "231250", "578125"),
        FilingStatus.MARRIED_JOINT: _d("22000", "89450", "190750", "364200", "462500", "693750"),
        FilingStatus.HEAD_OF_HOUSEHOLD: _d("15700", "59850", "95350", "182100", "231250", "578100"),
    },
    2024: {
        FilingStatus.SINGLE: _d("11600", "47150", "100525", "191950", "243725", "609350"),
        FilingStatus.MARRIED_JOINT: _d("23200", "94300", "201050", "383900", "487450", "731200"),
        FilingStatus.HEAD_OF_HOUSEHOLD: _d("16550", "63100", "100500", "191950", "243700", "609350"),
    },
    2025: {
        FilingStatus.SINGLE: _d("11925", "48475", "103350", "197300", "250525", "626350"),
        FilingStatus.MARRIED_JOINT: _d("23850", "96950", "206700", "394600", "501050", "751600"),
        FilingStatus.HEAD_OF_HOUSEHOLD: _d("17000", "64850", "103350", "197300", "250500", "626350"),
    },
}

FEDERAL_BRACKETS: dict[tuple[FilingStatus, int], tuple[TaxBracket, ...]] = {
    (status, year): build_bracket_table(thresholds, FEDERAL_RATES, status, year)
    for year, by_status in FEDERAL_THRESHOLDS.items()
    for status, thresholds in by_status.items()
}


def get_federal_table(filing_status: FilingStatus, tax_year: int) -> tuple[TaxBracket, ...]:
    table = FEDERAL_BRACKETS.get((filing_status, tax_year))
    if not table:
        raise BracketTableMissing(
            f"Tax brackets not found for filing status {filing_status.value} in {tax_year}"
        )
    return table


# ---- States ----

STATE_TAX_YEAR = 2024


def _graduated(
    code: str,
    thresholds: list[Decimal],
    rates: list[Decimal],
    special_deductions: dict[str, Decimal] | None = None,
    capital_gains_rules: CapitalGainsRules | None = None,
) -> StateTaxProfile:
    return StateTaxProfile(
        state_code=code,
        has_income_tax=True,
        brackets=build_bracket_table(thresholds, rates, None, STATE_TAX_YEAR),
        special_deductions=special_deductions or {},
        capital_gains_rules=capital_gains_rules
        or CapitalGainsRules(long_term_rate=rates[-1], short_term_rate=rates[-1]),
    )


def _flat(code: str, rate: str, **kwargs) -> StateTaxProfile:
    return _graduated(code, [], _d(rate), **kwargs)


def _no_income_tax(code: str, capital_gains_rules: CapitalGainsRules | None = None) -> StateTaxProfile:
    return StateTaxProfile(
        state_code=code,
        has_income_tax=False,
        capital_gains_rules=capital_gains_rules or CapitalGainsRules(),
    )


STATE_TAX_PROFILES: dict[str, StateTaxProfile] = {
    profile.state_code: profile
    for profile in [
        _graduated(
            "CA",
            _d("10756", "25499", "40245", "55866", "70606", "360659", "432787", "721314", "1000000"),
            # Top rate includes the 1% Mental Health Services surcharge
            _d("0.01", "0.02", "0.04", "0.06", "0.08", "0.093", "0.103", "0.113", "0.123", "0.133"),
            special_deductions={"personal_exemption_credit": Decimal("149")},
        ),
        _graduated(
            "NY",
            _d("8500", "11700", "13900", "80650", "215400", "1077550", "5000000", "25000000"),
            _d("0.04", "0.045", "0.0525", "0.055", "0.06", "0.0685", "0.0965", "0.103", "0.109"),
        ),
        _graduated(
            "MA",
            _d("1053750"),
            # 4% surtax on income above the millionaire threshold
            _d("0.05", "0.09"),
            capital_gains_rules=CapitalGainsRules(
                long_term_rate=Decimal("0.05"), short_term_rate=Decimal("0.085")
            ),
        ),
        _flat("AZ", "0.025"),
        _flat("CO", "0.0425"),
        _flat("IL", "0.0495"),
        _flat("NC", "0.045"),
        _flat("PA", "0.0307"),
        _no_income_tax("AK"),
        _no_income_tax("FL"),
        _no_income_tax("NH"),
        _no_income_tax("NV"),
        _no_income_tax("SD"),
        _no_income_tax("TN"),
        _no_income_tax("TX"),
        _no_income_tax(
            "WA",
            CapitalGainsRules(
                long_term_rate=Decimal("0.07"),
                short_term_rate=Decimal("0"),
                special_exemptions={"standard_deduction": Decimal("262000")},
            ),
        ),
        _no_income_tax("WY"),
    ]
}

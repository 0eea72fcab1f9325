from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from taxopt.errors import RateOutOfRange

UNBOUNDED = Decimal("Infinity")


class FilingStatus(Enum):
    SINGLE = "SINGLE"
    MARRIED_JOINT = "MARRIED_JOINT"
    HEAD_OF_HOUSEHOLD = "HEAD_OF_HOUSEHOLD"


class CapitalGainsType(Enum):
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"


@dataclass(frozen=True)
class TaxBracket:
    rate: Decimal  # e.g. Decimal("0.22")
    minimum_income: Decimal
    maximum_income: Decimal = UNBOUNDED
    filing_status: FilingStatus | None = None  # None = state table, every status
    tax_year: int = 2024

    @property
    def width(self) -> Decimal:
        return self.maximum_income - self.minimum_income

    @property
    def is_unbounded(self) -> bool:
        return self.maximum_income.is_infinite()

    def contains(self, income: Decimal) -> bool:
        """Half-open [minimum, maximum): a boundary income takes the next bracket's rate."""
        return self.minimum_income <= income < self.maximum_income


@dataclass(frozen=True)
class CapitalGainsRules:
    long_term_rate: Decimal = Decimal("0")
    short_term_rate: Decimal = Decimal("0")
    special_exemptions: dict[str, Decimal] = field(default_factory=dict)

    def rate_for(self, gains_type: CapitalGainsType) -> Decimal:
        if gains_type is CapitalGainsType.LONG_TERM:
            return self.long_term_rate
        return self.short_term_rate


@dataclass(frozen=True)
class StateTaxProfile:
    state_code: str
    has_income_tax: bool
    brackets: tuple[TaxBracket, ...] = ()
    special_deductions: dict[str, Decimal] = field(default_factory=dict)
    capital_gains_rules: CapitalGainsRules = field(default_factory=CapitalGainsRules)

    @property
    def total_special_deductions(self) -> Decimal:
        return sum(self.special_deductions.values(), Decimal("0"))


@dataclass(frozen=True)
class BracketTaxResult:
    tax: Decimal
    marginal_rate: Decimal
    effective_rate: Decimal
    brackets: tuple[TaxBracket, ...]


def _check_rate(name: str, rate: Decimal) -> None:
    if not (Decimal("0") <= rate <= Decimal("1")):
        raise RateOutOfRange(f"{name} {rate} is outside [0, 1]")


@dataclass(frozen=True)
class TaxCalculationResult:
    """Snapshot of a marginal tax impact. Never mutated after construction."""
    federal_tax_impact: Decimal
    state_tax_impact: Decimal
    effective_tax_rate: Decimal
    marginal_tax_rate: Decimal
    taxable_income: Decimal
    applicable_brackets: tuple[TaxBracket, ...]

    def __post_init__(self) -> None:
        _check_rate("effective_tax_rate", self.effective_tax_rate)
        _check_rate("marginal_tax_rate", self.marginal_tax_rate)

    @property
    def total_tax_impact(self) -> Decimal:
        return self.federal_tax_impact + self.state_tax_impact


@dataclass(frozen=True)
class RothConversionTaxResult(TaxCalculationResult):
    future_value: Decimal
    npv: Decimal


@dataclass(frozen=True)
class GainsRealizationResult:
    recommended_amount: Decimal
    tax_impact: TaxCalculationResult
    potential_savings: Decimal

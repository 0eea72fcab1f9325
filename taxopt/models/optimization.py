from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from taxopt.config import settings
from taxopt.models.tax import FilingStatus, TaxCalculationResult


# ---- Caller-supplied inputs ----

class OptimizationConfig(BaseModel):
    """Optimization knobs supplied by the caller. The engine never mutates it."""
    model_config = {"frozen": True}

    time_horizon_years: int = Field(20, ge=1, le=40, description="Analysis period in years")
    discount_rate: Decimal = Field(
        Decimal("0.07"), ge=Decimal("0.01"), le=Decimal("0.15"),
        description="Rate used to bring future values back to present value",
    )
    risk_tolerance: int = Field(3, ge=1, le=5, description="1 = conservative, 5 = aggressive")
    state_tax_weight: Decimal = Field(
        Decimal("1.0"), ge=Decimal("0"), le=Decimal("1"),
        description="Share of the state tax impact counted against a strategy",
    )

    @property
    def risk_factor(self) -> Decimal:
        return Decimal(6 - self.risk_tolerance) / 5


class CalculationParameters(BaseModel):
    """Account balances and jurisdiction from the orchestration layer."""
    model_config = {"frozen": True}

    # Below the minimum conversion the Roth search has no candidate
    traditional_ira_balance: Decimal = Field(
        ..., ge=settings.min_conversion, le=5_000_000, decimal_places=2,
    )
    roth_ira_balance: Decimal = Field(..., ge=0, le=5_000_000, decimal_places=2)
    capital_gains: Decimal = Field(..., ge=0, le=5_000_000, decimal_places=2)
    tax_state: str = Field(..., pattern=r"^[A-Z]{2}$", description="Two-letter state code")
    filing_status: FilingStatus

    @field_validator("tax_state", mode="before")
    @classmethod
    def _upper_state(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v


# ---- Engine outputs ----

@dataclass(frozen=True)
class ScenarioSample:
    amount: Decimal
    savings: Decimal


@dataclass(frozen=True)
class OptimizationResult:
    recommended_amount: Decimal
    tax_impact: TaxCalculationResult
    npv_savings: Decimal
    potential_savings: Decimal
    alternative_scenarios: tuple[ScenarioSample, ...] = ()


@dataclass(frozen=True)
class CombinedOptimizationResult:
    roth_conversion: OptimizationResult
    capital_gains: OptimizationResult
    combined_savings: Decimal  # Sum of both NPVs
    risk_adjusted_score: Decimal

"""Pydantic schemas for the serialized engine output.

The orchestration layer persists and returns these. They carry no request
IDs, status codes or persistence fields; the caller adds those.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from taxopt.models.optimization import CombinedOptimizationResult, OptimizationResult
from taxopt.models.tax import RothConversionTaxResult, TaxBracket, TaxCalculationResult


class BracketSchema(BaseModel):
    rate: Decimal
    minimum_income: Decimal
    maximum_income: Decimal | None = Field(None, description="None for the unbounded top bracket")

    @classmethod
    def from_bracket(cls, bracket: TaxBracket) -> "BracketSchema":
        return cls(
            rate=bracket.rate,
            minimum_income=bracket.minimum_income,
            maximum_income=None if bracket.is_unbounded else bracket.maximum_income,
        )


class TaxImpactSchema(BaseModel):
    federal_tax_impact: Decimal
    state_tax_impact: Decimal
    effective_tax_rate: Decimal
    marginal_tax_rate: Decimal
    taxable_income: Decimal
    applicable_brackets: list[BracketSchema]

    # Roth conversions only
    future_value: Decimal | None = None
    npv: Decimal | None = None

    @classmethod
    def from_result(cls, result: TaxCalculationResult) -> "TaxImpactSchema":
        extra = {}
        if isinstance(result, RothConversionTaxResult):
            extra = {"future_value": result.future_value, "npv": result.npv}
        return cls(
            federal_tax_impact=result.federal_tax_impact,
            state_tax_impact=result.state_tax_impact,
            effective_tax_rate=result.effective_tax_rate,
            marginal_tax_rate=result.marginal_tax_rate,
            taxable_income=result.taxable_income,
            applicable_brackets=[BracketSchema.from_bracket(b) for b in result.applicable_brackets],
            **extra,
        )


class ScenarioSchema(BaseModel):
    amount: Decimal
    savings: Decimal


class OptimizationResultSchema(BaseModel):
    recommended_amount: Decimal
    tax_impact: TaxImpactSchema
    npv_savings: Decimal
    potential_savings: Decimal
    alternative_scenarios: list[ScenarioSchema] = []

    @classmethod
    def from_result(cls, result: OptimizationResult) -> "OptimizationResultSchema":
        return cls(
            recommended_amount=result.recommended_amount,
            tax_impact=TaxImpactSchema.from_result(result.tax_impact),
            npv_savings=result.npv_savings,
            potential_savings=result.potential_savings,
            alternative_scenarios=[
                ScenarioSchema(amount=s.amount, savings=s.savings)
                for s in result.alternative_scenarios
            ],
        )


class CombinedOptimizationSchema(BaseModel):
    roth_conversion: OptimizationResultSchema
    capital_gains: OptimizationResultSchema
    combined_savings: Decimal
    risk_adjusted_score: Decimal

    @classmethod
    def from_result(cls, result: CombinedOptimizationResult) -> "CombinedOptimizationSchema":
        return cls(
            roth_conversion=OptimizationResultSchema.from_result(result.roth_conversion),
            capital_gains=OptimizationResultSchema.from_result(result.capital_gains),
            combined_savings=result.combined_savings,
            risk_adjusted_score=result.risk_adjusted_score,
        )

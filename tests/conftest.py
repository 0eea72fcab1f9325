"""Canonical test fixtures used across all engine tests.

Fixture household: single filer, $50K taxable income, $200K traditional IRA,
$40K unrealized long-term gains, 2024 federal tables.
"""

import pytest
from decimal import Decimal

from taxopt.engine.tables import get_federal_table
from taxopt.models.optimization import CalculationParameters, OptimizationConfig
from taxopt.models.tax import FilingStatus


@pytest.fixture
def single_2024():
    return get_federal_table(FilingStatus.SINGLE, 2024)


@pytest.fixture
def default_config() -> OptimizationConfig:
    """Horizon 20, discount 7%, risk tolerance 3, full state weight."""
    return OptimizationConfig()


@pytest.fixture
def conservative_config() -> OptimizationConfig:
    return OptimizationConfig(risk_tolerance=1)


@pytest.fixture
def aggressive_config() -> OptimizationConfig:
    return OptimizationConfig(risk_tolerance=5)


@pytest.fixture
def canonical_household() -> dict:
    return {
        "current_income": Decimal("50000"),
        "traditional_balance": Decimal("200000"),
        "capital_gains": Decimal("40000"),
        "filing_status": FilingStatus.SINGLE,
        "state_code": "TX",
    }


@pytest.fixture
def california_parameters() -> CalculationParameters:
    return CalculationParameters(
        traditional_ira_balance=Decimal("150000.00"),
        roth_ira_balance=Decimal("25000.00"),
        capital_gains=Decimal("30000.00"),
        tax_state="ca",
        filing_status=FilingStatus.SINGLE,
    )

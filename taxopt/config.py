from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "TAXOPT_"}

    # Bracket tables
    default_tax_year: int = 2024

    # Roth conversion band (conversions outside it are not optimized)
    min_conversion: Decimal = Decimal("1000")
    max_conversion: Decimal = Decimal("1000000")
    optimization_step: Decimal = Decimal("1000")

    # Converted principal compounds at this rate regardless of the caller's discount rate
    assumed_growth_rate: Decimal = Decimal("0.07")
    # Search moves toward larger amounts while the weighted marginal rate is below this
    baseline_discount_rate: Decimal = Decimal("0.07")

    # Coarse candidate grid for gains realization
    gains_threshold_low: Decimal = Decimal("10000")
    gains_threshold_medium: Decimal = Decimal("50000")
    gains_threshold_high: Decimal = Decimal("100000")

    # Shared cache
    cache_ttl_seconds: int = 3600
    cache_maxsize: int = 1024

    # App
    log_level: str = "INFO"

    @property
    def gains_thresholds(self) -> tuple[Decimal, Decimal, Decimal]:
        return (
            self.gains_threshold_low,
            self.gains_threshold_medium,
            self.gains_threshold_high,
        )


settings = Settings()

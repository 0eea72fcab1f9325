from decimal import Decimal

from taxopt.config import Settings, settings


class TestSettings:
    def test_defaults(self):
        assert settings.default_tax_year == 2024
        assert settings.min_conversion == Decimal("1000")
        assert settings.max_conversion == Decimal("1000000")
        assert settings.gains_thresholds == (Decimal("10000"), Decimal("50000"), Decimal("100000"))

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TAXOPT_DEFAULT_TAX_YEAR", "2022")
        monkeypatch.setenv("TAXOPT_GAINS_THRESHOLD_LOW", "5000")
        custom = Settings()
        assert custom.default_tax_year == 2022
        assert custom.gains_threshold_low == Decimal("5000")

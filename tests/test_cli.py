import json

import pytest
from decimal import Decimal

from taxopt.cli import main


class TestTaxCommand:
    def test_prints_federal_and_state(self, capsys):
        assert main(["tax", "--income", "50000", "--state", "CA"]) == 0
        out = capsys.readouterr().out
        assert "$6,053.00" in out
        assert "$1,428.56" in out
        assert "22.00%" in out

    def test_tax_year(self, capsys):
        assert main(["tax", "--income", "50000", "--state", "TX", "--tax-year", "2022"]) == 0
        assert "$6,617.00" in capsys.readouterr().out

    def test_unknown_state(self, capsys):
        assert main(["tax", "--income", "50000", "--state", "ZZ"]) == 2
        assert "Tax information not found for state: ZZ" in capsys.readouterr().err

    def test_negative_income(self, capsys):
        assert main(["tax", "--income", "-5", "--state", "TX"]) == 2
        assert "income" in capsys.readouterr().err

    def test_not_a_number(self):
        with pytest.raises(SystemExit):
            main(["tax", "--income", "lots", "--state", "TX"])


class TestOtherCommands:
    def test_gains(self, capsys):
        assert main(["gains", "--amount", "25000", "--base-income", "50000", "--state", "CA"]) == 0
        out = capsys.readouterr().out
        assert "$5,500.00" in out
        assert "$1,939.80" in out

    def test_roth(self, capsys):
        assert main(["roth", "--income", "50000", "--amount", "25000", "--state", "TX"]) == 0
        out = capsys.readouterr().out
        assert "$96,742.11" in out
        assert "$25,000.00" in out

    def test_roth_outside_band(self, capsys):
        assert main(["roth", "--income", "50000", "--amount", "500", "--state", "TX"]) == 2
        assert "conversion_amount" in capsys.readouterr().err


class TestOptimizeCommand:
    def test_table_output(self, capsys):
        code = main([
            "optimize", "--income", "50000", "--traditional", "200000",
            "--gains", "40000", "--state", "TX", "--risk", "1",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "Roth Conversion" in out
        assert "$100,500.00" in out
        assert "Risk-adjusted score" in out

    def test_json_output(self, capsys):
        code = main([
            "optimize", "--income", "50000", "--traditional", "200000",
            "--gains", "40000", "--state", "TX", "--risk", "1", "--json",
        ])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert Decimal(payload["roth_conversion"]["recommended_amount"]) == Decimal("100500")
        assert Decimal(payload["capital_gains"]["recommended_amount"]) == Decimal("1000")

    def test_risk_out_of_range(self, capsys):
        code = main(["optimize", "--traditional", "200000", "--state", "TX", "--risk", "9"])
        assert code == 2
        assert "risk_tolerance" in capsys.readouterr().err

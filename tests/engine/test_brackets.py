import pytest
from decimal import Decimal

from taxopt.engine.brackets import (
    build_bracket_table,
    compute_bracket_tax,
    marginal_rate_for,
    validate_bracket_table,
)
from taxopt.engine.federal import federal_effective_rate, federal_marginal_rate, federal_tax
from taxopt.engine.tables import FEDERAL_BRACKETS, get_federal_table
from taxopt.errors import (
    BracketCoverageGap,
    BracketTableInvalid,
    BracketTableMissing,
    InvalidAmount,
    UnknownFilingStatus,
)
from taxopt.models.tax import UNBOUNDED, FilingStatus, TaxBracket


class TestFederalScenarios:
    def test_single_50k_2024(self):
        result = federal_tax(Decimal("50000"), FilingStatus.SINGLE, 2024)
        # 11600 * 10% + 35550 * 12% + 2850 * 22%
        assert result.tax == Decimal("6053.00")
        assert result.marginal_rate == Decimal("0.22")
        assert result.effective_rate == Decimal("0.1211")

    def test_single_50k_2022(self):
        """10275 * 10% + 31500 * 12% + 8225 * 22% = 6617."""
        result = federal_tax(Decimal("50000"), FilingStatus.SINGLE, 2022)
        assert result.tax == Decimal("6617.00")
        assert result.marginal_rate == Decimal("0.22")
        assert result.effective_rate == Decimal("0.1323")

    def test_exactly_at_first_boundary(self):
        """At 11,600 the whole income is in the 10% bracket; the next dollar is taxed at 12%."""
        result = federal_tax(Decimal("11600"), FilingStatus.SINGLE)
        assert result.tax == Decimal("1160.00")
        assert result.marginal_rate == Decimal("0.12")

    def test_high_income(self):
        result = federal_tax(Decimal("1000000"), FilingStatus.SINGLE)
        assert result.marginal_rate == Decimal("0.37")
        assert result.tax == Decimal("328187.75")

    def test_married_joint(self):
        result = federal_tax(Decimal("100000"), FilingStatus.MARRIED_JOINT)
        assert result.tax == Decimal("12106.00")
        assert result.marginal_rate == Decimal("0.22")

    def test_head_of_household(self):
        result = federal_tax(Decimal("75000"), FilingStatus.HEAD_OF_HOUSEHOLD)
        assert result.tax == Decimal("9859.00")
        assert result.marginal_rate == Decimal("0.22")

    def test_zero_income(self):
        result = federal_tax(Decimal("0"), FilingStatus.SINGLE)
        assert result.tax == Decimal("0")
        assert result.effective_rate == Decimal("0")
        assert result.marginal_rate == Decimal("0.10")

    def test_status_accepts_wire_name(self):
        assert federal_tax(Decimal("50000"), "married_joint") == federal_tax(
            Decimal("50000"), FilingStatus.MARRIED_JOINT
        )

    def test_accessors(self):
        assert federal_marginal_rate(Decimal("150000"), FilingStatus.SINGLE) == Decimal("0.24")
        assert federal_effective_rate(Decimal("50000"), FilingStatus.SINGLE) == Decimal("0.1211")


class TestPrecision:
    def test_tax_has_two_places(self):
        result = federal_tax(Decimal("123456.78"), FilingStatus.SINGLE)
        assert result.tax.as_tuple().exponent == -2

    def test_effective_rate_has_four_places(self):
        result = federal_tax(Decimal("123456.78"), FilingStatus.SINGLE)
        assert result.effective_rate.as_tuple().exponent == -4

    def test_cents_do_not_drift(self):
        """Fractional-cent incomes are accumulated exactly and rounded once."""
        result = federal_tax(Decimal("47150.01"), FilingStatus.SINGLE)
        # 5426.00 + 0.01 * 22% = 5426.0022
        assert result.tax == Decimal("5426.00")

    def test_idempotent(self):
        first = federal_tax(Decimal("87654.32"), FilingStatus.HEAD_OF_HOUSEHOLD)
        second = federal_tax(Decimal("87654.32"), FilingStatus.HEAD_OF_HOUSEHOLD)
        assert first == second


class TestBracketProperties:
    def test_monotonic(self, single_2024):
        previous = Decimal("0")
        for income in range(0, 800000, 7919):
            tax = compute_bracket_tax(Decimal(income), single_2024).tax
            assert tax >= previous
            previous = tax

    def test_continuous_at_boundaries(self, single_2024):
        for lower, upper in zip(single_2024, single_2024[1:]):
            boundary = lower.maximum_income
            below = compute_bracket_tax(boundary - Decimal("0.01"), single_2024).tax
            at = compute_bracket_tax(boundary, single_2024).tax
            assert at == compute_bracket_tax(upper.minimum_income, single_2024).tax
            assert Decimal("0") <= at - below <= Decimal("0.01")

    def test_slope_is_marginal_rate(self, single_2024):
        income = Decimal("150000")
        delta = Decimal("1000")
        low = compute_bracket_tax(income, single_2024)
        high = compute_bracket_tax(income + delta, single_2024)
        assert high.tax - low.tax == delta * low.marginal_rate

    def test_every_published_table_is_valid(self):
        for table in FEDERAL_BRACKETS.values():
            validate_bracket_table(table)
            assert table[-1].rate == Decimal("0.37")

    def test_exactly_one_bracket_matches(self, single_2024):
        for income in [Decimal("0"), Decimal("11600"), Decimal("11600.01"), Decimal("609350"), Decimal("1E+9")]:
            assert sum(1 for b in single_2024 if b.contains(income)) == 1


class TestValidation:
    def test_negative_income(self):
        with pytest.raises(InvalidAmount, match="income"):
            federal_tax(Decimal("-1000"), FilingStatus.SINGLE)

    @pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), "abc"])
    def test_non_finite_income(self, value):
        with pytest.raises(InvalidAmount):
            federal_tax(value, FilingStatus.SINGLE)

    def test_unknown_filing_status(self):
        with pytest.raises(UnknownFilingStatus):
            federal_tax(Decimal("50000"), "MARRIED_SEPARATE")

    def test_missing_year(self):
        with pytest.raises(BracketTableMissing, match="1999"):
            get_federal_table(FilingStatus.SINGLE, 1999)


class TestTableConstruction:
    def test_build_is_gapless(self):
        table = build_bracket_table(
            [Decimal("100"), Decimal("200")],
            [Decimal("0.1"), Decimal("0.2"), Decimal("0.3")],
            None,
            2024,
        )
        assert [b.minimum_income for b in table] == [Decimal("0"), Decimal("100"), Decimal("200")]
        assert table[-1].maximum_income == UNBOUNDED

    def test_rate_count_mismatch(self):
        with pytest.raises(BracketTableInvalid):
            build_bracket_table([Decimal("100")], [Decimal("0.1")], None, 2024)

    def test_empty_table(self):
        with pytest.raises(BracketTableMissing):
            validate_bracket_table([])

    def test_gap(self):
        """The $1 gaps of a min = previous max + 1 layout are rejected."""
        table = [
            TaxBracket(Decimal("0.10"), Decimal("0"), Decimal("11600")),
            TaxBracket(Decimal("0.12"), Decimal("11601")),
        ]
        with pytest.raises(BracketCoverageGap, match="gap"):
            validate_bracket_table(table)

    def test_overlap(self):
        table = [
            TaxBracket(Decimal("0.10"), Decimal("0"), Decimal("11600")),
            TaxBracket(Decimal("0.12"), Decimal("10000")),
        ]
        with pytest.raises(BracketCoverageGap, match="overlap"):
            validate_bracket_table(table)

    def test_bounded_top(self):
        table = [TaxBracket(Decimal("0.10"), Decimal("0"), Decimal("11600"))]
        with pytest.raises(BracketCoverageGap, match="unbounded"):
            validate_bracket_table(table)

    def test_not_starting_at_zero(self):
        with pytest.raises(BracketCoverageGap):
            validate_bracket_table([TaxBracket(Decimal("0.10"), Decimal("500"))])

    def test_rate_out_of_range(self):
        with pytest.raises(BracketTableInvalid):
            validate_bracket_table([TaxBracket(Decimal("1.5"), Decimal("0"))])

    def test_marginal_scan_reports_gap(self):
        table = [TaxBracket(Decimal("0.10"), Decimal("0"), Decimal("100"))]
        with pytest.raises(BracketCoverageGap):
            marginal_rate_for(Decimal("150"), table)

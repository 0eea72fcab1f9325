import pytest
from decimal import Decimal

from taxopt.engine.brackets import validate_bracket_table
from taxopt.engine.cache import CallMemo
from taxopt.engine.state import (
    compute_state_tax,
    get_state_profile,
    state_capital_gains_rate,
    state_effective_rate,
    state_marginal_rate,
)
from taxopt.engine.tables import STATE_TAX_PROFILES
from taxopt.errors import InvalidAmount, UnknownGainsType, UnknownJurisdiction
from taxopt.models.tax import CapitalGainsType, FilingStatus


class TestStateLookup:
    def test_code_is_normalized(self):
        assert get_state_profile(" ca ").state_code == "CA"

    @pytest.mark.parametrize("code", ["ZZ", "CAL", "", "C"])
    def test_unknown_code(self, code):
        with pytest.raises(UnknownJurisdiction, match="Tax information not found"):
            get_state_profile(code)

    def test_non_string_code(self):
        with pytest.raises(UnknownJurisdiction):
            get_state_profile(None)

    def test_unknown_is_never_no_tax(self):
        with pytest.raises(UnknownJurisdiction):
            compute_state_tax(Decimal("50000"), "XX", FilingStatus.SINGLE)

    def test_every_income_tax_table_is_valid(self):
        for profile in STATE_TAX_PROFILES.values():
            if profile.has_income_tax:
                validate_bracket_table(profile.brackets)
            else:
                assert profile.brackets == ()


class TestStateTax:
    def test_california_graduated(self):
        # 3517.362 on the schedule, less the 149 exemption credit
        assert compute_state_tax(Decimal("75000"), "CA", FilingStatus.SINGLE) == Decimal("3368.36")

    def test_california_50k(self):
        assert compute_state_tax(Decimal("50000"), "CA", FilingStatus.SINGLE) == Decimal("1428.56")

    def test_deduction_floors_at_zero(self):
        """$100 of bracket tax against a $149 credit leaves nothing owed."""
        assert compute_state_tax(Decimal("10000"), "CA", FilingStatus.SINGLE) == Decimal("0.00")

    def test_new_york(self):
        assert compute_state_tax(Decimal("50000"), "NY", FilingStatus.SINGLE) == Decimal("2585.00")

    def test_flat_states(self):
        assert compute_state_tax(Decimal("50000"), "IL", FilingStatus.SINGLE) == Decimal("2475.00")
        assert compute_state_tax(Decimal("50000"), "PA", FilingStatus.SINGLE) == Decimal("1535.00")

    def test_massachusetts_below_surtax(self):
        assert compute_state_tax(Decimal("100000"), "MA", FilingStatus.SINGLE) == Decimal("5000.00")

    def test_massachusetts_above_surtax(self):
        # 1053750 * 5% + 946250 * 9%
        assert compute_state_tax(Decimal("2000000"), "MA", FilingStatus.SINGLE) == Decimal("137850.00")

    @pytest.mark.parametrize("code", ["TX", "FL", "WA", "NV"])
    def test_no_income_tax(self, code):
        assert compute_state_tax(Decimal("250000"), code, FilingStatus.SINGLE) == Decimal("0")

    def test_filing_status_does_not_change_state_schedule(self):
        single = compute_state_tax(Decimal("80000"), "NY", FilingStatus.SINGLE)
        joint = compute_state_tax(Decimal("80000"), "NY", "married_joint")
        assert single == joint

    def test_negative_income(self):
        with pytest.raises(InvalidAmount):
            compute_state_tax(Decimal("-1"), "CA", FilingStatus.SINGLE)

    def test_memoized(self):
        memo = CallMemo()
        first = compute_state_tax(Decimal("75000"), "CA", FilingStatus.SINGLE, cache=memo)
        second = compute_state_tax(Decimal("75000.00"), "ca", FilingStatus.SINGLE, cache=memo)
        assert first == second
        assert memo.hits == 1
        assert len(memo) == 1


class TestStateRates:
    def test_marginal(self):
        assert state_marginal_rate(Decimal("75000"), "CA", FilingStatus.SINGLE) == Decimal("0.093")

    def test_marginal_at_boundary_takes_upper_rate(self):
        assert state_marginal_rate(Decimal("70606"), "CA", FilingStatus.SINGLE) == Decimal("0.093")

    def test_marginal_no_tax_state(self):
        assert state_marginal_rate(Decimal("75000"), "TX", FilingStatus.SINGLE) == Decimal("0")

    def test_effective(self):
        assert state_effective_rate(Decimal("75000"), "CA", FilingStatus.SINGLE) == Decimal("0.0449")

    def test_effective_zero_income(self):
        assert state_effective_rate(Decimal("0"), "CA", FilingStatus.SINGLE) == Decimal("0")


class TestStateCapitalGains:
    def test_massachusetts_short_term(self):
        assert state_capital_gains_rate("MA", CapitalGainsType.SHORT_TERM) == Decimal("0.085")
        assert state_capital_gains_rate("MA", "long_term") == Decimal("0.05")

    def test_washington_excise(self):
        assert state_capital_gains_rate("WA", CapitalGainsType.LONG_TERM) == Decimal("0.07")
        profile = get_state_profile("WA")
        assert profile.capital_gains_rules.special_exemptions["standard_deduction"] == Decimal("262000")

    def test_defaults_to_top_rate(self):
        assert state_capital_gains_rate("CA", CapitalGainsType.LONG_TERM) == Decimal("0.133")

    def test_no_tax_state(self):
        assert state_capital_gains_rate("TX", CapitalGainsType.SHORT_TERM) == Decimal("0")

    def test_unknown_type(self):
        with pytest.raises(UnknownGainsType):
            state_capital_gains_rate("CA", "MEDIUM_TERM")

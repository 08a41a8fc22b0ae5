"""Tests for phase-boundary validation functions."""

from __future__ import annotations

from xray_src.core.contracts import (
    IssueSeverity,
    validate_breakdown_sums,
    validate_dimension_totals,
    validate_portfolio_weights,
)
from xray_src.models import Dimension
from tests.factories import make_security


class TestBreakdownSums:
    def test_complete_breakdown_passes(self) -> None:
        assert validate_breakdown_sums(make_security(countries={"Japan": 0.6, "China": 0.4})) == []

    def test_rounding_noise_is_tolerated(self) -> None:
        sec = make_security(countries={"Japan": 0.6, "China": 0.402})
        assert validate_breakdown_sums(sec) == []

    def test_sum_above_one_is_flagged_per_dimension(self) -> None:
        sec = make_security(countries={"Japan": 0.8, "China": 0.4}, sectors={"Energy": 1.1})

        issues = validate_breakdown_sums(sec)

        assert [i.code for i in issues] == ["BREAKDOWN_SUM_HIGH", "BREAKDOWN_SUM_HIGH"]
        assert issues[0].item == sec.isin
        assert issues[0].severity == IssueSeverity.HIGH


class TestDimensionTotals:
    def test_totals_at_or_below_one_pass(self) -> None:
        totals = {Dimension.COUNTRY: {"Japan": 0.5, "China": 0.5}, Dimension.SECTOR: {"Energy": 0.3}}
        assert validate_dimension_totals(totals) == []

    def test_total_above_one_is_critical(self) -> None:
        issues = validate_dimension_totals({Dimension.REGION: {"Europe": 1.01}})

        assert len(issues) == 1
        assert issues[0].code == "DIMENSION_TOTAL_HIGH"
        assert issues[0].item == "Region"
        assert issues[0].severity == IssueSeverity.CRITICAL


class TestPortfolioWeights:
    def test_exact_hundred_passes(self) -> None:
        assert validate_portfolio_weights({"A": 60.0, "B": 40.0}) == []

    def test_weight_above_hundred(self) -> None:
        codes = [i.code for i in validate_portfolio_weights({"A": 120.0})]
        assert codes == ["WEIGHT_ABOVE_100", "WEIGHT_TOTAL_NOT_100"]

    def test_total_off_hundred(self) -> None:
        issues = validate_portfolio_weights({"A": 50.0, "B": 30.0})
        assert [i.code for i in issues] == ["WEIGHT_TOTAL_NOT_100"]
        assert issues[0].actual == "80"

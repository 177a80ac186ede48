"""Tests for TWAP period comparison, summary text and tabular export."""

import pytest

from runway.analysis import InvalidParameter, SimulationResult
from runway.analysis.comparison import compare_periods
from runway.analysis.report import (
    FRAME_COLUMNS,
    cone_width_note,
    crossover_headline,
    describe_crossover,
    format_millions,
    format_period,
    period_insight,
    result_to_frame,
)
from runway.analysis.trajectory import simulate


class TestComparePeriods:
    def test_results_in_caller_order(self, base_params):
        comparison = compare_periods(base_params, (9, 3, 6))
        assert list(comparison.results) == [9.0, 3.0, 6.0]

    def test_matches_individual_runs(self, base_params):
        comparison = compare_periods(base_params, (3, 6, 9))
        for period, result in comparison.results.items():
            direct = simulate(base_params.with_changes(twap_period_months=period))
            assert result == direct

    def test_insights(self, base_params):
        comparison = compare_periods(base_params, (3, 6, 9))
        assert len(comparison.insights) == 4
        assert comparison.insights[0].startswith("3-month TWAP: Lower bound crosses")
        assert "±13.0%" in comparison.insights[-1]

    def test_crossover_months(self, base_params):
        comparison = compare_periods(base_params, (3, 6))
        months = comparison.crossover_months()
        assert set(months) == {3.0, 6.0}
        assert months[3.0] == comparison.results[3.0].crossover_month

    def test_ignores_base_period(self, base_params):
        a = compare_periods(base_params.with_changes(twap_period_months=1), (6,))
        b = compare_periods(base_params.with_changes(twap_period_months=12), (6,))
        assert a.results == b.results

    @pytest.mark.parametrize("periods", [(), (3, 3), (3, 0), (-6,)])
    def test_invalid_periods(self, base_params, periods):
        with pytest.raises(InvalidParameter):
            compare_periods(base_params, periods)


class TestSummaryText:
    def test_describe_crossover(self):
        assert describe_crossover(None) == "no crossing"
        assert describe_crossover(9.3257) == "month 9.3"

    def test_headline(self, base_params):
        result = simulate(base_params)
        headline = crossover_headline(result, base_params)
        assert headline.startswith("Could cross below $2.0M safety threshold at month 9.3")
        assert headline.endswith("using selected volatility of 45.0%")

    def test_headline_no_crossing(self, base_params):
        result = SimulationResult(points=(), crossover_month=None)
        assert "at no crossing" in crossover_headline(result, base_params)

    def test_period_insight_na(self):
        assert period_insight(6, None).endswith("at month N/A")

    def test_format_period(self):
        assert format_period(3.0) == "3"
        assert format_period(4.5) == "4.5"

    def test_format_millions(self):
        assert format_millions(2_000_000) == "$2.0M"
        assert format_millions(1_234_567, decimals=2) == "$1.23M"

    def test_cone_width_note(self):
        assert "45.0%" in cone_width_note(0.45)
        assert "±26.0%" in cone_width_note(0.90)


class TestResultToFrame:
    def test_columns_and_length(self, base_params):
        df = result_to_frame(simulate(base_params))
        assert list(df.columns) == FRAME_COLUMNS
        assert len(df) == 121

    def test_crossover_in_attrs(self, base_params):
        result = simulate(base_params)
        df = result_to_frame(result)
        assert df.attrs["crossover_month"] == result.crossover_month
        assert df["is_crossover_sample"].sum() == 1

    def test_empty_result(self):
        df = result_to_frame(SimulationResult(points=()))
        assert df.empty
        assert list(df.columns) == FRAME_COLUMNS

"""Tests for the command-line interface and settings."""

import pandas as pd
import pytest
from click.testing import CliRunner

from runway.__main__ import cli
from runway.config import Settings


@pytest.fixture
def runner():
    return CliRunner()


class TestSimulateCommand:
    def test_default_run(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["simulate"])
        assert result.exit_code == 0, result.output
        assert "3-month TWAP" in result.output
        assert "at month 9.3" in result.output

    def test_csv_export(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["simulate", "--period", "6", "--csv", "series.csv"])
            assert result.exit_code == 0, result.output
            df = pd.read_csv("series.csv")
        assert len(df) == 121
        assert "lower_bound" in df.columns

    def test_invalid_period(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["simulate", "--period", "0"])
        assert result.exit_code == 1
        assert "twap_period_months" in result.output

    def test_invalid_step(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["simulate", "--step", "0"])
        assert result.exit_code == 1
        assert "step_months" in result.output

    def test_oversized_grid(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["simulate", "--step", "1e-12"])
        assert result.exit_code == 1
        assert "exceeds 100000 steps" in result.output


class TestCompareCommand:
    def test_default_periods(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["compare", "--volatility", "0.6"])
        assert result.exit_code == 0, result.output
        assert "selected vol of 60.0%" in result.output
        for period in ("3", "6", "9"):
            assert f"{period}-month TWAP" in result.output

    def test_duplicate_periods(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["compare", "-p", "3", "-p", "3"])
        assert result.exit_code == 1


class TestCriticalDeclineCommand:
    def test_rows(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["critical-decline", "-m", "6", "-m", "12"])
        assert result.exit_code == 0, result.output
        assert "by month 6: 52.8% decline" in result.output
        assert "by month 12: 0.0% decline" in result.output


class TestDeclinePathCommand:
    def test_breach_reported(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["decline-path", "--decline", "0.6", "-p", "3"])
        assert result.exit_code == 0, result.output
        assert "3-month TWAP at 60.0% decline (price 1,280.00)" in result.output
        assert "breaches the minimum month" in result.output
        assert "month    0: $3.2M" in result.output

    def test_decline_out_of_range(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["decline-path", "--decline", "1.5"])
        assert result.exit_code == 1
        assert "decline must be within" in result.output


class TestSettings:
    def test_base_parameters(self):
        params = Settings(_env_file=None).base_parameters()
        assert params.total_units == 6000
        assert params.monthly_spend == pytest.approx(17_500_000 / 12)
        assert params.annual_volatility == 0.45

    def test_overrides_skip_none(self):
        params = Settings(_env_file=None).base_parameters(annual_volatility=0.8, unit_price=None)
        assert params.annual_volatility == 0.8
        assert params.unit_price == 3200

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RW_ANNUAL_VOLATILITY", "0.3")
        assert Settings(_env_file=None).annual_volatility == 0.3

"""Human-readable summaries and tabular export of simulation results."""

import math

import pandas as pd

from . import SimulationResult, StrategyParameters
from .trajectory import MONTHS_PER_YEAR

FRAME_COLUMNS = [
    "month",
    "expected_balance",
    "lower_bound",
    "upper_bound",
    "is_crossover_sample",
]


def format_period(months: float) -> str:
    """3.0 -> '3', 4.5 -> '4.5'."""
    return str(int(months)) if float(months).is_integer() else f"{months:.1f}"


def format_millions(amount: float, decimals: int = 1) -> str:
    return f"${amount / 1_000_000:.{decimals}f}M"


def describe_crossover(crossover_month: float | None) -> str:
    if crossover_month is None:
        return "no crossing"
    return f"month {crossover_month:.1f}"


def crossover_headline(result: SimulationResult, params: StrategyParameters) -> str:
    return (
        f"Could cross below {format_millions(params.minimum_safe_balance)} "
        f"safety threshold at {describe_crossover(result.crossover_month)} "
        f"using selected volatility of {params.annual_volatility * 100:.1f}%"
    )


def period_insight(period: float, crossover_month: float | None) -> str:
    month = "N/A" if crossover_month is None else f"{crossover_month:.1f}"
    return (
        f"{format_period(period)}-month TWAP: Lower bound crosses "
        f"minimum safe balance at month {month}"
    )


def cone_width_note(annual_volatility: float) -> str:
    monthly_pct = annual_volatility / math.sqrt(MONTHS_PER_YEAR) * 100
    return (
        f"Cone width: using {annual_volatility * 100:.1f}% annualized volatility (σ), "
        f"at month t the TWAP portion varies by ± (σ/√12) × √min(t, TWAP_period) "
        f"= ±{monthly_pct:.1f}% × √min(t, TWAP_period)"
    )


def result_to_frame(result: SimulationResult) -> pd.DataFrame:
    """Sampled points as a DataFrame; the crossover month rides in ``attrs``."""
    df = pd.DataFrame(
        [
            {
                "month": p.month,
                "expected_balance": p.expected_balance,
                "lower_bound": p.lower_bound,
                "upper_bound": p.upper_bound,
                "is_crossover_sample": p.is_crossover_sample,
            }
            for p in result.points
        ],
        columns=FRAME_COLUMNS,
    )
    df.attrs["crossover_month"] = result.crossover_month
    return df

"""Side-by-side evaluation of several TWAP periods under one volatility."""

import logging
from dataclasses import dataclass

from . import InvalidParameter, SimulationResult, StrategyParameters
from .report import cone_width_note, period_insight
from .trajectory import (
    DEFAULT_HORIZON_MONTHS,
    DEFAULT_SAMPLE_INTERVAL,
    DEFAULT_STEP_MONTHS,
    simulate,
)

logger = logging.getLogger(__name__)

DEFAULT_PERIODS = (3.0, 6.0, 9.0)


@dataclass(frozen=True)
class PeriodComparison:
    annual_volatility: float
    results: dict[float, SimulationResult]  # twap period -> result, caller order
    insights: tuple[str, ...]

    def crossover_months(self) -> dict[float, float | None]:
        return {period: r.crossover_month for period, r in self.results.items()}


def compare_periods(
    base: StrategyParameters,
    periods: tuple[float, ...] = DEFAULT_PERIODS,
    horizon_months: float = DEFAULT_HORIZON_MONTHS,
    step_months: float = DEFAULT_STEP_MONTHS,
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL,
) -> PeriodComparison:
    """Simulate ``base`` once per TWAP period, everything else held fixed.

    Args:
        base: Shared strategy; its own twap_period_months is ignored.
        periods: TWAP periods to evaluate, in display order.

    Returns:
        PeriodComparison with one result per period plus insight lines.
    """
    if not periods:
        raise InvalidParameter("at least one TWAP period is required")
    if len(set(periods)) != len(periods):
        raise InvalidParameter(f"TWAP periods must be unique, got {periods}")

    results: dict[float, SimulationResult] = {}
    for period in periods:
        params = base.with_changes(twap_period_months=float(period))
        results[float(period)] = simulate(
            params, horizon_months, step_months, sample_interval
        )

    insights = [period_insight(p, r.crossover_month) for p, r in results.items()]
    insights.append(cone_width_note(base.annual_volatility))

    logger.debug(
        "Compared %d TWAP periods at vol=%.4f", len(results), base.annual_volatility
    )
    return PeriodComparison(
        annual_volatility=base.annual_volatility,
        results=results,
        insights=tuple(insights),
    )

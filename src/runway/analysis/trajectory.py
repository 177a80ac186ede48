"""Balance trajectory simulator for a staged (immediate + TWAP) liquidation.

The balance at month t is the immediate-sale cash plus the TWAP proceeds
realised so far, minus cumulative spend. The cone of uncertainty is a
one-sigma band on the TWAP proceeds only; it widens with sqrt(t) until the
TWAP completes and stays flat afterwards.
"""

import logging
import math

import numpy as np

from . import (
    InvalidHorizon,
    InvalidParameter,
    SimulationPoint,
    SimulationResult,
    StrategyParameters,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MONTHS_PER_YEAR = 12
DEFAULT_HORIZON_MONTHS = 12.0
DEFAULT_STEP_MONTHS = 0.05
DEFAULT_SAMPLE_INTERVAL = 0.1

GRID_TOLERANCE = 1e-9
MAX_STEPS = 100_000
# Fraction of a sampling interval within which a step counts as aligned
SAMPLE_ALIGN_TOLERANCE = 0.01
MONTH_DECIMALS = 10


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_parameters(params: StrategyParameters) -> None:
    """Raise InvalidParameter if the strategy cannot be simulated."""
    for name, value in vars(params).items():
        if not math.isfinite(value):
            raise InvalidParameter(f"{name} must be finite, got {value!r}")

    if params.twap_period_months <= 0:
        raise InvalidParameter(
            f"twap_period_months must be > 0, got {params.twap_period_months}"
        )
    if params.unit_price <= 0:
        raise InvalidParameter(f"unit_price must be > 0, got {params.unit_price}")
    if params.immediate_units < 0:
        raise InvalidParameter(
            f"immediate_units must be >= 0, got {params.immediate_units}"
        )
    if params.immediate_units > params.total_units:
        raise InvalidParameter(
            f"immediate_units ({params.immediate_units}) exceeds "
            f"total_units ({params.total_units})"
        )
    if params.annual_volatility <= 0:
        raise InvalidParameter(
            f"annual_volatility must be > 0, got {params.annual_volatility}"
        )
    if params.monthly_spend < 0:
        raise InvalidParameter(
            f"monthly_spend must be >= 0, got {params.monthly_spend}"
        )


def validate_grid(
    horizon_months: float,
    step_months: float,
    sample_interval: float | None = None,
) -> None:
    """Raise InvalidHorizon if the integration/sampling grid is malformed."""
    values = {"horizon_months": horizon_months, "step_months": step_months}
    if sample_interval is not None:
        values["sample_interval"] = sample_interval
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidHorizon(f"{name} must be finite, got {value!r}")

    if step_months <= 0:
        raise InvalidHorizon(f"step_months must be > 0, got {step_months}")
    if step_months > horizon_months:
        raise InvalidHorizon(
            f"step_months ({step_months}) exceeds horizon_months ({horizon_months})"
        )
    if horizon_months / step_months > MAX_STEPS:
        raise InvalidHorizon(
            f"grid of {horizon_months} months at step {step_months} "
            f"exceeds {MAX_STEPS} steps"
        )
    if sample_interval is not None and sample_interval < step_months:
        raise InvalidHorizon(
            f"sample_interval ({sample_interval}) is finer than "
            f"step_months ({step_months})"
        )


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def step_grid(horizon_months: float, step_months: float) -> np.ndarray:
    """Internal integration times 0, step, 2*step, ... up to the horizon.

    Times are computed as i * step rather than by repeated addition so the
    last step lands on the horizon instead of drifting past it.
    """
    n = int(math.floor(horizon_months / step_months + GRID_TOLERANCE))
    return np.arange(n + 1, dtype=float) * step_months


def twap_proceeds(params: StrategyParameters, t: np.ndarray) -> np.ndarray:
    """Cash realised by the TWAP sale at each time in ``t``."""
    progress = np.minimum(t / params.twap_period_months, 1.0)
    return params.remaining_units * params.unit_price * progress


def expected_balance(
    params: StrategyParameters, t: np.ndarray, proceeds: np.ndarray | None = None
) -> np.ndarray:
    """Balance assuming no price movement."""
    if proceeds is None:
        proceeds = twap_proceeds(params, t)
    return params.immediate_proceeds + proceeds - params.monthly_spend * t


def cumulative_volatility(params: StrategyParameters, t: np.ndarray) -> np.ndarray:
    """One-sigma price move accumulated over the price-exposed time."""
    monthly_vol = params.annual_volatility / math.sqrt(MONTHS_PER_YEAR)
    exposure = np.minimum(t, params.twap_period_months)
    return monthly_vol * np.sqrt(exposure)


def balance_cone(
    params: StrategyParameters, t: np.ndarray
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (expected, lower, upper) balance arrays for times ``t``."""
    proceeds = twap_proceeds(params, t)
    expected = expected_balance(params, t, proceeds)
    delta = proceeds * cumulative_volatility(params, t)
    return expected, expected - delta, expected + delta


def find_crossover(
    t: np.ndarray, lower: np.ndarray, threshold: float, step_months: float
) -> float | None:
    """First interpolated time at which ``lower`` drops below ``threshold``.

    A crossing needs a step at or above the threshold followed by one below
    it. Later re-crossings are ignored, and a series that starts below the
    threshold has no crossing until it first recovers.
    """
    if len(lower) < 2:
        return None

    straddles = (lower[:-1] >= threshold) & (lower[1:] < threshold)
    hits = np.flatnonzero(straddles)
    if hits.size == 0:
        return None

    i = int(hits[0])
    prev_lower = float(lower[i])
    curr_lower = float(lower[i + 1])
    ratio = (threshold - prev_lower) / (curr_lower - prev_lower)
    return float(t[i]) + ratio * step_months


def _aligned_samples(t: np.ndarray, sample_interval: float) -> tuple[np.ndarray, np.ndarray]:
    """Indices of steps on the sampling lattice and their rounded months."""
    ratio = t / sample_interval
    nearest = np.round(ratio)
    deviation = np.abs(ratio - nearest)
    idx = np.flatnonzero(deviation < SAMPLE_ALIGN_TOLERANCE)

    # Very fine steps can put several steps near one lattice point; keep the closest
    lattice = nearest[idx]
    order = np.lexsort((deviation[idx], lattice))
    _, first = np.unique(lattice[order], return_index=True)
    idx = idx[order][first]

    months = np.round(nearest[idx] * sample_interval, MONTH_DECIMALS)
    return idx, months


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def simulate(
    params: StrategyParameters,
    horizon_months: float = DEFAULT_HORIZON_MONTHS,
    step_months: float = DEFAULT_STEP_MONTHS,
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL,
) -> SimulationResult:
    """Project the balance cone and locate the first safety-threshold breach.

    Args:
        params: Strategy inputs for this run.
        horizon_months: Projection horizon (inclusive).
        step_months: Internal integration step; controls crossover precision.
        sample_interval: Spacing of the points kept in the output series.

    Returns:
        SimulationResult with the sampled points and the interpolated
        crossover month (None when the lower bound never breaches).

    Raises:
        InvalidParameter: malformed strategy inputs.
        InvalidHorizon: malformed horizon/step/interval.
    """
    validate_parameters(params)
    validate_grid(horizon_months, step_months, sample_interval)

    t = step_grid(horizon_months, step_months)
    expected, lower, upper = balance_cone(params, t)

    crossover = find_crossover(t, lower, params.minimum_safe_balance, step_months)
    if crossover is not None:
        logger.debug(
            "Crossover at month %.4f (twap=%.2f, vol=%.4f, threshold=%.2f)",
            crossover,
            params.twap_period_months,
            params.annual_volatility,
            params.minimum_safe_balance,
        )

    idx, months = _aligned_samples(t, sample_interval)

    marked = -1
    if crossover is not None and idx.size:
        distance = np.abs(months - crossover)
        nearest = int(np.argmin(distance))
        if distance[nearest] <= sample_interval / 2 + GRID_TOLERANCE:
            marked = nearest

    points = tuple(
        SimulationPoint(
            month=float(months[k]),
            expected_balance=float(expected[i]),
            upper_bound=float(upper[i]),
            lower_bound=float(lower[i]),
            is_crossover_sample=(k == marked),
        )
        for k, i in enumerate(idx)
    )

    return SimulationResult(points=points, crossover_month=crossover)

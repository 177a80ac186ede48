"""Critical price-decline scenarios.

Instead of asking *when* the pessimistic band breaches the safety threshold,
ask how far the unit price must fall for the expected balance to breach it
by a given month. The decline applies to the TWAP sale only; the immediate
sale has already settled at the reference price.
"""

import logging
from dataclasses import dataclass
from typing import TypedDict

import numpy as np

from . import InvalidHorizon, InvalidParameter, StrategyParameters
from .trajectory import (
    DEFAULT_HORIZON_MONTHS,
    DEFAULT_SAMPLE_INTERVAL,
    DEFAULT_STEP_MONTHS,
    GRID_TOLERANCE,
    _aligned_samples,
    expected_balance,
    find_crossover,
    step_grid,
    twap_proceeds,
    validate_grid,
    validate_parameters,
)

logger = logging.getLogger(__name__)

DEFAULT_DECLINE_MONTHS = (3, 6, 9, 12)


class CriticalDeclineRow(TypedDict):
    month: float
    critical_decline: float | None  # fraction, e.g. 0.25 = 25% decline
    breakeven_price: float | None


@dataclass(frozen=True)
class DeclineScenario:
    """Expected balance path when the TWAP executes at a declined price."""

    decline: float
    months: tuple[float, ...]
    balances: tuple[float, ...]
    breach_month: float | None


def _declined_balance(
    params: StrategyParameters, t: np.ndarray, decline: float
) -> np.ndarray:
    proceeds = twap_proceeds(params, t) * (1.0 - decline)
    return expected_balance(params, t, proceeds)


def critical_decline(
    params: StrategyParameters,
    by_month: float,
    horizon_months: float = DEFAULT_HORIZON_MONTHS,
    step_months: float = DEFAULT_STEP_MONTHS,
) -> float | None:
    """Smallest TWAP price decline that breaches the threshold by ``by_month``.

    A breach means the expected balance drops strictly below the threshold,
    the same test ``decline_trajectory`` applies. The result is the boundary
    decline: at exactly this decline the balance only touches the threshold,
    any larger decline breaches.

    Evaluated on the integration grid plus ``by_month`` and the TWAP end,
    where the piecewise-linear balance path can bend.

    Returns:
        Decline as a fraction in [0, 1). 0.0 if the undeclined expected
        balance already breaches; None if even a total loss on the TWAP
        proceeds keeps the balance above the threshold.
    """
    validate_parameters(params)
    validate_grid(horizon_months, step_months)
    if not 0 <= by_month <= horizon_months:
        raise InvalidHorizon(
            f"by_month must be within [0, {horizon_months}], got {by_month}"
        )

    grid = step_grid(horizon_months, step_months)
    t = np.union1d(grid, [by_month, params.twap_period_months])
    t = t[t <= by_month + GRID_TOLERANCE]

    proceeds = twap_proceeds(params, t)
    expected = expected_balance(params, t, proceeds)
    threshold = params.minimum_safe_balance

    if np.any(expected < threshold):
        return 0.0

    exposed = proceeds > 0
    if not np.any(exposed):
        return None

    needed = (expected[exposed] - threshold) / proceeds[exposed]
    decline = float(np.min(needed))
    if decline >= 1.0:
        logger.debug("No decline below 100%% breaches by month %.2f", by_month)
        return None
    return decline


def critical_decline_table(
    params: StrategyParameters,
    months: tuple[float, ...] = DEFAULT_DECLINE_MONTHS,
    horizon_months: float = DEFAULT_HORIZON_MONTHS,
    step_months: float = DEFAULT_STEP_MONTHS,
) -> list[CriticalDeclineRow]:
    """One critical-decline row per requested month."""
    rows: list[CriticalDeclineRow] = []
    for m in months:
        d = critical_decline(params, m, horizon_months, step_months)
        rows.append(
            CriticalDeclineRow(
                month=float(m),
                critical_decline=d,
                breakeven_price=None if d is None else params.unit_price * (1.0 - d),
            )
        )
    return rows


def decline_trajectory(
    params: StrategyParameters,
    decline: float,
    horizon_months: float = DEFAULT_HORIZON_MONTHS,
    step_months: float = DEFAULT_STEP_MONTHS,
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL,
) -> DeclineScenario:
    """Sampled expected balance under a fixed TWAP price decline.

    ``breach_month`` is the first interpolated month the balance drops
    strictly below the threshold, 0.0 if it starts below, None if it never
    does. Passing the critical decline for a month therefore gives no breach
    (the path only touches the threshold); anything larger breaches by then.
    """
    validate_parameters(params)
    validate_grid(horizon_months, step_months, sample_interval)
    if not 0.0 <= decline <= 1.0:
        raise InvalidParameter(f"decline must be within [0, 1], got {decline}")

    t = step_grid(horizon_months, step_months)
    balance = _declined_balance(params, t, decline)
    threshold = params.minimum_safe_balance
    if balance[0] < threshold:
        breach = 0.0
    else:
        breach = find_crossover(t, balance, threshold, step_months)

    idx, months = _aligned_samples(t, sample_interval)
    return DeclineScenario(
        decline=decline,
        months=tuple(float(m) for m in months),
        balances=tuple(float(b) for b in balance[idx]),
        breach_month=breach,
    )

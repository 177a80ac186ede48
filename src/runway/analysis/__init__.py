"""Treasury runway analysis package.

Shared types for the TWAP liquidation projections:
- StrategyParameters: immutable inputs of one simulation run
- SimulationPoint / SimulationResult: sampled balance cone + crossover month
- InvalidParameter / InvalidHorizon: validation failures raised before any
  computation starts
"""

from dataclasses import dataclass, replace


class SimulationError(ValueError):
    """Base class for rejected simulation inputs."""

    code = "simulation_error"


class InvalidParameter(SimulationError):
    """Malformed strategy inputs."""

    code = "invalid_parameter"


class InvalidHorizon(SimulationError):
    """Malformed sampling configuration (horizon, step, interval)."""

    code = "invalid_horizon"


@dataclass(frozen=True)
class StrategyParameters:
    """Liquidation strategy for one run. Frozen so it can key a cache."""

    total_units: float
    immediate_units: float
    unit_price: float
    monthly_spend: float
    twap_period_months: float
    minimum_safe_balance: float
    annual_volatility: float

    @property
    def remaining_units(self) -> float:
        return self.total_units - self.immediate_units

    @property
    def immediate_proceeds(self) -> float:
        return self.immediate_units * self.unit_price

    def with_changes(self, **changes) -> "StrategyParameters":
        return replace(self, **changes)


@dataclass(frozen=True)
class SimulationPoint:
    month: float
    expected_balance: float
    upper_bound: float
    lower_bound: float
    is_crossover_sample: bool = False

    @property
    def bound_delta(self) -> float:
        return self.upper_bound - self.expected_balance


@dataclass(frozen=True)
class SimulationResult:
    points: tuple[SimulationPoint, ...]
    crossover_month: float | None = None

    @property
    def months(self) -> list[float]:
        return [p.month for p in self.points]

    @property
    def crossover_sample(self) -> SimulationPoint | None:
        for p in self.points:
            if p.is_crossover_sample:
                return p
        return None

    def __len__(self) -> int:
        return len(self.points)


__all__ = [
    "SimulationError",
    "InvalidParameter",
    "InvalidHorizon",
    "StrategyParameters",
    "SimulationPoint",
    "SimulationResult",
]

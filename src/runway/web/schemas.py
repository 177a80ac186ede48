"""Pydantic response schemas for the Runway API."""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# --- Base schemas ---


class Meta(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    cached: bool = False


class ApiResponse(BaseModel, Generic[T]):
    data: T
    meta: Meta = Field(default_factory=Meta)


class ErrorResponse(BaseModel):
    error: dict[str, Any] = Field(description="Error details with code and message")


class HealthResponse(BaseModel):
    status: str
    version: str
    cache_type: str
    cache_hits: int = 0
    cache_misses: int = 0


# --- Simulation schemas ---


class StrategyOut(BaseModel):
    total_units: float
    immediate_units: float
    unit_price: float
    monthly_spend: float
    twap_period_months: float
    minimum_safe_balance: float
    annual_volatility: float


class PointOut(BaseModel):
    month: float
    expected_balance: float
    lower_bound: float
    upper_bound: float
    is_crossover_sample: bool = False


class SimulationOut(BaseModel):
    strategy: StrategyOut
    horizon_months: float
    step_months: float
    sample_interval: float
    crossover_month: float | None = Field(
        None, description="First interpolated month the lower bound breaches the minimum"
    )
    crossover_text: str = Field(description="'month X.X' or 'no crossing'")
    headline: str
    points: list[PointOut]


class PeriodResultOut(BaseModel):
    twap_period_months: float
    crossover_month: float | None = None
    crossover_text: str
    points: list[PointOut]


class ComparisonOut(BaseModel):
    annual_volatility: float
    periods: list[PeriodResultOut]
    insights: list[str]


class CriticalDeclineRowOut(BaseModel):
    month: float
    critical_decline: float | None = Field(None, description="Fractional price decline")
    breakeven_price: float | None = None


class CriticalDeclineOut(BaseModel):
    twap_period_months: float
    unit_price: float
    minimum_safe_balance: float
    rows: list[CriticalDeclineRowOut]


class DeclinePointOut(BaseModel):
    month: float
    expected_balance: float


class DeclinePathOut(BaseModel):
    twap_period_months: float
    decline: float
    decline_price: float
    breach_month: float | None = Field(
        None, description="First interpolated month the balance drops below the minimum"
    )
    breach_text: str
    points: list[DeclinePointOut]

"""Simulation API endpoints.

The control surface owns the volatility (and the other strategy inputs) and
re-queries on every change; responses are memoized per full parameter set.
"""

from fastapi import APIRouter, Depends, Query

from runway.analysis import (
    InvalidParameter,
    SimulationResult,
    StrategyParameters,
)
from runway.analysis.comparison import compare_periods
from runway.analysis.critical_decline import critical_decline_table, decline_trajectory
from runway.analysis.report import crossover_headline, describe_crossover
from runway.analysis.trajectory import simulate
from runway.config import Settings
from runway.web.cache import CacheService, simulation_cache_key
from runway.web.dependencies import get_cache, get_settings
from runway.web.schemas import (
    ApiResponse,
    ComparisonOut,
    CriticalDeclineOut,
    DeclinePathOut,
    Meta,
    PointOut,
    SimulationOut,
    StrategyOut,
)

router = APIRouter(prefix="/simulation", tags=["simulation"])


def _check_volatility(settings: Settings, volatility: float | None) -> None:
    if volatility is None:
        return
    if not settings.volatility_min <= volatility <= settings.volatility_max:
        raise InvalidParameter(
            f"annual_volatility must be within [{settings.volatility_min}, "
            f"{settings.volatility_max}], got {volatility}"
        )


def _points(result: SimulationResult) -> list[dict]:
    return [
        PointOut(
            month=p.month,
            expected_balance=p.expected_balance,
            lower_bound=p.lower_bound,
            upper_bound=p.upper_bound,
            is_crossover_sample=p.is_crossover_sample,
        ).model_dump()
        for p in result.points
    ]


def _strategy(params: StrategyParameters) -> dict:
    return StrategyOut(**vars(params)).model_dump()


@router.get("", response_model=ApiResponse[SimulationOut])
async def get_simulation(
    volatility: float | None = Query(None, description="Annualized volatility (0.45 = 45%)"),
    twap_period: float | None = Query(None, description="TWAP period in months"),
    total_units: float | None = Query(None),
    immediate_units: float | None = Query(None),
    unit_price: float | None = Query(None),
    monthly_spend: float | None = Query(None),
    minimum_safe_balance: float | None = Query(None),
    horizon_months: float | None = Query(None),
    step_months: float | None = Query(None),
    sample_interval: float | None = Query(None),
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache),
):
    """Balance cone and crossover month for one strategy."""
    _check_volatility(settings, volatility)
    params = settings.base_parameters(
        annual_volatility=volatility,
        twap_period_months=twap_period,
        total_units=total_units,
        immediate_units=immediate_units,
        unit_price=unit_price,
        monthly_spend=monthly_spend,
        minimum_safe_balance=minimum_safe_balance,
    )
    horizon = horizon_months if horizon_months is not None else settings.horizon_months
    step = step_months if step_months is not None else settings.step_months
    interval = sample_interval if sample_interval is not None else settings.sample_interval

    def compute() -> dict:
        result = simulate(params, horizon, step, interval)
        return SimulationOut(
            strategy=_strategy(params),
            horizon_months=horizon,
            step_months=step,
            sample_interval=interval,
            crossover_month=result.crossover_month,
            crossover_text=describe_crossover(result.crossover_month),
            headline=crossover_headline(result, params),
            points=_points(result),
        ).model_dump()

    key = simulation_cache_key("simulation", params, horizon, step, interval)
    data, cached = await cache.memoize(key, compute)
    return ApiResponse(data=data, meta=Meta(cached=cached))


@router.get("/compare", response_model=ApiResponse[ComparisonOut])
async def get_comparison(
    volatility: float | None = Query(None, description="Annualized volatility (0.45 = 45%)"),
    periods: list[float] | None = Query(None, description="TWAP periods in months"),
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache),
):
    """Crossover months for several TWAP periods under one volatility."""
    _check_volatility(settings, volatility)
    base = settings.base_parameters(annual_volatility=volatility)
    period_tuple = tuple(periods) if periods else tuple(settings.comparison_periods)

    def compute() -> dict:
        comparison = compare_periods(
            base,
            period_tuple,
            settings.horizon_months,
            settings.step_months,
            settings.sample_interval,
        )
        return ComparisonOut(
            annual_volatility=comparison.annual_volatility,
            periods=[
                {
                    "twap_period_months": period,
                    "crossover_month": result.crossover_month,
                    "crossover_text": describe_crossover(result.crossover_month),
                    "points": _points(result),
                }
                for period, result in comparison.results.items()
            ],
            insights=list(comparison.insights),
        ).model_dump()

    key = simulation_cache_key(
        "compare", base, period_tuple,
        settings.horizon_months, settings.step_months, settings.sample_interval,
    )
    data, cached = await cache.memoize(key, compute)
    return ApiResponse(data=data, meta=Meta(cached=cached))


@router.get("/critical-decline", response_model=ApiResponse[CriticalDeclineOut])
async def get_critical_decline(
    twap_period: float | None = Query(None, description="TWAP period in months"),
    months: list[float] | None = Query(None, description="Target months"),
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache),
):
    """Minimum TWAP price decline that breaches the threshold by each month."""
    params = settings.base_parameters(twap_period_months=twap_period)
    month_tuple = tuple(months) if months else tuple(settings.decline_months)

    def compute() -> dict:
        rows = critical_decline_table(
            params, month_tuple, settings.horizon_months, settings.step_months
        )
        return CriticalDeclineOut(
            twap_period_months=params.twap_period_months,
            unit_price=params.unit_price,
            minimum_safe_balance=params.minimum_safe_balance,
            rows=rows,
        ).model_dump()

    key = simulation_cache_key(
        "critical_decline", params, month_tuple,
        settings.horizon_months, settings.step_months,
    )
    data, cached = await cache.memoize(key, compute)
    return ApiResponse(data=data, meta=Meta(cached=cached))


@router.get("/decline-path", response_model=ApiResponse[DeclinePathOut])
async def get_decline_path(
    decline: float = Query(..., description="TWAP price decline as a fraction (0.25 = 25%)"),
    twap_period: float | None = Query(None, description="TWAP period in months"),
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache),
):
    """Expected balance when the TWAP executes at a declined price."""
    params = settings.base_parameters(twap_period_months=twap_period)

    def compute() -> dict:
        scenario = decline_trajectory(
            params,
            decline,
            settings.horizon_months,
            settings.step_months,
            settings.sample_interval,
        )
        return DeclinePathOut(
            twap_period_months=params.twap_period_months,
            decline=scenario.decline,
            decline_price=params.unit_price * (1.0 - scenario.decline),
            breach_month=scenario.breach_month,
            breach_text=describe_crossover(scenario.breach_month),
            points=[
                {"month": m, "expected_balance": b}
                for m, b in zip(scenario.months, scenario.balances)
            ],
        ).model_dump()

    key = simulation_cache_key(
        "decline_path", params, decline,
        settings.horizon_months, settings.step_months, settings.sample_interval,
    )
    data, cached = await cache.memoize(key, compute)
    return ApiResponse(data=data, meta=Meta(cached=cached))

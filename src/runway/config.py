from pydantic_settings import BaseSettings, SettingsConfigDict

from runway.analysis import StrategyParameters


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RW_",
    )

    # Base strategy
    total_units: float = 6000.0
    immediate_units: float = 1000.0
    unit_price: float = 3200.0
    monthly_spend: float = 17_500_000 / 12  # $17.5M annual budget
    minimum_safe_balance: float = 2_000_000.0
    annual_volatility: float = 0.45
    twap_period_months: float = 3.0

    # Simulation grid
    horizon_months: float = 12.0
    step_months: float = 0.05
    sample_interval: float = 0.1

    # Period comparison
    comparison_periods: list[float] = [3.0, 6.0, 9.0]
    decline_months: list[float] = [3.0, 6.0, 9.0, 12.0]

    # Volatility control range
    volatility_min: float = 0.10
    volatility_max: float = 1.00
    volatility_step: float = 0.05

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Cache
    cache_ttl: int = 300  # seconds

    def base_parameters(self, **overrides) -> StrategyParameters:
        """StrategyParameters from the configured base strategy."""
        fields = {
            "total_units": self.total_units,
            "immediate_units": self.immediate_units,
            "unit_price": self.unit_price,
            "monthly_spend": self.monthly_spend,
            "twap_period_months": self.twap_period_months,
            "minimum_safe_balance": self.minimum_safe_balance,
            "annual_volatility": self.annual_volatility,
        }
        fields.update({k: v for k, v in overrides.items() if v is not None})
        return StrategyParameters(**fields)

import logging

import click

from runway.analysis import SimulationError
from runway.config import Settings
from runway.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _strategy_options(func):
    """Attach one option per StrategyParameters field (defaults from Settings)."""
    options = [
        click.option("--total-units", type=float, default=None, help="Units held at month 0"),
        click.option("--immediate-units", type=float, default=None, help="Units sold at month 0"),
        click.option("--price", "unit_price", type=float, default=None, help="Reference unit price"),
        click.option("--monthly-spend", type=float, default=None, help="Cash outflow per month"),
        click.option("--min-safe", "minimum_safe_balance", type=float, default=None,
                     help="Minimum safe balance"),
        click.option("--volatility", "-v", "annual_volatility", type=float, default=None,
                     help="Annualized volatility as a fraction (0.45 = 45%)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Runway - TWAP liquidation balance projections"""
    setup_logging(verbose)
    ctx.obj = Settings()


@cli.command()
@_strategy_options
@click.option("--period", "-p", "twap_period_months", type=float, default=None,
              help="TWAP period in months")
@click.option("--horizon", type=float, default=None, help="Horizon in months")
@click.option("--step", type=float, default=None, help="Internal integration step (months)")
@click.option("--interval", type=float, default=None, help="Output sampling interval (months)")
@click.option("--every", type=int, default=10, show_default=True,
              help="Print every Nth sampled point")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), default=None,
              help="Write the sampled series to a CSV file")
@click.pass_obj
def simulate(settings: Settings, horizon, step, interval, every, csv_path, **strategy):
    """Project the balance cone for one TWAP period."""
    from runway.analysis.report import crossover_headline, result_to_frame
    from runway.analysis.trajectory import simulate as run_simulation

    params = settings.base_parameters(**strategy)
    try:
        result = run_simulation(
            params,
            horizon if horizon is not None else settings.horizon_months,
            step if step is not None else settings.step_months,
            interval if interval is not None else settings.sample_interval,
        )
    except SimulationError as e:
        raise click.ClickException(str(e))

    click.echo(f"{params.twap_period_months:g}-month TWAP")
    click.echo(crossover_headline(result, params))

    df = result_to_frame(result)
    click.echo(df.iloc[:: max(every, 1)].to_string(index=False, float_format=lambda x: f"{x:,.2f}"))

    if csv_path:
        df.to_csv(csv_path, index=False)
        click.echo(f"Wrote {len(df)} points to {csv_path}")


@cli.command()
@_strategy_options
@click.option("--period", "-p", "periods", type=float, multiple=True,
              help="TWAP period in months (repeatable; default from settings)")
@click.pass_obj
def compare(settings: Settings, periods: tuple[float, ...], **strategy):
    """Compare crossover months across several TWAP periods."""
    from runway.analysis.comparison import compare_periods

    base = settings.base_parameters(**strategy)
    try:
        comparison = compare_periods(
            base,
            periods or tuple(settings.comparison_periods),
            settings.horizon_months,
            settings.step_months,
            settings.sample_interval,
        )
    except SimulationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Key insights (selected vol of {base.annual_volatility * 100:.1f}%):")
    for line in comparison.insights:
        click.echo(f"  - {line}")


@cli.command("critical-decline")
@_strategy_options
@click.option("--period", "-p", "twap_period_months", type=float, default=None,
              help="TWAP period in months")
@click.option("--month", "-m", "months", type=float, multiple=True,
              help="Target month (repeatable; default from settings)")
@click.pass_obj
def critical_decline(settings: Settings, months: tuple[float, ...], **strategy):
    """Minimum TWAP price decline that breaches the safety threshold by each month."""
    from runway.analysis.critical_decline import critical_decline_table

    params = settings.base_parameters(**strategy)
    try:
        rows = critical_decline_table(
            params,
            months or tuple(settings.decline_months),
            settings.horizon_months,
            settings.step_months,
        )
    except SimulationError as e:
        raise click.ClickException(str(e))

    click.echo(f"{params.twap_period_months:g}-month TWAP, reference price {params.unit_price:,.2f}")
    for row in rows:
        if row["critical_decline"] is None:
            click.echo(f"  by month {row['month']:g}: no breach below a 100% decline")
        else:
            click.echo(
                f"  by month {row['month']:g}: {row['critical_decline'] * 100:.1f}% decline "
                f"(price {row['breakeven_price']:,.2f})"
            )


@cli.command("decline-path")
@_strategy_options
@click.option("--decline", "-d", type=float, required=True,
              help="TWAP price decline as a fraction (0.25 = 25%)")
@click.option("--period", "-p", "twap_period_months", type=float, default=None,
              help="TWAP period in months")
@click.pass_obj
def decline_path(settings: Settings, decline: float, **strategy):
    """Expected balance when the TWAP executes at a declined price."""
    from runway.analysis.critical_decline import decline_trajectory
    from runway.analysis.report import describe_crossover, format_millions

    params = settings.base_parameters(**strategy)
    try:
        scenario = decline_trajectory(
            params,
            decline,
            settings.horizon_months,
            settings.step_months,
            settings.sample_interval,
        )
    except SimulationError as e:
        raise click.ClickException(str(e))

    price = params.unit_price * (1.0 - scenario.decline)
    click.echo(
        f"{params.twap_period_months:g}-month TWAP at {scenario.decline * 100:.1f}% decline "
        f"(price {price:,.2f})"
    )
    click.echo(f"Expected balance breaches the minimum {describe_crossover(scenario.breach_month)}")
    for month, balance in zip(scenario.months, scenario.balances):
        if month == int(month):
            click.echo(f"  month {month:>4g}: {format_millions(balance)}")


@cli.command()
@click.option("--host", default=None, help="Bind host (default from settings)")
@click.option("--port", type=int, default=None, help="Bind port (default from settings)")
@click.pass_obj
def serve(settings: Settings, host: str | None, port: int | None):
    """Start the HTTP API."""
    import uvicorn

    from runway.web.app import create_app

    host = host or settings.api_host
    port = port or settings.api_port
    click.echo(f"Serving runway API on {host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    cli()

"""Click CLI commands for chart-signals."""

from __future__ import annotations

import asyncio
import uuid
from typing import TYPE_CHECKING

import click

from chart_signals.config import AppConfig
from chart_signals.utils.logging import get_logger, set_correlation_id, setup_logging

if TYPE_CHECKING:
    from chart_signals.engine.cycle import ChartState
    from chart_signals.engine.signals import SignalReport
    from chart_signals.engine.snapshot import TechnicalSnapshot
    from chart_signals.series.types import Resolution

log = get_logger(__name__)


def _load_config() -> AppConfig:
    try:
        cfg = AppConfig()
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    setup_logging(level=cfg.log_level, log_format=cfg.log_format)
    set_correlation_id(uuid.uuid4().hex[:12])
    return cfg


def _fmt(value: float | None, digits: int = 2) -> str:
    return "N/A" if value is None else f"{value:.{digits}f}"


@click.group()
def cli() -> None:
    """Chart-signals: indicator alignment and trading signals for stock charts."""


@cli.command()
@click.argument("symbol")
@click.option(
    "--resolution",
    default=None,
    help="Chart resolution label, e.g. 1D, 5D, 1M, 3M, 6M, 1Y, 5Y.",
)
@click.option("--sma", "sma_periods", multiple=True, type=int, help="SMA period.")
@click.option("--rsi", "rsi_periods", multiple=True, type=int, help="RSI period.")
@click.option(
    "--rows", default=5, show_default=True, type=int, help="Records to print."
)
def chart(
    symbol: str,
    resolution: str | None,
    sma_periods: tuple[int, ...],
    rsi_periods: tuple[int, ...],
    rows: int,
) -> None:
    """Run one chart cycle: fetch, align, and derive signals."""
    from chart_signals.engine.errors import PrimaryFetchFailure
    from chart_signals.engine.window import get_resolution

    cfg = _load_config()
    try:
        res = get_resolution(resolution or cfg.chart.default_resolution)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--resolution") from e

    try:
        state = asyncio.run(
            _run_chart(cfg, symbol.upper(), res, sma_periods, rsi_periods)
        )
    except PrimaryFetchFailure as e:
        raise click.ClickException(
            f"No data for {symbol.upper()} at {res.label}: {e.reason}"
        ) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    _print_chart(state, rows)


async def _run_chart(
    cfg: AppConfig,
    symbol: str,
    resolution: Resolution,
    sma_periods: tuple[int, ...],
    rsi_periods: tuple[int, ...],
) -> ChartState | None:
    from chart_signals.engine.cycle import ChartSession, IndicatorToggles
    from chart_signals.series.http.source import HttpSeriesSource
    from chart_signals.series.types import NamedSeries

    toggles = IndicatorToggles.from_config(cfg.chart)
    for period in sma_periods:
        toggles.enable(NamedSeries.sma(period))
    for period in rsi_periods:
        toggles.enable(NamedSeries.rsi(period))

    async with HttpSeriesSource(cfg.source) as source:
        session = ChartSession(
            source,
            symbol,
            toggles=toggles,
            signal_config=cfg.signals,
            fetch_timeout=cfg.chart.fetch_timeout_seconds,
        )
        return await session.refresh(resolution)


def _print_chart(state: ChartState | None, rows: int) -> None:
    from chart_signals.utils.time import format_timestamp

    if state is None:
        return
    frame = state.frame
    click.echo(f"\n{state.symbol} @ {state.resolution.label}")
    click.echo(
        f"Window: {format_timestamp(state.window.start)} "
        f"to {format_timestamp(state.window.end)}"
    )
    if frame.is_empty:
        click.echo(f"No data available for {state.symbol}.")
        return

    click.echo(f"Records: {len(frame)}")
    if frame.failed:
        failed = ", ".join(sorted(named.label for named in frame.failed))
        click.echo(f"Unavailable: {failed}")

    columns = frame.series
    click.echo("")
    _echo_row(["Time", "Close", *(named.label for named in columns)])
    tail = frame.records[-rows:] if rows > 0 else ()
    for record in tail:
        _echo_row(
            [
                format_timestamp(record.timestamp),
                _fmt(record.price),
                *(_fmt(record.get(named)) for named in columns),
            ]
        )

    if state.signals is not None:
        _print_signals(state.signals)


def _echo_row(cells: list[str]) -> None:
    time_cell, *rest = cells
    click.echo(f"{time_cell:<22}" + "".join(f"{c:>10}" for c in rest))


def _print_signals(report: SignalReport) -> None:
    zone = report.oscillator_zone.value if report.oscillator_zone else "n/a"
    click.echo("\nSignals:")
    click.echo(f"  RSI:             {_fmt(report.rsi, 1)} ({zone})")
    click.echo(
        f"  SMA fast/slow:   {_fmt(report.sma_fast)} / {_fmt(report.sma_slow)}"
        f" ({report.trend_direction.value})"
    )
    click.echo(f"  Recommendation:  {report.recommendation}")


@cli.command()
@click.argument("symbol")
def signals(symbol: str) -> None:
    """Show the technical-analysis snapshot for one symbol."""
    cfg = _load_config()
    snapshot = asyncio.run(_run_snapshots(cfg, [symbol.upper()]))[0]
    click.echo(f"\n{snapshot.symbol} Technical Analysis")
    _print_signals(snapshot.signals)


@cli.command()
def scan() -> None:
    """Show technical-analysis snapshots for every watchlist symbol."""
    cfg = _load_config()
    snapshots = asyncio.run(_run_snapshots(cfg, cfg.watchlist))

    click.echo(
        f"\n{'Symbol':<8}{'RSI':>8}{'SMA fast':>12}{'SMA slow':>12}"
        f"  {'Zone':<11}{'Trend':<9}"
    )
    for snap in snapshots:
        zone = snap.signals.oscillator_zone
        click.echo(
            f"{snap.symbol:<8}{_fmt(snap.rsi, 1):>8}{_fmt(snap.sma_fast):>12}"
            f"{_fmt(snap.sma_slow):>12}  {zone.value if zone else 'n/a':<11}"
            f"{snap.signals.trend_direction.value:<9}"
        )


async def _run_snapshots(
    cfg: AppConfig,
    symbols: list[str],
) -> list[TechnicalSnapshot]:
    from chart_signals.engine.snapshot import fetch_snapshot
    from chart_signals.series.http.source import HttpSeriesSource

    async with HttpSeriesSource(cfg.source) as source:
        snapshots = list(
            await asyncio.gather(
                *(
                    fetch_snapshot(
                        source,
                        symbol,
                        signal_config=cfg.signals,
                        widget_config=cfg.widget,
                        fetch_timeout=cfg.chart.fetch_timeout_seconds,
                    )
                    for symbol in symbols
                )
            )
        )
    log.info(
        "snapshots_fetched",
        symbols=len(snapshots),
        without_rsi=[s.symbol for s in snapshots if s.rsi is None],
    )
    return snapshots


@cli.command()
def resolutions() -> None:
    """List chart resolutions."""
    from chart_signals.engine.window import RESOLUTIONS

    click.echo(f"{'Label':<7}{'Token':<7}{'Days':>6}")
    for res in RESOLUTIONS:
        click.echo(f"{res.label:<7}{res.token:<7}{res.days:>6}")


@cli.command()
def config() -> None:
    """Show current configuration."""
    cfg = _load_config()

    click.echo("=== Chart-Signals Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo("")

    click.echo("[Source]")
    click.echo(f"  Base URL:   {cfg.source.base_url}")
    click.echo(f"  API Key:    {'set' if cfg.source.api_key else 'not set'}")
    click.echo(f"  Timeout:    {cfg.source.timeout_seconds}s")
    click.echo("")

    click.echo("[Signals]")
    click.echo(f"  RSI Period:       {cfg.signals.rsi_period}")
    click.echo(f"  SMA Fast/Slow:    {cfg.signals.sma_fast}/{cfg.signals.sma_slow}")
    click.echo(f"  Overbought:       {cfg.signals.overbought}")
    click.echo(f"  Oversold:         {cfg.signals.oversold}")
    click.echo("")

    click.echo("[Chart]")
    click.echo(f"  Default Resolution:  {cfg.chart.default_resolution}")
    click.echo(f"  SMA Periods:         {cfg.chart.sma_periods}")
    click.echo(f"  RSI Periods:         {cfg.chart.rsi_periods}")
    click.echo("")

    click.echo(f"Watchlist:    {', '.join(cfg.watchlist)}")

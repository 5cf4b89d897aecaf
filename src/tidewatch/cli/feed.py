"""Feed acquisition CLI commands."""

from __future__ import annotations

import asyncio

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tidewatch.cli.error_handler import handle_cli_error
from tidewatch.cli.formatting import (
    HEALTH_STYLES,
    REGIME_STYLES,
    STATUS_STYLES,
    direction_arrow,
    format_number,
    format_percent,
    format_price,
    sparkline,
)
from tidewatch.cli.utils import async_command
from tidewatch.domain.models.configuration import AcquisitionConfig
from tidewatch.domain.models.regime import FeedSnapshot
from tidewatch.infrastructure.analysis.observations import latest_valid_value
from tidewatch.infrastructure.containers import get_container

logger = structlog.get_logger(__name__)

feed_app = typer.Typer(help="Acquire series and score the liquidity regime")
console = Console()


def _series_table(snapshot: FeedSnapshot, config: AcquisitionConfig) -> Table:
    table = Table(title="Series", show_lines=False)
    table.add_column("Series")
    table.add_column("Status")
    table.add_column("Latest", justify="right")
    table.add_column("As of")
    table.add_column("Trend")

    for spec in config.series:
        status = snapshot.statuses.get(spec.series_id)
        observations = snapshot.series.get(spec.series_id, [])
        status_text = (
            f"[{STATUS_STYLES[status]}]{status.value}[/{STATUS_STYLES[status]}]"
            if status is not None
            else "-"
        )
        as_of = observations[-1].timestamp if observations else "-"
        table.add_row(
            f"{spec.label or spec.series_id} ({spec.series_id})",
            status_text,
            format_number(latest_valid_value(observations)),
            as_of,
            sparkline(snapshot.metrics.trends.get(spec.series_id)),
        )

    spot_status = snapshot.statuses.get(config.spot_series_id)
    spot_style = STATUS_STYLES[spot_status] if spot_status is not None else "dim"
    table.add_row(
        f"Spot price ({config.spot_series_id})",
        f"[{spot_style}]{spot_status.value if spot_status else '-'}[/{spot_style}]",
        format_price(snapshot.spot.price if snapshot.spot else None),
        snapshot.spot.captured_at.strftime("%Y-%m-%d %H:%M") if snapshot.spot else "-",
        "",
    )
    return table


def _metrics_panel(snapshot: FeedSnapshot) -> Panel:
    m = snapshot.metrics
    regime_style = REGIME_STYLES[m.regime]
    lines = [
        f"Liquidity YoY:    {format_percent(m.liquidity_yoy)} {direction_arrow(m.liquidity_yoy)}",
        f"Liquidity 3m:     {format_percent(m.liquidity_3m_change)} "
        f"{direction_arrow(m.liquidity_3m_change)}",
        f"Real GDP YoY:     {format_percent(m.output_yoy)} {direction_arrow(m.output_yoy)}",
        f"CPI YoY:          {format_percent(m.price_level_yoy)}",
        f"Productivity YoY: {format_percent(m.productivity_yoy)} "
        f"{direction_arrow(m.productivity_yoy)}",
        f"Real rate:        {format_percent(m.real_rate)}",
        f"Policy gap:       {format_percent(m.policy_gap)}",
        f"Real growth:      {format_percent(m.real_growth)}",
        "",
        f"Tides {format_number(m.tides)} | Waves {format_number(m.waves)} | "
        f"Seafloor {format_number(m.seafloor)}",
        f"Composite [{regime_style}]{format_number(m.composite)} "
        f"{m.regime.value}[/{regime_style}] | Current {m.current.value}",
        "",
        m.outlook,
    ]
    return Panel("\n".join(lines), title="Liquidity regime", border_style="blue")


def render_snapshot(snapshot: FeedSnapshot, config: AcquisitionConfig) -> None:
    console.print(_series_table(snapshot, config))
    console.print(_metrics_panel(snapshot))
    health_style = HEALTH_STYLES[snapshot.health]
    footer = f"Feed health: [{health_style}]{snapshot.health.value}[/{health_style}]"
    if snapshot.last_updated is not None:
        footer += f"  Last updated: {snapshot.last_updated.strftime('%Y-%m-%d %H:%M:%S %Z')}"
    if snapshot.retry_pending:
        footer += "  (retry pending)"
    console.print(footer)


@feed_app.command("refresh")
@async_command
async def refresh(
    wait_retries: bool = typer.Option(
        False,
        "--wait-retries/--no-wait-retries",
        help="Keep running until scheduled retry rounds for failed series have finished",
    ),
) -> None:
    """Run one full acquisition cycle and print the regime summary."""
    container = get_container()
    coordinator = container.acquisition_coordinator()
    config = container.acquisition_config()
    try:
        with console.status("[bold blue]Fetching series..."):
            snapshot = await coordinator.run_cycle()
            if wait_retries and snapshot.retry_pending:
                await coordinator.wait_for_retries()
                snapshot = coordinator.snapshot()
        render_snapshot(snapshot, config)
    except Exception as e:
        handle_cli_error(e, context={"command": "refresh"})
    finally:
        await coordinator.aclose()


@feed_app.command("watch")
@async_command
async def watch(
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between full acquisition cycles. Default: TIDEWATCH_REFRESH_INTERVAL_SECONDS",
    ),
    cycles: int | None = typer.Option(
        None, "--cycles", "-n", help="Stop after this many cycles. Default: run forever"
    ),
) -> None:
    """Run full acquisition cycles on a fixed interval."""
    container = get_container()
    coordinator = container.acquisition_coordinator()
    config = container.acquisition_config()
    period = interval if interval is not None else container.settings().refresh_interval_seconds

    completed = 0
    try:
        while cycles is None or completed < cycles:
            snapshot = await coordinator.run_cycle()
            completed += 1
            render_snapshot(snapshot, config)
            logger.info("Watch cycle completed", cycle=completed, health=snapshot.health.value)
            if cycles is not None and completed >= cycles:
                break
            await asyncio.sleep(period)
    except Exception as e:
        handle_cli_error(e, context={"command": "watch", "cycle": completed})
    finally:
        await coordinator.aclose()

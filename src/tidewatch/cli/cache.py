"""Cache inspection CLI commands."""

import typer
from rich.console import Console
from rich.table import Table

from tidewatch.cli.formatting import format_number, format_price
from tidewatch.infrastructure.analysis.observations import latest_valid_value
from tidewatch.infrastructure.containers import get_container

cache_app = typer.Typer(help="Inspect the last-known-good cache")
console = Console()


@cache_app.command("show")
def show_cache() -> None:
    """List cached series and the cached spot price."""
    container = get_container()
    store = container.cache_store()

    table = Table(title="Cached series")
    table.add_column("Series")
    table.add_column("Points", justify="right")
    table.add_column("Last timestamp")
    table.add_column("Latest value", justify="right")

    series_ids = store.cached_series_ids()
    for series_id in series_ids:
        observations = store.load(series_id)
        table.add_row(
            series_id,
            str(len(observations)),
            observations[-1].timestamp if observations else "-",
            format_number(latest_valid_value(observations)),
        )

    if series_ids:
        console.print(table)
    else:
        console.print("[dim]No cached series[/dim]")

    spot = store.load_spot()
    if spot is None:
        console.print("[dim]No cached spot price[/dim]")
    else:
        console.print(
            f"Spot price: {format_price(spot.price)} "
            f"(captured {spot.captured_at.strftime('%Y-%m-%d %H:%M:%S %Z')})"
        )

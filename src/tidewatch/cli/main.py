"""Tidewatch CLI entry point."""

import typer

from tidewatch import __version__
from tidewatch.cli.cache import cache_app
from tidewatch.cli.feed import feed_app
from tidewatch.infrastructure.config import get_settings
from tidewatch.infrastructure.logging_config import configure_logging

app = typer.Typer(help="Liquidity regime monitor", no_args_is_help=True)
app.add_typer(feed_app, name="feed")
app.add_typer(cache_app, name="cache")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tidewatch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level. Default: TIDEWATCH_LOG_LEVEL or INFO"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Tidewatch - macro liquidity regime monitor."""
    configure_logging(log_level or get_settings().log_level, json_output=json_logs)


if __name__ == "__main__":
    app()

"""CLI error reporting."""

from typing import Any, NoReturn

import structlog
import typer
from rich.console import Console

from tidewatch.domain.exceptions import TidewatchError

logger = structlog.get_logger(__name__)
error_console = Console(stderr=True)


def handle_cli_error(error: Exception, context: dict[str, Any] | None = None) -> NoReturn:
    """Log ``error``, print a short message and exit with status 1."""
    context = context or {}
    logger.error(
        "CLI command failed",
        error=str(error),
        error_type=type(error).__name__,
        **context,
    )
    if isinstance(error, TidewatchError):
        error_console.print(f"[bold red]Error:[/bold red] {error}")
    else:
        error_console.print(
            f"[bold red]Unexpected error ({type(error).__name__}):[/bold red] {error}"
        )
    raise typer.Exit(code=1)

"""Shared CLI helpers: exit codes, console output and logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_PARTIAL = 3

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure root logging for CLI runs.

    ``--verbose`` wins over ``--quiet``.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )
    logging.getLogger().setLevel(level)


def _success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")


def _info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {escape(message)}")


def _warning(message: str) -> None:
    err_console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def _error(message: str) -> None:
    err_console.print(f"[red]✗[/red] {escape(message)}")

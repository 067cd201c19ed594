"""Typer CLI entry point for quickchange.

This module only parses arguments and delegates to the api module and
the command groups under ``quickchange.commands``.
"""

import logging

import typer

from quickchange import __version__
from quickchange.cli_utils import _setup_logging, console
from quickchange.core.target import get_current_target

# Module logger
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="quickchange",
    help="Switch cargo and rustup mirrors and keep config backups",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"quickchange {__version__}", highlight=False)
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Switch cargo and rustup mirrors and keep config backups."""
    _setup_logging(verbose=verbose, quiet=quiet)
    logger.debug("quickchange %s, subcommand=%s", __version__, ctx.invoked_subcommand)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


@app.command("target")
def target_command() -> None:
    """Print the Rust target triple of this machine."""
    console.print(get_current_target(), highlight=False)


# ============================================================================
# Command groups
# ============================================================================

from quickchange.commands.backup import backup_app  # noqa: E402
from quickchange.commands.config_cmd import config_app  # noqa: E402
from quickchange.commands.env import env_app  # noqa: E402

app.add_typer(config_app, name="config")
app.add_typer(backup_app, name="backup")
app.add_typer(env_app, name="env")


if __name__ == "__main__":
    app()

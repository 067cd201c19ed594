"""Backup subcommand group for quickchange CLI.

Commands for snapshotting and restoring the cargo config file.
"""

import json
import logging
from datetime import datetime

import typer
from rich.table import Table

from quickchange import api
from quickchange.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    _error,
    _info,
    _success,
    console,
)
from quickchange.core.exceptions import ConfigParseError, QuickChangeError

logger = logging.getLogger(__name__)

CONFIG_OPTION_HELP = "Path to cargo config.toml (defaults to ~/.cargo/config.toml)"

backup_app = typer.Typer(
    name="backup",
    help="Create, restore and manage config backups",
    no_args_is_help=True,
)


def _fail(e: QuickChangeError) -> typer.Exit:
    _error(str(e))
    return typer.Exit(code=EXIT_CONFIG_ERROR if isinstance(e, ConfigParseError) else EXIT_ERROR)


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    return f"{size / 1024:.1f} KB"


@backup_app.command("list")
def backup_list(
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List backups, newest first."""
    try:
        entries = api.list_backups(config)
    except QuickChangeError as e:
        raise _fail(e) from None

    if as_json:
        payload = [entry.model_dump() for entry in entries]
        console.print_json(json.dumps(payload))
        return

    if not entries:
        _info("No backups found")
        return

    table = Table(title="Config backups")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Modified")
    table.add_column("Size", justify="right")
    for entry in entries:
        modified = datetime.fromtimestamp(entry.modified).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(entry.name, modified, _format_size(entry.size))
    console.print(table)


@backup_app.command("create")
def backup_create(
    label: str | None = typer.Option(None, "--label", "-l", help="Label for a manual backup"),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Snapshot the current config file."""
    try:
        entry = api.create_backup(config, label=label)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Created backup {entry.name}")


@backup_app.command("restore")
def backup_restore(
    name: str = typer.Argument(..., help="Backup file name"),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Overwrite the config with a backup."""
    try:
        api.restore_backup(name, config)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Restored config from {name}")


@backup_app.command("delete")
def backup_delete(
    name: str = typer.Argument(..., help="Backup file name"),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Delete one backup."""
    try:
        api.delete_backup(name, config)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Deleted backup {name}")


@backup_app.command("clear")
def backup_clear(
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every backup."""
    if not yes:
        typer.confirm("Delete all backups?", abort=True)
    try:
        count = api.clear_backups(config)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Deleted {count} backup(s)")


@backup_app.command("rename")
def backup_rename(
    old_name: str = typer.Argument(..., help="Current backup file name"),
    new_name: str = typer.Argument(..., help="New name (.toml is appended if missing)"),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Rename a backup."""
    try:
        entry = api.rename_backup(old_name, new_name, config)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Renamed {old_name} to {entry.name}")


@backup_app.command("dir")
def backup_dir(
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Print the backup directory."""
    console.print(str(api.get_backup_dir(config)), soft_wrap=True, markup=False, highlight=False)

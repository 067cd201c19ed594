"""Config subcommand group: inspect, import, export and switch mirrors."""

import logging

import typer

from quickchange import api
from quickchange.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    _error,
    _info,
    _success,
    console,
)
from quickchange.core.config.mirrors import CRATES_MIRRORS, apply_crates_mirror, detect_crates_mirror
from quickchange.core.exceptions import ConfigError, QuickChangeError

logger = logging.getLogger(__name__)

CONFIG_OPTION_HELP = "Path to cargo config.toml (defaults to ~/.cargo/config.toml)"

config_app = typer.Typer(
    name="config",
    help="Inspect and edit the cargo config file",
    no_args_is_help=True,
)


def _fail(e: QuickChangeError) -> typer.Exit:
    _error(str(e))
    return typer.Exit(code=EXIT_CONFIG_ERROR if isinstance(e, ConfigError) else EXIT_ERROR)


@config_app.command("path")
def config_path(
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Print the resolved config file path."""
    console.print(str(api.get_config_path(config)), soft_wrap=True, markup=False, highlight=False)


@config_app.command("show")
def config_show(
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Print the config as it would be saved."""
    try:
        document = api.get_config(config)
        text = api.preview_config(document)
    except QuickChangeError as e:
        raise _fail(e) from None

    if not text.strip():
        _info("Config is empty")
        return
    console.print(text, end="", soft_wrap=True, markup=False, highlight=False)


@config_app.command("import")
def config_import(
    source: str = typer.Argument(..., help="TOML file to import"),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
    backup: bool = typer.Option(
        True, "--backup/--no-backup", help="Snapshot the current config before overwriting"
    ),
) -> None:
    """Replace the config with the content of another file."""
    try:
        document = api.import_config(source)
        if backup and api.get_config_path(config).is_file():
            entry = api.create_backup(config, label="before-import")
            _info(f"Backed up current config as {entry.name}")
        target = api.save_config(document, config)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Imported {source} into {target}")


@config_app.command("export")
def config_export(
    destination: str = typer.Argument(..., help="File to write"),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Write the config to another file."""
    try:
        target = api.export_config(destination, api.get_config(config))
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Exported config to {target}")


@config_app.command("mirror")
def config_mirror(
    mirror_id: str | None = typer.Argument(
        None, help="Mirror id to switch to; omit to show the active mirror"
    ),
    config: str | None = typer.Option(
        None, "--config", "-c", envvar="QUICKCHANGE_CONFIG", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Show or switch the crates.io source mirror."""
    try:
        document = api.get_config(config)
    except QuickChangeError as e:
        raise _fail(e) from None

    if mirror_id is None:
        active = detect_crates_mirror(document)
        for mirror in CRATES_MIRRORS:
            marker = "*" if mirror.id == active else " "
            console.print(f"{marker} {mirror.id:<10} {mirror.name}", highlight=False)
        if active == "custom":
            console.print("* custom     (user-defined source replacement)", highlight=False)
        return

    try:
        updated = apply_crates_mirror(document, mirror_id)
    except KeyError:
        known = ", ".join(m.id for m in CRATES_MIRRORS)
        _error(f"Unknown mirror '{mirror_id}'. Known mirrors: {known}")
        raise typer.Exit(code=EXIT_ERROR) from None

    try:
        api.save_config(updated, config)
    except QuickChangeError as e:
        raise _fail(e) from None
    _success(f"Switched crates.io source to {mirror_id}")

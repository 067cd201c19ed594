"""Env subcommand group: rustup mirror variables at user and system scope."""

import logging

import typer
from rich.markup import escape
from rich.table import Table

from quickchange import api
from quickchange.cli_utils import (
    EXIT_ERROR,
    EXIT_PARTIAL,
    _error,
    _info,
    _success,
    _warning,
    console,
)
from quickchange.core.config.mirrors import RUSTUP_MIRRORS, detect_rustup_mirror, get_rustup_mirror
from quickchange.core.env import (
    MANAGED_KEYS,
    RUSTUP_DIST_SERVER,
    RUSTUP_UPDATE_ROOT,
    EnvSource,
    EnvWriteResult,
    ScopeValue,
)
from quickchange.core.exceptions import QuickChangeError
from quickchange.core.privilege import elevation_hint

logger = logging.getLogger(__name__)

env_app = typer.Typer(
    name="env",
    help="Persistent RUSTUP_DIST_SERVER / RUSTUP_UPDATE_ROOT",
    no_args_is_help=True,
)


def _cell(scope: ScopeValue) -> str:
    if scope.error:
        return f"[red]error: {escape(scope.error)}[/red]"
    if scope.value is None:
        return "[dim]unset[/dim]"
    suffix = " [dim](session)[/dim]" if scope.source == "session" else ""
    return f"{escape(scope.value)}{suffix}"


@env_app.command("status")
def env_status(
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show both variables at user and system scope."""
    status = api.get_rustup_env_status()

    if as_json:
        console.print_json(status.model_dump_json())
        return

    table = Table(title="Rustup mirror variables")
    table.add_column("Variable", style="cyan", no_wrap=True)
    table.add_column("User")
    table.add_column("System")
    for key in MANAGED_KEYS:
        key_status = status.for_key(key)
        name = f"{key} [yellow](conflict)[/yellow]" if key_status.conflict else key
        table.add_row(name, _cell(key_status.user), _cell(key_status.system))
    console.print(table)

    mirror = detect_rustup_mirror(status.dist.effective, status.root.effective)
    _info(f"Active mirror: {mirror}")


@env_app.command("effective")
def env_effective() -> None:
    """Print the value each variable resolves to (user over system)."""
    for key, value in api.get_effective_rustup_env().items():
        console.print(f"{key}={value or ''}", highlight=False, markup=False)


def _persisted(scope: ScopeValue) -> str | None:
    return scope.value if scope.source == EnvSource.PERSISTED else None


def _report(result: EnvWriteResult) -> int:
    if result.user.ok:
        _success("User scope updated")
    else:
        _error(f"User scope failed: {result.user.error or 'unknown error'}")

    if result.system.skipped:
        _warning("System scope skipped (administrator rights required)")
        _info(elevation_hint(False))
    elif result.system.ok:
        _success("System scope updated")
    else:
        _error(f"System scope failed: {result.system.error or 'unknown error'}")

    system_failed = not result.system.ok
    if not result.user.ok and (system_failed or result.system.skipped):
        return EXIT_ERROR
    if not result.user.ok or system_failed:
        return EXIT_PARTIAL
    return 0


@env_app.command("set")
def env_set(
    dist: str | None = typer.Option(
        None, "--dist", help=f"{RUSTUP_DIST_SERVER} value (kept if omitted, empty clears)"
    ),
    root: str | None = typer.Option(
        None, "--root", help=f"{RUSTUP_UPDATE_ROOT} value (kept if omitted, empty clears)"
    ),
    mirror: str | None = typer.Option(
        None, "--mirror", "-m", help="Preset mirror id (overrides --dist/--root)"
    ),
    clear: bool = typer.Option(False, "--clear", help="Remove both variables"),
) -> None:
    """Persist the variables (user scope always, system scope when elevated)."""
    if mirror is not None:
        try:
            preset = get_rustup_mirror(mirror)
        except KeyError:
            known = ", ".join(m.id for m in RUSTUP_MIRRORS)
            _error(f"Unknown mirror '{mirror}'. Known mirrors: {known}")
            raise typer.Exit(code=EXIT_ERROR) from None
        dist, root = preset.dist or None, preset.root or None
    elif clear:
        dist, root = None, None
    elif dist is None and root is None:
        _error("Nothing to write: pass --dist/--root, --mirror or --clear")
        raise typer.Exit(code=EXIT_ERROR)
    elif dist is None or root is None:
        # keep the persisted user value of the variable that was not given
        status = api.get_rustup_env_status()
        if dist is None:
            dist = _persisted(status.dist.user)
        else:
            root = _persisted(status.root.user)
        logger.debug("Filled omitted variable from user scope: dist=%s root=%s", dist, root)

    try:
        result = api.set_rustup_env(dist, root)
    except QuickChangeError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None

    code = _report(result)
    if code:
        raise typer.Exit(code=code)


@env_app.command("admin")
def env_admin() -> None:
    """Show whether this process can write system scope."""
    status = api.get_admin_status()
    if status.is_admin:
        _success("Running elevated: system scope is writable")
    else:
        _warning("Not elevated: only user scope will be written")
        if status.hint:
            _info(status.hint)

"""Call contracts for front-ends (GUI bridge, CLI).

Each function resolves an optional user-supplied config path, performs
one operation and returns a plain value. Failures raise a
``QuickChangeError`` whose message is meant to be shown verbatim.

Usage:
    from quickchange import api

    config = api.get_config()
    api.create_backup(label="before mirror switch")
    api.save_config(config)
"""

import logging
from pathlib import Path

from quickchange.core.backups import BackupEntry, BackupStore
from quickchange.core.config import (
    CargoConfig,
    import_config as _import_config,
    load_config,
    save_config as _save_config,
    serialize_config,
)
from quickchange.core.env import EnvStatus, EnvStatusResolver, EnvWriteResult
from quickchange.core.paths import expand_path, get_backup_dir as _get_backup_dir, resolve_config_path
from quickchange.core.privilege import AdminStatus, get_admin_status as _get_admin_status
from quickchange.core.target import get_current_target

logger = logging.getLogger(__name__)

__all__ = [
    "clear_backups",
    "create_backup",
    "delete_backup",
    "export_config",
    "get_admin_status",
    "get_backup_dir",
    "get_config",
    "get_config_path",
    "get_current_target",
    "get_effective_rustup_env",
    "get_rustup_env_status",
    "import_config",
    "list_backups",
    "preview_config",
    "rename_backup",
    "restore_backup",
    "save_config",
    "set_rustup_env",
]


def get_config_path(path: str | None = None) -> Path:
    """Resolved config file path."""
    return resolve_config_path(path)


def get_backup_dir(path: str | None = None) -> Path:
    """Resolved backup directory for the config file."""
    return _get_backup_dir(resolve_config_path(path))


def get_config(path: str | None = None) -> CargoConfig:
    """Load the config, creating an empty file if none exists yet."""
    return load_config(resolve_config_path(path), create_missing=True)


def save_config(config: CargoConfig, path: str | None = None) -> Path:
    """Save the config atomically and return where it was written."""
    target = resolve_config_path(path)
    _save_config(config, target)
    return target


def preview_config(config: CargoConfig) -> str:
    """TOML text that ``save_config`` would write."""
    return serialize_config(config)


def import_config(path: str) -> CargoConfig:
    """Load a config document from an arbitrary existing file."""
    return _import_config(expand_path(path))


def export_config(path: str, config: CargoConfig) -> Path:
    """Save a config document to an arbitrary file."""
    target = expand_path(path)
    _save_config(config, target)
    return target


def _store(path: str | None) -> BackupStore:
    return BackupStore(resolve_config_path(path))


def list_backups(path: str | None = None) -> list[BackupEntry]:
    """Backups of the config, newest first."""
    return _store(path).list()


def create_backup(path: str | None = None, label: str | None = None) -> BackupEntry:
    """Snapshot the config file."""
    return _store(path).create(label)


def restore_backup(name: str, path: str | None = None) -> None:
    """Replace the config file with a validated snapshot."""
    _store(path).restore(name)


def delete_backup(name: str, path: str | None = None) -> None:
    """Delete one snapshot."""
    _store(path).delete(name)


def clear_backups(path: str | None = None) -> int:
    """Delete all snapshots and return how many were removed."""
    return _store(path).clear()


def rename_backup(old_name: str, new_name: str, path: str | None = None) -> BackupEntry:
    """Rename a snapshot."""
    return _store(path).rename(old_name, new_name)


def get_rustup_env_status(resolver: EnvStatusResolver | None = None) -> EnvStatus:
    """User/system status of the managed rustup variables."""
    return (resolver or EnvStatusResolver()).status()


def get_effective_rustup_env(resolver: EnvStatusResolver | None = None) -> dict[str, str | None]:
    """Effective value of each managed rustup variable."""
    return (resolver or EnvStatusResolver()).effective_all()


def set_rustup_env(
    dist: str | None,
    root: str | None,
    resolver: EnvStatusResolver | None = None,
) -> EnvWriteResult:
    """Persist the managed rustup variables at every permitted scope."""
    return (resolver or EnvStatusResolver()).write(dist, root)


def get_admin_status() -> AdminStatus:
    """Whether the process is elevated, with a re-launch hint if not."""
    return _get_admin_status()

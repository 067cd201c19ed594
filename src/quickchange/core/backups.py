"""Timestamped backup snapshots of the cargo config file.

Backups live in a ``quickchange-backups`` directory beside the config
file, one ``.toml`` file per snapshot:

- ``manual-<label>-<millis>.toml`` for snapshots created with a label
- ``auto-<millis>.toml`` otherwise

Every name that comes from a caller is reduced to its bare file name
before it touches the filesystem, so ``../../etc/passwd`` addresses
``passwd`` inside the backup directory and nothing else.

Usage:
    from quickchange.core.backups import BackupStore

    store = BackupStore(config_path)
    entry = store.create("before mirror switch")
    store.restore(entry.name)
"""

from __future__ import annotations

import logging
import os
import shutil
import unicodedata
from pathlib import Path, PurePosixPath

from pydantic import BaseModel

from quickchange.core.config import parse_config
from quickchange.core.exceptions import (
    BackupError,
    BackupNotFoundError,
    ConfigNotFoundError,
    InvalidBackupNameError,
)
from quickchange.core.io import atomic_write, now_millis
from quickchange.core.paths import get_backup_dir

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".toml"
LABEL_FALLBACK = "custom"
_RESERVED_CHARS = frozenset('<>:"/\\|?*')


class BackupEntry(BaseModel):
    """A stored snapshot.

    Attributes:
        name: File name (also the display name).
        path: Absolute path to the snapshot.
        modified: Last-modified time in epoch seconds.
        size: Size in bytes.

    """

    name: str
    path: str
    modified: int
    size: int


def sanitize_label(label: str) -> str:
    """Make a user label safe to embed in a file name.

    Control characters are dropped. Whitespace and ``< > : " / \\ | ? *``
    become ``-``, with a run of such characters collapsing into a single
    dash. Leading and trailing dashes are trimmed.

    Args:
        label: Raw label.

    Returns:
        Sanitized label, or ``custom`` if nothing usable remains.

    Example:
        >>> sanitize_label("My Backup: v1.0!")
        'My-Backup-v1.0!'
        >>> sanitize_label("///")
        'custom'

    """
    out: list[str] = []
    replacing = False
    for ch in label:
        if unicodedata.category(ch) == "Cc":
            continue
        if ch.isspace() or ch in _RESERVED_CHARS:
            if not replacing:
                out.append("-")
            replacing = True
            continue
        out.append(ch)
        replacing = False

    cleaned = "".join(out).strip("-")
    return cleaned or LABEL_FALLBACK


def bare_name(name: str) -> str:
    """Reduce a caller-supplied backup name to its final path component.

    Both ``/`` and ``\\`` count as separators regardless of OS.

    Raises:
        InvalidBackupNameError: If no usable file name remains.

    """
    candidate = PurePosixPath(name.strip().replace("\\", "/")).name
    if candidate in ("", ".", ".."):
        raise InvalidBackupNameError(f"Invalid backup name: {name!r}")
    return candidate


class BackupStore:
    """Create, list, restore, rename and delete config snapshots.

    The store holds no handles; every method works on full paths, so a
    store object is cheap and safe to create per call.

    Attributes:
        config_path: Live config file.
        backup_dir: Directory holding the snapshots (created on first write).

    """

    def __init__(self, config_path: Path, backup_dir: Path | None = None) -> None:
        """Initialize the store for a resolved config path."""
        self.config_path = config_path
        self.backup_dir = backup_dir if backup_dir is not None else get_backup_dir(config_path)

    def _entry(self, path: Path, stat: os.stat_result | None = None) -> BackupEntry:
        if stat is None:
            stat = path.stat()
        return BackupEntry(
            name=path.name,
            path=str(path),
            modified=int(stat.st_mtime),
            size=stat.st_size,
        )

    def _resolve(self, name: str) -> Path:
        path = self.backup_dir / bare_name(name)
        # bare_name already strips separators; this guards odd filesystems
        if path.parent != self.backup_dir:
            raise InvalidBackupNameError(f"Invalid backup name: {name!r}")
        return path

    def _existing(self, name: str) -> Path:
        path = self._resolve(name)
        if not path.is_file():
            raise BackupNotFoundError(f"Backup not found: {path.name}")
        return path

    def list(self) -> list[BackupEntry]:
        """List snapshots, most recently modified first.

        Only regular ``.toml`` files directly in the backup directory are
        returned. A missing directory yields an empty list.

        Raises:
            BackupError: If the directory exists but cannot be read.

        """
        if not self.backup_dir.is_dir():
            return []

        # sorted on nanosecond mtime; `modified` is whole seconds for display
        ranked: list[tuple[int, str, BackupEntry]] = []
        try:
            for path in self.backup_dir.iterdir():
                if path.suffix.lower() != BACKUP_SUFFIX or not path.is_file():
                    continue
                stat = path.stat()
                ranked.append((stat.st_mtime_ns, path.name, self._entry(path, stat)))
        except OSError as e:
            raise BackupError(f"Failed to read backup directory {self.backup_dir}: {e}") from e

        ranked.sort(key=lambda item: item[:2], reverse=True)
        return [entry for _, _, entry in ranked]

    def create(self, label: str | None = None) -> BackupEntry:
        """Snapshot the live config file.

        Args:
            label: Optional label; blank labels count as no label.

        Returns:
            The new snapshot.

        Raises:
            ConfigNotFoundError: If the live config file does not exist.
            BackupError: If the copy fails.

        """
        if not self.config_path.is_file():
            raise ConfigNotFoundError(f"Config file not found: {self.config_path}")

        if label is not None and label.strip():
            prefix = f"manual-{sanitize_label(label)}"
        else:
            prefix = "auto"

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            stamp = now_millis()
            target = self.backup_dir / f"{prefix}-{stamp}{BACKUP_SUFFIX}"
            while target.exists():
                stamp += 1
                target = self.backup_dir / f"{prefix}-{stamp}{BACKUP_SUFFIX}"
            shutil.copyfile(self.config_path, target)
            entry = self._entry(target)
        except OSError as e:
            raise BackupError(f"Failed to create backup of {self.config_path}: {e}") from e

        logger.info("Created backup %s", entry.name)
        return entry

    def restore(self, name: str) -> None:
        """Overwrite the live config with a snapshot's exact bytes.

        The snapshot must parse as a config document; a corrupt snapshot
        leaves the live file untouched.

        Raises:
            InvalidBackupNameError: If the name is unusable.
            BackupNotFoundError: If the snapshot does not exist.
            ConfigParseError: If the snapshot content is not a valid config.
            AtomicWriteError: If the live file cannot be replaced.

        """
        path = self._existing(name)
        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BackupError(f"Failed to read backup {path.name}: {e}") from e

        parse_config(content, path)
        atomic_write(self.config_path, content)
        logger.info("Restored config %s from backup %s", self.config_path, path.name)

    def delete(self, name: str) -> None:
        """Delete one snapshot.

        Raises:
            InvalidBackupNameError: If the name is unusable.
            BackupNotFoundError: If the snapshot does not exist.
            BackupError: If removal fails.

        """
        path = self._existing(name)
        try:
            path.unlink()
        except OSError as e:
            raise BackupError(f"Failed to delete backup {path.name}: {e}") from e
        logger.info("Deleted backup %s", path.name)

    def clear(self) -> int:
        """Delete every ``.toml`` snapshot and return how many were removed."""
        if not self.backup_dir.is_dir():
            return 0

        removed = 0
        try:
            for path in self.backup_dir.iterdir():
                if path.suffix.lower() == BACKUP_SUFFIX and path.is_file():
                    path.unlink()
                    removed += 1
        except OSError as e:
            raise BackupError(f"Failed to clear backups in {self.backup_dir}: {e}") from e

        logger.info("Cleared %d backups from %s", removed, self.backup_dir)
        return removed

    def rename(self, old_name: str, new_name: str) -> BackupEntry:
        """Rename a snapshot; ``.toml`` is appended to the new name if missing.

        Returns:
            The renamed snapshot.

        Raises:
            InvalidBackupNameError: If a name is unusable or the target exists.
            BackupNotFoundError: If the source snapshot does not exist.
            BackupError: If the rename fails.

        """
        source = self._existing(old_name)

        target_name = bare_name(new_name)
        if not target_name.lower().endswith(BACKUP_SUFFIX):
            target_name += BACKUP_SUFFIX
        target = self._resolve(target_name)

        if target.exists():
            raise InvalidBackupNameError(f"A backup named {target.name} already exists")

        try:
            source.rename(target)
        except OSError as e:
            raise BackupError(f"Failed to rename backup {source.name}: {e}") from e

        logger.info("Renamed backup %s -> %s", source.name, target.name)
        return self._entry(target)

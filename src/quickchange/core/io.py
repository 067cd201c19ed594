"""Shared I/O utilities for atomic file writes.

Readers must never observe a half-written config or profile file, so all
writes go through a temp file in the destination directory followed by a
rename. Windows refuses to rename onto an existing file in some
situations, so a failed rename removes the destination and retries once.
"""

import contextlib
import logging
import os
import time
from pathlib import Path
from typing import TextIO

from quickchange.core.exceptions import AtomicWriteError

__all__ = [
    "atomic_write",
    "now_millis",
]

logger = logging.getLogger(__name__)


def now_millis() -> int:
    """Return the current time as integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def _open_temp_for(path: Path) -> tuple[Path, TextIO]:
    """Exclusively create a temp file beside ``path``.

    The name carries the process id and the millisecond clock; the stamp
    is bumped until an exclusive create succeeds.
    """
    pid = os.getpid()
    stamp = now_millis()
    while True:
        candidate = path.parent / f".{path.name}.{pid}.{stamp}.tmp"
        try:
            return candidate, open(candidate, "x", encoding="utf-8", newline="")
        except FileExistsError:
            stamp += 1


def atomic_write(path: Path, content: str) -> None:
    """Write content to path atomically using temp file + rename.

    The existing file's permission bits are carried over to the new file;
    new files get the process default. Content is written as UTF-8 with
    no newline translation so text round-trips byte-for-byte.

    Args:
        path: Target file path. Parent directories are created.
        content: Content to write.

    Raises:
        AtomicWriteError: If the temp file cannot be created or written
            (including content that is not encodable as UTF-8), if the
            temp file disappears before the rename, or if both the rename
            and the remove-then-rename retry fail.

    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path, f = _open_temp_for(path)
    except OSError as e:
        raise AtomicWriteError(f"Failed to create temp file beside {path}: {e}") from e

    try:
        with f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            with contextlib.suppress(OSError):
                os.chmod(temp_path, path.stat().st_mode & 0o777)
    except (OSError, UnicodeError) as e:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise AtomicWriteError(f"Failed to write temp file {temp_path}: {e}") from e

    try:
        os.replace(temp_path, path)
    except OSError as original:
        # Only a rename refused by an existing destination is retried; a
        # vanished temp file leaves the destination alone.
        if not temp_path.exists():
            raise AtomicWriteError(
                f"Failed to replace {path}: temp file {temp_path} is gone ({original})"
            ) from original
        logger.warning("Rename onto %s failed (%s), removing destination and retrying", path, original)
        try:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
            os.replace(temp_path, path)
        except OSError as retry:
            with contextlib.suppress(OSError):
                temp_path.unlink()
            raise AtomicWriteError(
                f"Failed to replace {path}: {retry} (original error: {original})"
            ) from retry

    logger.debug("Atomically wrote %d chars to %s", len(content), path)

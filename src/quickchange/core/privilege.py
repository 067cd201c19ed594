"""Elevation detection and re-launch hints.

System-scope environment writes need administrator (Windows) or root
(macOS/Linux). The probe never raises: if it cannot run, the process is
treated as not elevated.
"""

import logging
import os
import shlex
import sys
from pathlib import Path

from pydantic import BaseModel

from quickchange.core.exceptions import HelperProcessError
from quickchange.core.platform_command import IS_WINDOWS, run_helper

logger = logging.getLogger(__name__)

# "net session" only succeeds from an elevated token
WINDOWS_PROBE = ["net", "session"]


class AdminStatus(BaseModel):
    """Elevation state of the current process.

    Attributes:
        is_admin: Whether the process is elevated.
        hint: How to re-launch elevated; empty when already elevated.

    """

    is_admin: bool
    hint: str = ""


def is_elevated() -> bool:
    """Return True if the current process holds administrator/root rights."""
    if IS_WINDOWS:
        try:
            run_helper(WINDOWS_PROBE)
        except HelperProcessError as e:
            logger.debug("Elevation probe failed, assuming not elevated: %s", e)
            return False
        return True

    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        return False
    return geteuid() == 0


def _current_executable() -> str:
    argv0 = sys.argv[0] if sys.argv else ""
    if argv0 and Path(argv0).is_file():
        return str(Path(argv0).resolve())
    return sys.executable


def elevation_hint(elevated: bool | None = None) -> str:
    """Return an instruction for re-launching elevated.

    Args:
        elevated: Known elevation state; probed when None.

    Returns:
        OS-appropriate instruction, or an empty string if already elevated.

    """
    if elevated is None:
        elevated = is_elevated()
    if elevated:
        return ""

    exe = _current_executable()
    if IS_WINDOWS:
        return f'Right-click "{exe}" and choose "Run as administrator"'
    return f"Re-run with sudo: sudo -E {shlex.quote(exe)}"


def get_admin_status() -> AdminStatus:
    """Probe elevation once and build the status with its hint."""
    elevated = is_elevated()
    return AdminStatus(is_admin=elevated, hint=elevation_hint(elevated))

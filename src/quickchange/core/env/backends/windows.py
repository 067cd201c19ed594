"""Windows backend: user and machine environment in the registry.

Values are read and written through PowerShell's
``[Environment]::Get/SetEnvironmentVariable`` in a helper process, so the
same code path works whether or not the Python process itself has
registry write access. After a write, ``WM_SETTINGCHANGE`` is broadcast
so Explorer and new consoles pick up the change without a reboot.
"""

import logging
from collections.abc import Callable, Mapping

from quickchange.core.env.backends.base import EnvironmentScopeBackend
from quickchange.core.env.models import EnvScope
from quickchange.core.platform_command import run_helper

logger = logging.getLogger(__name__)

POWERSHELL = ["powershell", "-NoProfile", "-NonInteractive", "-Command"]

SCOPE_TARGETS: dict[EnvScope, str] = {
    EnvScope.USER: "User",
    EnvScope.SYSTEM: "Machine",
}

_HWND_BROADCAST = 0xFFFF
_WM_SETTINGCHANGE = 0x001A
_SMTO_ABORTIFHUNG = 0x0002
_BROADCAST_TIMEOUT_MS = 5000


def ps_quote(value: str | None) -> str:
    """Render a PowerShell literal: single-quoted string, or ``$null``."""
    if value is None:
        return "$null"
    return "'" + value.replace("'", "''") + "'"


def broadcast_environment_change() -> None:
    """Tell running processes that the environment block changed."""
    import ctypes

    result = ctypes.windll.user32.SendMessageTimeoutW(  # type: ignore[attr-defined]
        _HWND_BROADCAST,
        _WM_SETTINGCHANGE,
        0,
        "Environment",
        _SMTO_ABORTIFHUNG,
        _BROADCAST_TIMEOUT_MS,
        None,
    )
    if not result:
        raise OSError("SendMessageTimeoutW(WM_SETTINGCHANGE) failed")


class WindowsRegistryBackend(EnvironmentScopeBackend):
    """Registry-backed environment scopes.

    Args:
        elevated: Elevation probe override.
        runner: Helper process runner returning decoded stdout.
        broadcast: Environment-change notifier.

    """

    def __init__(
        self,
        elevated: Callable[[], bool] | None = None,
        runner: Callable[[list[str]], str] = run_helper,
        broadcast: Callable[[], None] = broadcast_environment_change,
    ) -> None:
        super().__init__(elevated)
        self._runner = runner
        self._broadcast = broadcast

    @property
    def backend_name(self) -> str:
        return "windows-registry"

    def _powershell(self, script: str) -> str:
        # Ask PowerShell for UTF-8; decode_output still sniffs in case it answers in UTF-16
        return self._runner([*POWERSHELL, f"[Console]::OutputEncoding = [Text.Encoding]::UTF8; {script}"])

    def read(self, key: str, scope: EnvScope) -> str | None:
        target = SCOPE_TARGETS[scope]
        output = self._powershell(f"[Environment]::GetEnvironmentVariable({ps_quote(key)}, '{target}')")
        value = output.strip()
        return value or None

    def _write_scope(self, scope: EnvScope, values: Mapping[str, str | None]) -> None:
        target = SCOPE_TARGETS[scope]
        statements = [
            f"[Environment]::SetEnvironmentVariable({ps_quote(key)}, {ps_quote(value)}, '{target}')"
            for key, value in values.items()
        ]
        self._powershell("; ".join(statements))

    def _after_write(self) -> None:
        try:
            self._broadcast()
        except (OSError, AttributeError) as e:
            logger.warning("Environment change broadcast failed: %s", e)

"""Environment scope backends and the per-OS selection point.

Backend Registry:
    - WindowsRegistryBackend: registry via PowerShell helper (win32)
    - MacProfileBackend: managed block in zsh profiles (darwin)
    - LinuxProfileBackend: sourced variables files (everything else)
"""

import sys
from collections.abc import Callable

from quickchange.core.env.backends.base import EnvironmentScopeBackend, ProfileBackendMixin
from quickchange.core.env.backends.linux import LinuxProfileBackend
from quickchange.core.env.backends.macos import MacProfileBackend
from quickchange.core.env.backends.windows import WindowsRegistryBackend


def select_backend(
    platform: str | None = None,
    elevated: Callable[[], bool] | None = None,
) -> EnvironmentScopeBackend:
    """Create the backend for the running OS.

    Args:
        platform: ``sys.platform`` override.
        elevated: Elevation probe override.

    Returns:
        Backend instance.

    """
    platform = platform if platform is not None else sys.platform
    if platform == "win32":
        return WindowsRegistryBackend(elevated)
    if platform == "darwin":
        return MacProfileBackend(elevated)
    return LinuxProfileBackend(elevated)


__all__ = [
    "EnvironmentScopeBackend",
    "LinuxProfileBackend",
    "MacProfileBackend",
    "ProfileBackendMixin",
    "WindowsRegistryBackend",
    "select_backend",
]

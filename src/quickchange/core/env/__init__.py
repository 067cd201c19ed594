"""Persistent rustup mirror environment variables.

Manages exactly two variables, ``RUSTUP_DIST_SERVER`` and
``RUSTUP_UPDATE_ROOT``, at user and system scope.
"""

from quickchange.core.env.backends import (
    EnvironmentScopeBackend,
    LinuxProfileBackend,
    MacProfileBackend,
    WindowsRegistryBackend,
    select_backend,
)
from quickchange.core.env.models import (
    MANAGED_KEYS,
    RUSTUP_DIST_SERVER,
    RUSTUP_UPDATE_ROOT,
    EnvScope,
    EnvSource,
    EnvStatus,
    EnvWriteResult,
    KeyStatus,
    ScopeValue,
    ScopeWriteOutcome,
)
from quickchange.core.env.resolver import EnvStatusResolver

__all__ = [
    "MANAGED_KEYS",
    "RUSTUP_DIST_SERVER",
    "RUSTUP_UPDATE_ROOT",
    "EnvScope",
    "EnvSource",
    "EnvStatus",
    "EnvStatusResolver",
    "EnvWriteResult",
    "EnvironmentScopeBackend",
    "KeyStatus",
    "LinuxProfileBackend",
    "MacProfileBackend",
    "ScopeValue",
    "ScopeWriteOutcome",
    "WindowsRegistryBackend",
    "select_backend",
]

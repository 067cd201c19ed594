"""Unified view of the managed rustup variables.

Combines persisted values from the selected backend with the live
process environment:

- user scope: persisted value, else the session value (tagged ``session``)
- system scope: persisted value only; a session cannot represent machine state
- effective value: user scope, else system scope

A failed read on one scope is reported on that scope and never stops the
other reads.

Usage:
    from quickchange.core.env import EnvStatusResolver

    resolver = EnvStatusResolver()
    status = resolver.status()
    result = resolver.write("https://mirror/rustup", "https://mirror/rustup")
"""

import logging
import os
from collections.abc import MutableMapping

from quickchange.core.env.backends import EnvironmentScopeBackend, select_backend
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
    normalize_value,
)
from quickchange.core.exceptions import QuickChangeError

logger = logging.getLogger(__name__)


class EnvStatusResolver:
    """Resolves status and effective values for the managed variables.

    Args:
        backend: Scope backend. Defaults to the one for the running OS.
        environ: Process environment. Defaults to ``os.environ``; writes
            that applied are mirrored into it.

    """

    def __init__(
        self,
        backend: EnvironmentScopeBackend | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.backend = backend if backend is not None else select_backend()
        self.environ = environ if environ is not None else os.environ

    def _read_scope(self, key: str, scope: EnvScope) -> ScopeValue:
        try:
            value = normalize_value(self.backend.read(key, scope))
        except (QuickChangeError, OSError) as e:
            logger.warning("Failed to read %s (%s scope): %s", key, scope.value, e)
            return ScopeValue(error=str(e))
        if value is None:
            return ScopeValue()
        return ScopeValue(value=value, source=EnvSource.PERSISTED)

    def key_status(self, key: str) -> KeyStatus:
        """Status of one managed variable across both scopes."""
        user = self._read_scope(key, EnvScope.USER)
        if user.value is None:
            session = normalize_value(self.environ.get(key))
            if session is not None:
                user = user.model_copy(update={"value": session, "source": EnvSource.SESSION})
        system = self._read_scope(key, EnvScope.SYSTEM)
        return KeyStatus(user=user, system=system)

    def status(self) -> EnvStatus:
        """Status of both managed variables."""
        return EnvStatus(
            dist=self.key_status(RUSTUP_DIST_SERVER),
            root=self.key_status(RUSTUP_UPDATE_ROOT),
        )

    def effective(self, key: str) -> str | None:
        """Value a downstream tool would see for ``key``.

        Raises:
            KeyError: If ``key`` is not a managed variable.

        """
        if key not in MANAGED_KEYS:
            raise KeyError(key)
        return self.key_status(key).effective

    def effective_all(self) -> dict[str, str | None]:
        """Effective values of both managed variables."""
        status = self.status()
        return {key: status.for_key(key).effective for key in MANAGED_KEYS}

    def write(self, dist: str | None, root: str | None) -> EnvWriteResult:
        """Persist both variables and mirror applied writes into this process.

        Args:
            dist: ``RUSTUP_DIST_SERVER`` value; None or blank clears it.
            root: ``RUSTUP_UPDATE_ROOT`` value; None or blank clears it.

        Returns:
            Per-scope outcome from the backend.

        """
        result = self.backend.write_all(dist, root)
        if result.applied:
            for key, value in ((RUSTUP_DIST_SERVER, dist), (RUSTUP_UPDATE_ROOT, root)):
                value = normalize_value(value)
                if value is None:
                    self.environ.pop(key, None)
                else:
                    self.environ[key] = value
            logger.debug("Updated process environment for managed variables")
        return result

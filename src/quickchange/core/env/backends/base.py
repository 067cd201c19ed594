"""Abstract base class for environment scope backends.

A backend persists the two managed rustup variables at user and system
scope using whatever mechanism the OS offers (registry, shell profile).
Exactly one backend is selected per process, see ``select_backend``.

The base class owns the write policy shared by all backends:

- user scope is always attempted
- system scope is skipped, not failed, without elevation
- each scope's failure is captured in its own outcome

Subclasses only implement ``read`` and ``_write_scope``.

Example:
    >>> class FakeBackend(EnvironmentScopeBackend):
    ...     @property
    ...     def backend_name(self) -> str:
    ...         return "fake"
    ...
    ...     def read(self, key, scope):
    ...         return None
    ...
    ...     def _write_scope(self, scope, values):
    ...         pass

"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path

from quickchange.core.env.models import (
    RUSTUP_DIST_SERVER,
    RUSTUP_UPDATE_ROOT,
    EnvScope,
    EnvWriteResult,
    ScopeWriteOutcome,
    normalize_value,
)
from quickchange.core.exceptions import EnvScopeError, QuickChangeError
from quickchange.core.io import atomic_write
from quickchange.core.privilege import is_elevated

logger = logging.getLogger(__name__)


class EnvironmentScopeBackend(ABC):
    """Reads and writes the managed variables at user and system scope.

    Args:
        elevated: Callable reporting whether the process is elevated.
            Defaults to the OS probe.

    """

    def __init__(self, elevated: Callable[[], bool] | None = None) -> None:
        self._elevated = elevated if elevated is not None else is_elevated

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Short identifier used in logs."""

    @abstractmethod
    def read(self, key: str, scope: EnvScope) -> str | None:
        """Return the persisted value of ``key`` in ``scope``, or None.

        Raises:
            QuickChangeError: If the scope cannot be read.

        """

    @abstractmethod
    def _write_scope(self, scope: EnvScope, values: Mapping[str, str | None]) -> None:
        """Persist all managed values for one scope (None clears a value).

        Raises:
            QuickChangeError: If the scope cannot be written.

        """

    def _after_write(self) -> None:  # noqa: B027 - optional hook
        """Hook run once after any scope was written."""

    def is_elevated(self) -> bool:
        """Whether system-scope writes are permitted."""
        return self._elevated()

    def _attempt(self, scope: EnvScope, values: Mapping[str, str | None]) -> ScopeWriteOutcome:
        try:
            self._write_scope(scope, values)
        except (QuickChangeError, OSError, UnicodeError) as e:
            logger.warning("Failed to write %s scope via %s: %s", scope.value, self.backend_name, e)
            return ScopeWriteOutcome(ok=False, error=str(e))
        logger.info("Wrote %s scope via %s", scope.value, self.backend_name)
        return ScopeWriteOutcome(ok=True)

    def write_all(self, dist: str | None, root: str | None) -> EnvWriteResult:
        """Write both variables to user scope and, if elevated, system scope.

        Args:
            dist: ``RUSTUP_DIST_SERVER`` value; None or blank clears it.
            root: ``RUSTUP_UPDATE_ROOT`` value; None or blank clears it.

        Returns:
            Independent outcome per scope.

        """
        values = {
            RUSTUP_DIST_SERVER: normalize_value(dist),
            RUSTUP_UPDATE_ROOT: normalize_value(root),
        }

        user = self._attempt(EnvScope.USER, values)
        if self.is_elevated():
            system = self._attempt(EnvScope.SYSTEM, values)
        else:
            logger.warning("Not elevated, skipping system scope")
            system = ScopeWriteOutcome(ok=True, skipped=True)

        result = EnvWriteResult(user=user, system=system)
        if result.applied:
            self._after_write()
        return result


class ProfileBackendMixin:
    """File helpers shared by the shell-profile backends."""

    @staticmethod
    def _read_text(path: Path) -> str:
        """Return file content, or an empty string if it does not exist."""
        try:
            return path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            raise EnvScopeError(f"Failed to read {path}: {e}") from e

    @staticmethod
    def _write_text(path: Path, content: str) -> None:
        atomic_write(path, content)
        logger.debug("Updated %s", path)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise EnvScopeError(f"Failed to remove {path}: {e}") from e
        logger.debug("Removed %s", path)

    @staticmethod
    def _pick_profile(candidates: tuple[Path, ...], default: Path | None = None) -> Path:
        """First existing candidate, else ``default`` (or the first candidate)."""
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return default if default is not None else candidates[0]


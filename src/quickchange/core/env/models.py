"""Status and write-result models for the managed rustup variables."""

from enum import Enum

from pydantic import BaseModel, Field

RUSTUP_DIST_SERVER = "RUSTUP_DIST_SERVER"
RUSTUP_UPDATE_ROOT = "RUSTUP_UPDATE_ROOT"

# Order matters: block bodies and variable files list keys in this order
MANAGED_KEYS: tuple[str, ...] = (RUSTUP_DIST_SERVER, RUSTUP_UPDATE_ROOT)


class EnvScope(str, Enum):
    """Persistence breadth of a variable."""

    USER = "user"
    SYSTEM = "system"


class EnvSource(str, Enum):
    """Where a reported value came from."""

    PERSISTED = "persisted"
    SESSION = "session"


def normalize_value(value: str | None) -> str | None:
    """Treat blank strings as unset."""
    if value is None or not value.strip():
        return None
    return value.strip()


class ScopeValue(BaseModel):
    """One variable in one scope.

    Attributes:
        value: Current value, or None if unset.
        source: Where the value came from (None if unset).
        error: Read failure message, if the scope could not be read.

    """

    value: str | None = None
    source: EnvSource | None = None
    error: str | None = None


class KeyStatus(BaseModel):
    """A variable across both scopes."""

    user: ScopeValue = Field(default_factory=ScopeValue)
    system: ScopeValue = Field(default_factory=ScopeValue)

    @property
    def effective(self) -> str | None:
        """User scope wins over system scope."""
        return self.user.value or self.system.value or None

    @property
    def conflict(self) -> bool:
        """Both scopes set to different values."""
        return bool(self.user.value and self.system.value and self.user.value != self.system.value)


class EnvStatus(BaseModel):
    """Status of both managed variables.

    Attributes:
        dist: ``RUSTUP_DIST_SERVER``.
        root: ``RUSTUP_UPDATE_ROOT``.

    """

    dist: KeyStatus = Field(default_factory=KeyStatus)
    root: KeyStatus = Field(default_factory=KeyStatus)

    def for_key(self, key: str) -> KeyStatus:
        """Return the status of a managed variable by name.

        Raises:
            KeyError: If ``key`` is not a managed variable.

        """
        if key == RUSTUP_DIST_SERVER:
            return self.dist
        if key == RUSTUP_UPDATE_ROOT:
            return self.root
        raise KeyError(key)


class ScopeWriteOutcome(BaseModel):
    """Result of writing one scope.

    ``ok`` with ``skipped`` means the scope was intentionally not touched
    (system scope without elevation). Callers must check ``skipped`` to
    know whether the scope actually changed.
    """

    ok: bool
    error: str | None = None
    skipped: bool = False


class EnvWriteResult(BaseModel):
    """Per-scope outcome of a write of both variables."""

    user: ScopeWriteOutcome
    system: ScopeWriteOutcome

    @property
    def applied(self) -> bool:
        """Whether any scope was actually written."""
        return self.user.ok or (self.system.ok and not self.system.skipped)

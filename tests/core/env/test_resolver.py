"""Tests for EnvStatusResolver precedence and session fallback."""

import pytest

from quickchange.core.env import (
    RUSTUP_DIST_SERVER,
    RUSTUP_UPDATE_ROOT,
    EnvScope,
    EnvSource,
    EnvStatusResolver,
    KeyStatus,
    ScopeValue,
)
from quickchange.core.env.backends.base import EnvironmentScopeBackend
from quickchange.core.exceptions import EnvScopeError


class DictBackend(EnvironmentScopeBackend):
    """Backend storing persisted values in a dict keyed by (key, scope)."""

    def __init__(self, values=None, elevated=False, broken_scope=None, fail_writes=False):
        super().__init__(lambda: elevated)
        self.values = dict(values or {})
        self.broken_scope = broken_scope
        self.fail_writes = fail_writes

    @property
    def backend_name(self):
        return "dict"

    def read(self, key, scope):
        if scope is self.broken_scope:
            raise EnvScopeError(f"cannot read {scope.value} scope")
        return self.values.get((key, scope))

    def _write_scope(self, scope, values):
        if self.fail_writes:
            raise EnvScopeError("write refused")
        for key, value in values.items():
            if value is None:
                self.values.pop((key, scope), None)
            else:
                self.values[(key, scope)] = value


USER = EnvScope.USER
SYSTEM = EnvScope.SYSTEM


class TestKeyStatus:
    """Tests for KeyStatus properties."""

    def test_effective_prefers_user(self):
        """User value wins over system value."""
        status = KeyStatus(user=ScopeValue(value="u"), system=ScopeValue(value="s"))
        assert status.effective == "u"
        assert status.conflict

    def test_effective_falls_back_to_system(self):
        """System value is used when user is unset."""
        status = KeyStatus(system=ScopeValue(value="s"))
        assert status.effective == "s"
        assert not status.conflict

    def test_same_value_is_not_conflict(self):
        """Equal values in both scopes are not a conflict."""
        status = KeyStatus(user=ScopeValue(value="x"), system=ScopeValue(value="x"))
        assert not status.conflict


class TestResolverStatus:
    """Tests for status and effective."""

    def test_persisted_values(self):
        """Persisted values are tagged as persisted."""
        backend = DictBackend({(RUSTUP_DIST_SERVER, USER): "u", (RUSTUP_DIST_SERVER, SYSTEM): "s"})
        resolver = EnvStatusResolver(backend, environ={})

        status = resolver.status()

        assert status.dist.user == ScopeValue(value="u", source=EnvSource.PERSISTED)
        assert status.dist.system.value == "s"
        assert status.root.user.value is None
        assert resolver.effective(RUSTUP_DIST_SERVER) == "u"

    def test_session_fallback_user_only(self):
        """A session value fills an unset user scope and never the system scope."""
        resolver = EnvStatusResolver(DictBackend(), environ={RUSTUP_UPDATE_ROOT: "sess"})

        status = resolver.status()

        assert status.root.user == ScopeValue(value="sess", source=EnvSource.SESSION)
        assert status.root.system.value is None
        assert resolver.effective(RUSTUP_UPDATE_ROOT) == "sess"

    def test_persisted_user_beats_session(self):
        """A persisted user value is reported instead of the session value."""
        backend = DictBackend({(RUSTUP_DIST_SERVER, USER): "persisted"})
        resolver = EnvStatusResolver(backend, environ={RUSTUP_DIST_SERVER: "session"})
        assert resolver.status().dist.user.source is EnvSource.PERSISTED
        assert resolver.effective(RUSTUP_DIST_SERVER) == "persisted"

    def test_blank_values_are_unset(self):
        """Whitespace values in storage or session count as unset."""
        backend = DictBackend({(RUSTUP_DIST_SERVER, SYSTEM): "   "})
        resolver = EnvStatusResolver(backend, environ={RUSTUP_DIST_SERVER: " "})
        assert resolver.effective(RUSTUP_DIST_SERVER) is None

    def test_read_error_isolated(self):
        """A failing scope reports an error without hiding the other scope."""
        backend = DictBackend({(RUSTUP_DIST_SERVER, USER): "u"}, broken_scope=SYSTEM)
        status = EnvStatusResolver(backend, environ={}).status()

        assert status.dist.user.value == "u"
        assert "cannot read system" in status.dist.system.error
        assert status.dist.effective == "u"

    def test_effective_all(self):
        """effective_all covers both managed variables."""
        backend = DictBackend({(RUSTUP_UPDATE_ROOT, SYSTEM): "s"})
        assert EnvStatusResolver(backend, environ={}).effective_all() == {
            RUSTUP_DIST_SERVER: None,
            RUSTUP_UPDATE_ROOT: "s",
        }

    def test_unknown_key(self):
        """Only managed variables can be resolved."""
        with pytest.raises(KeyError):
            EnvStatusResolver(DictBackend(), environ={}).effective("PATH")


class TestResolverWrite:
    """Tests for write mirroring into the process environment."""

    def test_write_updates_environ(self):
        """Applied writes update and clear the process environment."""
        environ = {RUSTUP_UPDATE_ROOT: "old"}
        backend = DictBackend()
        resolver = EnvStatusResolver(backend, environ=environ)

        result = resolver.write(" https://m/rustup ", None)

        assert result.applied
        assert environ == {RUSTUP_DIST_SERVER: "https://m/rustup"}
        assert backend.values == {(RUSTUP_DIST_SERVER, USER): "https://m/rustup"}

    def test_failed_write_leaves_environ(self):
        """Nothing is mirrored when no scope was written."""
        environ = {RUSTUP_DIST_SERVER: "keep"}
        resolver = EnvStatusResolver(DictBackend(fail_writes=True), environ=environ)

        result = resolver.write("new", "new")

        assert not result.applied
        assert environ == {RUSTUP_DIST_SERVER: "keep"}

    def test_write_then_status(self):
        """Status after a write reports the persisted values."""
        resolver = EnvStatusResolver(DictBackend(elevated=True), environ={})
        resolver.write("d", "r")
        status = resolver.status()
        assert status.dist.user.value == "d"
        assert status.dist.system.value == "d"
        assert not status.dist.conflict

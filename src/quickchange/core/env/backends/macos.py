"""macOS backend: managed blocks in the zsh login profiles.

User scope lives in ``~/.zprofile`` (or ``~/.profile`` when only that
exists); system scope in ``/etc/zprofile``. Both hold the variables
directly as ``export`` lines inside the managed block.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from quickchange.core.env.backends.base import EnvironmentScopeBackend, ProfileBackendMixin
from quickchange.core.env.managed_block import (
    apply_block,
    extract_block,
    parse_assignment,
    render_exports,
)
from quickchange.core.env.models import EnvScope
from quickchange.core.paths import home_dir

logger = logging.getLogger(__name__)

SYSTEM_PROFILE = Path("/etc/zprofile")


class MacProfileBackend(ProfileBackendMixin, EnvironmentScopeBackend):
    """Shell-profile environment scopes for macOS.

    Args:
        elevated: Elevation probe override.
        home: Home directory override.
        system_profile: System-wide profile override.

    """

    def __init__(
        self,
        elevated: Callable[[], bool] | None = None,
        home: Path | None = None,
        system_profile: Path = SYSTEM_PROFILE,
    ) -> None:
        super().__init__(elevated)
        home = home if home is not None else home_dir(windows=False)
        self.user_profile = self._pick_profile((home / ".zprofile", home / ".profile"))
        self.system_profile = system_profile
        logger.debug("Using user profile %s", self.user_profile)

    @property
    def backend_name(self) -> str:
        return "macos-profile"

    def _profile_for(self, scope: EnvScope) -> Path:
        return self.user_profile if scope is EnvScope.USER else self.system_profile

    def read(self, key: str, scope: EnvScope) -> str | None:
        body = extract_block(self._read_text(self._profile_for(scope)))
        if body is None:
            return None
        return parse_assignment(body, key)

    def _write_scope(self, scope: EnvScope, values: Mapping[str, str | None]) -> None:
        path = self._profile_for(scope)
        original = self._read_text(path)
        updated = apply_block(original, render_exports(values) or None)
        if updated == original:
            return
        self._write_text(path, updated)

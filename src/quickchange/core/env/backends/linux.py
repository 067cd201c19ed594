"""Generic Unix backend: variables files sourced from the shell profile.

User scope is split in two:

- ``$XDG_CONFIG_HOME/quickchange/rustup-env.sh`` holds the ``export`` lines
- a managed block in ``~/.profile`` (or ``~/.bash_profile`` when it exists)
  sources that file if present

System scope is a single file in ``/etc/profile.d``, owned entirely by
quickchange, so it needs no managed block. Variables files are deleted
when both values are cleared.
"""

import logging
import shlex
from collections.abc import Callable, Mapping
from pathlib import Path

from quickchange.core.env.backends.base import EnvironmentScopeBackend, ProfileBackendMixin
from quickchange.core.env.managed_block import apply_block, parse_assignment, render_exports
from quickchange.core.env.models import EnvScope
from quickchange.core.paths import app_config_dir, home_dir

logger = logging.getLogger(__name__)

VARS_FILE_NAME = "rustup-env.sh"
SYSTEM_VARS_FILE = Path("/etc/profile.d/quickchange-rustup.sh")
VARS_FILE_HEADER = "# Managed by quickchange. Manual edits will be overwritten.\n"


def source_snippet(vars_file: Path) -> str:
    """Profile block body that sources ``vars_file`` when it exists."""
    quoted = shlex.quote(str(vars_file))
    return f"if [ -f {quoted} ]; then . {quoted}; fi\n"


class LinuxProfileBackend(ProfileBackendMixin, EnvironmentScopeBackend):
    """Variables-file environment scopes for Linux and other Unix systems.

    Args:
        elevated: Elevation probe override.
        home: Home directory override.
        config_dir: Per-application config directory override.
        system_vars_file: System-wide variables file override.

    """

    def __init__(
        self,
        elevated: Callable[[], bool] | None = None,
        home: Path | None = None,
        config_dir: Path | None = None,
        system_vars_file: Path = SYSTEM_VARS_FILE,
    ) -> None:
        super().__init__(elevated)
        home = home if home is not None else home_dir(windows=False)
        config_dir = config_dir if config_dir is not None else app_config_dir()
        self.user_profile = self._pick_profile((home / ".bash_profile",), default=home / ".profile")
        self.user_vars_file = config_dir / VARS_FILE_NAME
        self.system_vars_file = system_vars_file
        logger.debug("Using user profile %s, vars file %s", self.user_profile, self.user_vars_file)

    @property
    def backend_name(self) -> str:
        return "unix-profile"

    def _vars_file_for(self, scope: EnvScope) -> Path:
        return self.user_vars_file if scope is EnvScope.USER else self.system_vars_file

    def read(self, key: str, scope: EnvScope) -> str | None:
        return parse_assignment(self._read_text(self._vars_file_for(scope)), key)

    def _write_vars_file(self, path: Path, body: str) -> None:
        if body:
            self._write_text(path, VARS_FILE_HEADER + body)
        else:
            self._remove(path)

    def _write_scope(self, scope: EnvScope, values: Mapping[str, str | None]) -> None:
        body = render_exports(values)
        vars_file = self._vars_file_for(scope)
        self._write_vars_file(vars_file, body)

        if scope is EnvScope.SYSTEM:
            return

        original = self._read_text(self.user_profile)
        updated = apply_block(original, source_snippet(vars_file) if body else None)
        if updated != original:
            self._write_text(self.user_profile, updated)

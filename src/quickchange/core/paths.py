"""Path resolution for the cargo config file and its backup directory.

Single source of truth for where quickchange reads and writes. A caller
may pass any path string (from the CLI or a front-end); it is expanded
the way a shell on the current OS would expand it:

- ``~``, ``~/rest`` and ``~\\rest`` resolve against the home directory
- ``%NAME%`` tokens are substituted on Windows
- ``${NAME}`` and ``$NAME`` tokens are substituted elsewhere

Unknown variables are left verbatim, delimiters included, so a typo stays
visible in the resolved path instead of silently vanishing.

Usage:
    from quickchange.core.paths import resolve_config_path, get_backup_dir

    config_path = resolve_config_path(user_input)  # None -> ~/.cargo/config.toml
    backup_dir = get_backup_dir(config_path)
"""

import logging
import os
import re
import sys
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"
IS_MACOS = sys.platform == "darwin"

CARGO_DIR_NAME = ".cargo"
CONFIG_FILE_NAME = "config.toml"
BACKUP_DIR_NAME = "quickchange-backups"
APP_DIR_NAME = "quickchange"

_WINDOWS_VAR_RE = re.compile(r"%([^%]+)%")
_POSIX_VAR_RE = re.compile(r"\$\{([^}]*)\}|\$([A-Za-z0-9_]+)")


def home_dir(env: Mapping[str, str] | None = None, *, windows: bool = IS_WINDOWS) -> Path:
    """Return the user's home directory.

    Reads ``USERPROFILE`` on Windows and ``HOME`` elsewhere, falling back
    to ``Path.home()`` when the variable is unset or blank.

    Args:
        env: Environment mapping to read. Defaults to ``os.environ``.
        windows: Whether to apply Windows conventions.

    Returns:
        Home directory path.

    """
    source = os.environ if env is None else env
    value = source.get("USERPROFILE" if windows else "HOME", "")
    if value.strip():
        return Path(value)
    return Path.home()


def expand_vars(
    text: str,
    env: Mapping[str, str] | None = None,
    *,
    windows: bool = IS_WINDOWS,
) -> str:
    """Substitute OS-style environment variable references in text.

    Args:
        text: Input string.
        env: Environment mapping. Defaults to ``os.environ``.
        windows: Use ``%NAME%`` syntax when True, ``${NAME}``/``$NAME`` otherwise.

    Returns:
        Text with every resolvable reference substituted. Unresolvable
        references are kept exactly as written.

    """
    source = os.environ if env is None else env

    if windows:

        def _sub_windows(match: re.Match[str]) -> str:
            value = source.get(match.group(1))
            return match.group(0) if value is None else value

        return _WINDOWS_VAR_RE.sub(_sub_windows, text)

    def _sub_posix(match: re.Match[str]) -> str:
        name = match.group(1) if match.group(1) is not None else match.group(2)
        value = source.get(name) if name else None
        return match.group(0) if value is None else value

    return _POSIX_VAR_RE.sub(_sub_posix, text)


def expand_path(
    raw: str,
    env: Mapping[str, str] | None = None,
    *,
    windows: bool = IS_WINDOWS,
) -> Path:
    """Expand a user-supplied path string into an absolute path.

    Tilde expansion runs before variable substitution. Relative results
    are anchored at the current working directory.

    Args:
        raw: Path as typed by the user.
        env: Environment mapping. Defaults to ``os.environ``.
        windows: Whether to apply Windows conventions.

    Returns:
        Absolute path.

    """
    text = raw.strip()
    home = home_dir(env, windows=windows)

    if text == "~":
        text = str(home)
    elif text.startswith(("~/", "~\\")):
        text = str(home / text[2:])

    expanded = Path(expand_vars(text, env, windows=windows))
    if not expanded.is_absolute():
        expanded = Path.cwd() / expanded
    return expanded


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Return the default cargo config path (``~/.cargo/config.toml``)."""
    return home_dir(env) / CARGO_DIR_NAME / CONFIG_FILE_NAME


def resolve_config_path(path: str | None = None, env: Mapping[str, str] | None = None) -> Path:
    """Resolve an optional caller-supplied config path.

    Args:
        path: Path string, or None/blank for the default location.
        env: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Absolute config file path.

    """
    if path is not None and path.strip():
        resolved = expand_path(path, env)
    else:
        resolved = default_config_path(env)
    logger.debug("Resolved config path: %s", resolved)
    return resolved


def get_backup_dir(config_path: Path) -> Path:
    """Return the backup directory beside the given config file."""
    return config_path.parent / BACKUP_DIR_NAME


def app_config_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the per-application config directory on generic Unix.

    Honours ``XDG_CONFIG_HOME`` and falls back to ``~/.config``.
    """
    source = os.environ if env is None else env
    xdg = source.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg) if xdg else home_dir(env, windows=False) / ".config"
    return base / APP_DIR_NAME

"""Host target triple detection."""

import platform
import sys

UNKNOWN_TARGET = "unknown"

_TARGETS: dict[tuple[str, str], str] = {
    ("win32", "x86_64"): "x86_64-pc-windows-msvc",
    ("win32", "aarch64"): "aarch64-pc-windows-msvc",
    ("linux", "x86_64"): "x86_64-unknown-linux-gnu",
    ("linux", "aarch64"): "aarch64-unknown-linux-gnu",
    ("darwin", "x86_64"): "x86_64-apple-darwin",
    ("darwin", "aarch64"): "aarch64-apple-darwin",
}

_MACHINE_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}


def get_current_target(os_name: str | None = None, machine: str | None = None) -> str:
    """Return the rustc target triple of the running host, or ``unknown``."""
    os_name = os_name if os_name is not None else sys.platform
    if os_name.startswith("linux"):
        os_name = "linux"
    machine = (machine if machine is not None else platform.machine()).lower()
    machine = _MACHINE_ALIASES.get(machine, machine)
    return _TARGETS.get((os_name, machine), UNKNOWN_TARGET)

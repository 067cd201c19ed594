"""Managed block editing for shell profile files.

quickchange owns exactly one region of a user's shell profile, bounded by
marker lines::

    # >>> quickchange rustup env >>>
    export RUSTUP_DIST_SERVER="https://..."
    # <<< quickchange rustup env <<<

Everything outside the markers belongs to the user and is never altered.
The functions here are pure text transforms; callers do the file I/O.
"""

import re
from collections.abc import Mapping

BLOCK_START = "# >>> quickchange rustup env >>>"
BLOCK_END = "# <<< quickchange rustup env <<<"

_ESCAPE_RE = re.compile(r'\\(["\\])')


def _find_block_lines(lines: list[str]) -> tuple[int, int] | None:
    """Return (start, end) line indexes of the marker pair, inclusive."""
    start = None
    for i, line in enumerate(lines):
        stripped = line.strip()
        if start is None:
            if stripped == BLOCK_START:
                start = i
        elif stripped == BLOCK_END:
            return start, i
    return None


def extract_block(text: str) -> str | None:
    """Return the body between the markers, or None if there is no block."""
    lines = text.splitlines(keepends=True)
    found = _find_block_lines(lines)
    if found is None:
        return None
    start, end = found
    return "".join(lines[start + 1 : end])


def render_block(body: str) -> str:
    """Wrap a body in marker lines, ending with a single newline."""
    inner = body.strip("\n")
    return f"{BLOCK_START}\n{inner}\n{BLOCK_END}\n"


def apply_block(original: str, body: str | None) -> str:
    """Insert, replace or remove the managed block in ``original``.

    Args:
        original: Current file content.
        body: New block body. None or blank removes the block (markers
            included).

    Returns:
        Updated content. Text before and after the block is preserved;
        a new block is appended at the end of the file.

    """
    lines = original.splitlines(keepends=True)
    found = _find_block_lines(lines)
    remove = body is None or not body.strip()

    if found is None:
        if remove:
            return original
        prefix = original
        if prefix and not prefix.endswith("\n"):
            prefix += "\n"
        return prefix + render_block(body)

    start, end = found
    before = "".join(lines[:start])
    after = "".join(lines[end + 1 :])
    if remove:
        return before + after
    return before + render_block(body) + after


def escape_value(value: str) -> str:
    """Escape a value for a double-quoted shell string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def render_exports(values: Mapping[str, str | None]) -> str:
    """Render ``export KEY="value"`` lines for every set value.

    Returns:
        Newline-terminated lines, or an empty string if nothing is set.

    """
    lines = [f'export {key}="{escape_value(value)}"' for key, value in values.items() if value]
    return "".join(f"{line}\n" for line in lines)


def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        inner = raw[1:-1]
        if raw[0] == '"':
            inner = _ESCAPE_RE.sub(r"\1", inner)
        return inner
    return raw


def parse_assignment(text: str, key: str) -> str | None:
    """Read the value assigned to ``key`` in shell assignment lines.

    Blank lines and comments are skipped and an ``export`` prefix is
    optional. The last assignment wins, as it would in a shell.

    Returns:
        Unquoted value, or None if ``key`` is not assigned.

    """
    prefix = f"{key}="
    value = None
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].lstrip()
        if stripped.startswith(prefix):
            value = _unquote(stripped[len(prefix) :].strip())
    return value

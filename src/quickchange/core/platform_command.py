"""Cross-platform helper process execution and output decoding.

Registry reads and writes on Windows, and the Windows elevation probe, run
as short-lived helper processes (``powershell``, ``net``). Their output
encoding depends on the host: PowerShell may answer in UTF-16LE while
``net`` uses the OEM code page. ``decode_output`` sniffs the bytes
instead of trusting either.

Strategy:
    - UTF-16 BOM: decode as UTF-16
    - Mostly-zero odd bytes in the first 64 bytes: decode as UTF-16LE
    - Otherwise: UTF-8, then the locale encoding with replacement

Example:
    >>> from quickchange.core.platform_command import run_helper
    >>> out = run_helper(["powershell", "-NoProfile", "-Command", "$PSVersionTable.PSVersion"])

"""

from __future__ import annotations

import locale
import logging
import subprocess
import sys

from quickchange.core.exceptions import HelperProcessError

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_POSIX = not IS_WINDOWS

# Bytes inspected when sniffing for UTF-16LE output
UTF16_SNIFF_PREFIX = 64

# Suppress console windows flashing up when launched from a GUI host
_CREATE_NO_WINDOW = 0x08000000


def looks_like_utf16le(data: bytes) -> bool:
    """Guess whether ``data`` is UTF-16LE encoded ASCII-range text.

    Looks at the odd-offset bytes of a short prefix; in UTF-16LE text made
    of ASCII characters those are the zero high bytes.

    Args:
        data: Raw process output.

    Returns:
        True if most odd-offset bytes in the prefix are zero.

    """
    prefix = data[:UTF16_SNIFF_PREFIX]
    odd = prefix[1::2]
    if not odd:
        return False
    zeros = sum(1 for b in odd if b == 0)
    return zeros * 2 > len(odd)


def decode_output(data: bytes) -> str:
    """Decode helper process output of unknown encoding.

    NUL characters left over from mixed encodings are removed.

    Args:
        data: Raw bytes from stdout or stderr.

    Returns:
        Decoded text.

    """
    if data.startswith((b"\xff\xfe", b"\xfe\xff")):
        text = data.decode("utf-16", errors="replace")
    elif looks_like_utf16le(data):
        text = data.decode("utf-16-le", errors="replace")
    else:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            text = data.decode(locale.getpreferredencoding(False), errors="replace")
    return text.replace("\x00", "")


def run_helper(command: list[str]) -> str:
    """Run a helper process to completion and return its decoded stdout.

    Blocks until the process exits; there is no timeout.

    Args:
        command: Command list, executable first.

    Returns:
        Decoded standard output.

    Raises:
        HelperProcessError: If the process cannot be launched or exits non-zero.

    """
    logger.debug("Running helper: %s", command[0])
    kwargs: dict[str, int] = {}
    if IS_WINDOWS:
        kwargs["creationflags"] = _CREATE_NO_WINDOW

    try:
        result = subprocess.run(  # noqa: S603 - fixed helper commands only
            command,
            capture_output=True,
            check=False,
            **kwargs,
        )
    except OSError as e:
        raise HelperProcessError(f"Failed to launch {command[0]}: {e}", command) from e

    if result.returncode != 0:
        detail = decode_output(result.stderr).strip() or decode_output(result.stdout).strip()
        message = f"{command[0]} exited with code {result.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise HelperProcessError(message, command, result.returncode)

    return decode_output(result.stdout)

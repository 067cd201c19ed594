"""Mirror presets for crates.io source replacement and rustup downloads.

Crates mirrors are expressed in the config document as a pair of
``[source]`` entries: ``crates-io`` points at the mirror via
``replace-with`` and the mirror entry carries the registry URL. Rustup
mirrors are a pair of environment variable values (dist server and
update root), written through the env backends.
"""

import logging
from dataclasses import dataclass

from quickchange.core.config.models import CargoConfig, SourceEntry

logger = logging.getLogger(__name__)

CRATES_IO = "crates-io"
OFFICIAL = "official"
CUSTOM = "custom"


@dataclass(frozen=True)
class CratesMirror:
    """A crates.io index mirror preset."""

    id: str
    name: str
    registry: str
    replace_with: str


@dataclass(frozen=True)
class RustupMirror:
    """A rustup distribution mirror preset (empty strings mean unset)."""

    id: str
    name: str
    dist: str
    root: str


CRATES_MIRRORS: tuple[CratesMirror, ...] = (
    CratesMirror(OFFICIAL, "Official (crates.io)", "https://github.com/rust-lang/crates.io-index", CRATES_IO),
    CratesMirror("ustc", "USTC", "sparse+https://mirrors.ustc.edu.cn/crates.io-index/", "ustc"),
    CratesMirror("tuna", "TUNA", "https://mirrors.tuna.tsinghua.edu.cn/git/crates.io-index.git", "tuna"),
    CratesMirror("sjtu", "SJTU", "https://mirrors.sjtug.sjtu.edu.cn/git/crates.io-index", "sjtu"),
    CratesMirror("rsproxy", "Rsproxy", "sparse+https://rsproxy.cn/crates.io-index", "rsproxy"),
    CratesMirror("aliyun", "Aliyun", "https://code.aliyun.com/rustcc/crates.io-index.git", "aliyun"),
)

RUSTUP_MIRRORS: tuple[RustupMirror, ...] = (
    RustupMirror(OFFICIAL, "Official", "", ""),
    RustupMirror("ustc", "USTC", "https://mirrors.ustc.edu.cn/rustup", "https://mirrors.ustc.edu.cn/rustup"),
    RustupMirror(
        "tuna",
        "TUNA",
        "https://mirrors.tuna.tsinghua.edu.cn/rustup",
        "https://mirrors.tuna.tsinghua.edu.cn/rustup",
    ),
    RustupMirror(
        "sjtu",
        "SJTU",
        "https://mirrors.sjtug.sjtu.edu.cn/rust-static",
        "https://mirrors.sjtug.sjtu.edu.cn/rust-static/rustup",
    ),
    RustupMirror("rsproxy", "Rsproxy", "https://rsproxy.cn/rustup", "https://rsproxy.cn/rustup"),
)


def get_crates_mirror(mirror_id: str) -> CratesMirror:
    """Look up a crates mirror preset by id.

    Raises:
        KeyError: If no preset has that id.

    """
    for mirror in CRATES_MIRRORS:
        if mirror.id == mirror_id:
            return mirror
    raise KeyError(mirror_id)


def get_rustup_mirror(mirror_id: str) -> RustupMirror:
    """Look up a rustup mirror preset by id.

    Raises:
        KeyError: If no preset has that id.

    """
    for mirror in RUSTUP_MIRRORS:
        if mirror.id == mirror_id:
            return mirror
    raise KeyError(mirror_id)


def _managed_source_keys() -> set[str]:
    return {m.replace_with for m in CRATES_MIRRORS if m.id != OFFICIAL}


def apply_crates_mirror(config: CargoConfig, mirror_id: str) -> CargoConfig:
    """Return a copy of ``config`` with the crates source switched to a preset.

    Source entries of other managed presets are dropped; user-defined
    sources are kept. ``official`` removes the replacement entirely.

    Raises:
        KeyError: If ``mirror_id`` is not a known preset.

    """
    mirror = get_crates_mirror(mirror_id)
    sources = dict(config.source or {})

    for key in _managed_source_keys():
        if key != mirror.replace_with:
            sources.pop(key, None)

    if mirror.id == OFFICIAL:
        sources.pop(CRATES_IO, None)
    else:
        crates_io = sources.get(CRATES_IO) or SourceEntry()
        sources[CRATES_IO] = crates_io.model_copy(update={"replace_with": mirror.replace_with})
        sources[mirror.replace_with] = SourceEntry(registry=mirror.registry)

    logger.debug("Applied crates mirror %s", mirror.id)
    return config.model_copy(update={"source": sources or None})


def detect_crates_mirror(config: CargoConfig) -> str:
    """Return the id of the active crates mirror preset, or ``custom``."""
    sources = config.source or {}
    crates_io = sources.get(CRATES_IO)
    if crates_io is None or not crates_io.replace_with:
        return OFFICIAL

    for mirror in CRATES_MIRRORS:
        if mirror.id == OFFICIAL or mirror.replace_with != crates_io.replace_with:
            continue
        entry = sources.get(mirror.replace_with)
        if entry is not None and entry.registry == mirror.registry:
            return mirror.id
    return CUSTOM


def detect_rustup_mirror(dist: str | None, root: str | None) -> str:
    """Return the id of the rustup preset matching the effective values."""
    dist = dist or ""
    root = root or ""
    if not dist and not root:
        return OFFICIAL
    for mirror in RUSTUP_MIRRORS:
        if mirror.dist == dist and mirror.root == root:
            return mirror.id
    return CUSTOM

"""Pytest configuration and fixtures for quickchange tests."""

from pathlib import Path

import pytest

SAMPLE_CONFIG = """\
# user comment is not preserved
[source.crates-io]
replace-with = "ustc"

[source.ustc]
registry = "sparse+https://mirrors.ustc.edu.cn/crates.io-index/"

[net]
git-fetch-with-cli = true

[build]
jobs = 4

[unstable]
gc = true
"""


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Path of a cargo config file inside a temp ``.cargo`` directory (not created)."""
    return tmp_path / ".cargo" / "config.toml"


@pytest.fixture
def sample_config(config_path: Path) -> Path:
    """Write SAMPLE_CONFIG to ``config_path`` and return it."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return config_path


@pytest.fixture
def not_elevated():
    """Privilege probe reporting a standard user."""
    return lambda: False


@pytest.fixture
def elevated():
    """Privilege probe reporting an administrator."""
    return lambda: True


@pytest.fixture
def sample_text() -> str:
    """Sample cargo config text with a mirror, known sections and an unknown table."""
    return SAMPLE_CONFIG

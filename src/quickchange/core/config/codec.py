"""Load, parse, serialize and save the cargo config document.

Reading uses the standard library ``tomllib``; writing uses ``tomli_w``
and the atomic writer, so an interrupted save leaves either the old file
or the new one on disk.
"""

import logging
import tomllib
from pathlib import Path

import tomli_w
from pydantic import ValidationError

from quickchange.core.config.models import CargoConfig
from quickchange.core.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigSerializationError,
)
from quickchange.core.io import atomic_write

logger = logging.getLogger(__name__)

# 1MB - cargo configs are a few KB; refuse to slurp anything larger
MAX_CONFIG_SIZE: int = 1_048_576


def parse_config(text: str, source: Path | str | None = None) -> CargoConfig:
    """Parse TOML text into a config document.

    Blank or whitespace-only text is an empty document, not an error.

    Args:
        text: TOML text.
        source: Where the text came from, used in error messages.

    Returns:
        Parsed document.

    Raises:
        ConfigParseError: If the text is not valid TOML or does not fit the model.

    """
    if not text.strip():
        return CargoConfig()

    where = f" {source}" if source is not None else ""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Failed to parse config{where}: {e}") from e

    try:
        return CargoConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigParseError(f"Failed to parse config{where}: {problems}") from e


def serialize_config(config: CargoConfig) -> str:
    """Render a document as TOML text (known fields first, then unknown keys).

    Raises:
        ConfigSerializationError: If a value cannot be expressed in TOML.

    """
    try:
        return tomli_w.dumps(config.to_toml_dict())
    except (TypeError, ValueError) as e:
        raise ConfigSerializationError(f"Failed to serialize config: {e}") from e


def _read_config_text(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read(MAX_CONFIG_SIZE + 1)
    except IsADirectoryError as e:
        raise ConfigError(f"{path} is a directory, not a config file.") from e
    except PermissionError as e:
        raise ConfigError(f"Permission denied reading {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"Config file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e

    if len(content) > MAX_CONFIG_SIZE:
        raise ConfigError(f"Config file {path} exceeds 1MB limit.")
    return content


def load_config(path: Path, *, create_missing: bool = False) -> CargoConfig:
    """Load the config document at ``path``.

    Args:
        path: Config file path.
        create_missing: Create an empty file (and parent directories) when
            the file does not exist, so later opens are well-defined.

    Returns:
        Parsed document; an empty document if the file is missing or blank.

    Raises:
        ConfigError: If the file cannot be read or created.
        ConfigParseError: If the file content is malformed.

    """
    if not path.exists():
        if create_missing:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch()
            except OSError as e:
                raise ConfigError(f"Failed to create config {path}: {e}") from e
            logger.info("Created empty config file %s", path)
        else:
            logger.debug("Config file %s not found, using empty document", path)
        return CargoConfig()

    return parse_config(_read_config_text(path), path)


def save_config(config: CargoConfig, path: Path) -> None:
    """Serialize ``config`` and write it atomically to ``path``.

    Raises:
        ConfigSerializationError: If the document cannot be rendered.
        AtomicWriteError: If the file cannot be written.

    """
    content = serialize_config(config)
    atomic_write(path, content)
    logger.info("Saved config to %s", path)


def import_config(path: Path) -> CargoConfig:
    """Load a document from an arbitrary file that must exist.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigParseError: If the file content is malformed.

    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")
    return parse_config(_read_config_text(path), path)

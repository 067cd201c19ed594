"""Cargo config document model, TOML codec and mirror presets.

Usage:
    from quickchange.core.config import load_config, save_config

    config = load_config(path, create_missing=True)
    config.net = NetConfig(offline=True)
    save_config(config, path)
"""

from quickchange.core.config.codec import (
    MAX_CONFIG_SIZE,
    import_config,
    load_config,
    parse_config,
    save_config,
    serialize_config,
)
from quickchange.core.config.models import (
    BuildConfig,
    CargoConfig,
    DocConfig,
    EnvObject,
    HttpConfig,
    HttpsConfig,
    NetConfig,
    ProfileConfig,
    RegistryConfig,
    RegistryEntry,
    SourceEntry,
    TargetConfig,
)

__all__ = [
    "MAX_CONFIG_SIZE",
    "BuildConfig",
    "CargoConfig",
    "DocConfig",
    "EnvObject",
    "HttpConfig",
    "HttpsConfig",
    "NetConfig",
    "ProfileConfig",
    "RegistryConfig",
    "RegistryEntry",
    "SourceEntry",
    "TargetConfig",
    "import_config",
    "load_config",
    "parse_config",
    "save_config",
    "serialize_config",
]

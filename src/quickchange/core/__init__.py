"""Core modules for quickchange.

This package provides:
- Path resolution and expansion (paths)
- Atomic file writes (io)
- Cargo config model and TOML codec (config)
- Backup snapshots of the config file (backups)
- Privilege detection (privilege)
- Persistent rustup environment variables (env)
"""

from quickchange.core.exceptions import (
    AtomicWriteError,
    BackupError,
    BackupNotFoundError,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigSerializationError,
    EnvScopeError,
    HelperProcessError,
    InvalidBackupNameError,
    QuickChangeError,
)

__all__ = [
    "AtomicWriteError",
    "BackupError",
    "BackupNotFoundError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigSerializationError",
    "EnvScopeError",
    "HelperProcessError",
    "InvalidBackupNameError",
    "QuickChangeError",
]

"""Exception hierarchy for quickchange.

Every error raised by the core carries a human-readable message as its
``str()``. Front-ends display that message verbatim; there are no
structured error codes at the boundary.
"""


class QuickChangeError(Exception):
    """Base exception for all quickchange errors."""


class ConfigError(QuickChangeError):
    """Config file could not be read, written or located."""


class ConfigParseError(ConfigError):
    """Config text is not a valid TOML document for the cargo config model."""


class ConfigSerializationError(ConfigError):
    """Config document could not be rendered to TOML."""


class ConfigNotFoundError(ConfigError):
    """Config file required by the operation does not exist."""


class AtomicWriteError(QuickChangeError):
    """Temp-file + rename write failed, including the fallback retry."""


class BackupError(QuickChangeError):
    """Backup store operation failed."""


class BackupNotFoundError(BackupError):
    """Named backup does not exist in the backup directory."""


class InvalidBackupNameError(BackupError):
    """Backup name is unusable or would collide with an existing backup."""


class EnvScopeError(QuickChangeError):
    """Reading or writing a persisted environment scope failed."""


class HelperProcessError(QuickChangeError):
    """External helper process could not be launched or reported failure.

    Attributes:
        command: The command that was executed.
        exit_code: Process exit code, or None if it never started.

    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.exit_code = exit_code

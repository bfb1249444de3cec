"""Exception hierarchy shared across modkeeper.

Fatal setup errors abort an invocation before any reconciliation happens.
Store errors abort the rest of a run but keep already committed decisions.
Hash errors are per-file and never abort a scan.
"""

from pathlib import Path


class ModkeeperError(Exception):
    """Base exception for all modkeeper errors."""


class FatalSetupError(ModkeeperError):
    """Raised when the environment is not usable for reconciliation."""


class FilesystemError(FatalSetupError):
    """Raised when the managed mod directory is missing or unreadable."""


class StoreError(ModkeeperError):
    """Raised when a store backend operation fails."""


class StoreExistsError(StoreError):
    """Raised when initializing over an existing database without force."""


class StoreNotInitializedError(StoreError, FatalSetupError):
    """Raised when the database file or its schema is missing."""


class ConfigError(ModkeeperError):
    """Raised when the configuration file cannot be read or validated."""


class HashError(ModkeeperError):
    """Raised when a single file cannot be read for hashing.

    Attributes:
        path: The file that could not be hashed.
    """

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message

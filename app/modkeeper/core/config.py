"""Application configuration and settings.

Configuration is stored in ~/.config/modkeeper/config.toml. A missing file
means every setting takes its default; command line options override the
file for a single invocation.
"""

import tomllib
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from modkeeper.core.errors import ConfigError
from modkeeper.core.paths import get_config_path, get_database_path, get_default_mods_dir

DEFAULT_SHARED_DATA_DIR = "mod_data"
DEFAULT_HASH_WORKERS = 4


class ModkeeperConfig(BaseModel):
    """Settings for locating the mod tree and the database.

    Attributes:
        mods_dir: Managed root containing one directory per mod.
            None selects the Sims 4 Mods folder under ~/Documents.
        database_path: SQLite database file. None selects the XDG data dir.
        shared_data_dir: Directory under the managed root that is never a mod.
        hash_workers: Upper bound on threads used for hashing.
    """

    model_config = ConfigDict(extra="forbid")

    mods_dir: Annotated[
        Path | None,
        Field(description="Managed mod directory (None = Sims 4 default)"),
    ] = None
    database_path: Annotated[
        Path | None,
        Field(description="Database file (None = XDG data directory)"),
    ] = None
    shared_data_dir: Annotated[
        str,
        Field(min_length=1, description="Reserved shared-data directory name"),
    ] = DEFAULT_SHARED_DATA_DIR
    hash_workers: Annotated[
        int,
        Field(ge=1, le=32, description="Parallel hashing threads (1-32)"),
    ] = DEFAULT_HASH_WORKERS

    @field_validator("shared_data_dir")
    @classmethod
    def validate_shared_data_dir(cls, v: str) -> str:
        """Reject values that are not a single path segment."""
        if "/" in v or "\\" in v or v in (".", ".."):
            msg = f"shared_data_dir must be a plain directory name, got {v!r}"
            raise ValueError(msg)
        return v

    @property
    def effective_mods_dir(self) -> Path:
        """Managed root with the default applied."""
        return (self.mods_dir or get_default_mods_dir()).expanduser()

    @property
    def effective_database_path(self) -> Path:
        """Database path with the default applied."""
        return (self.database_path or get_database_path()).expanduser()

    def with_overrides(
        self,
        mods_dir: Path | None = None,
        database_path: Path | None = None,
    ) -> "ModkeeperConfig":
        """Return a copy with command line overrides applied."""
        updates: dict[str, Path] = {}
        if mods_dir is not None:
            updates["mods_dir"] = mods_dir
        if database_path is not None:
            updates["database_path"] = database_path
        return self.model_copy(update=updates)


def load_config(path: Path | None = None) -> ModkeeperConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ModkeeperConfig. Defaults if the file does not exist.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return ModkeeperConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ModkeeperConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: ModkeeperConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The configuration to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    import os
    from tempfile import NamedTemporaryFile

    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: ModkeeperConfig) -> dict[str, object]:
    """Convert the config to a TOML-ready dictionary.

    TOML has no null, so unset paths are omitted.
    """
    result: dict[str, object] = {
        "shared_data_dir": config.shared_data_dir,
        "hash_workers": config.hash_workers,
    }
    if config.mods_dir is not None:
        result["mods_dir"] = str(config.mods_dir)
    if config.database_path is not None:
        result["database_path"] = str(config.database_path)
    return result

"""XDG-compliant path management for modkeeper.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and data storage, plus the default
location of the managed mod directory.

XDG defaults:
- Config: ~/.config/modkeeper/
- Data: ~/.local/share/modkeeper/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "modkeeper"

DATABASE_FILENAME = "mods.sqlite"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/modkeeper/ (or XDG_CONFIG_HOME/modkeeper/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """Get the data directory path.

    The mod database lives here; it must survive between runs and is
    not configuration.

    Returns:
        Path to ~/.local/share/modkeeper/ (or XDG_DATA_HOME/modkeeper/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/modkeeper/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/modkeeper/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_database_path() -> Path:
    """Get the default database file path.

    Returns:
        Path to ~/.local/share/modkeeper/mods.sqlite.
    """
    return get_data_dir() / DATABASE_FILENAME


def get_default_mods_dir() -> Path:
    """Get the default managed mod directory.

    Returns:
        Path to ~/Documents/Electronic Arts/The Sims 4/Mods.
    """
    return Path.home() / "Documents" / "Electronic Arts" / "The Sims 4" / "Mods"


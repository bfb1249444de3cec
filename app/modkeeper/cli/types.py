"""Shared types and utilities for CLI commands.

This module provides common enums and helpers used across multiple CLI
command modules: resolving the effective configuration from the config
file and global options, and opening the store with uniform error output.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

import typer

from modkeeper.core.config import ModkeeperConfig, load_config
from modkeeper.core.errors import ConfigError, StoreError, StoreNotInitializedError
from modkeeper.core.scanner import TreeScanner
from modkeeper.models.mod import parse_tag_list
from modkeeper.store import SqlModStore, open_store
from modkeeper.utils.formatting import print_error, print_info


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_config(ctx: typer.Context) -> ModkeeperConfig:
    """Load the config file and apply global command-line overrides.

    Args:
        ctx: Typer context carrying the global options in ``ctx.obj``.

    Returns:
        The effective configuration.

    Raises:
        typer.Exit: If the config file is invalid.
    """
    options = ctx.obj or {}
    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    return config.with_overrides(
        mods_dir=options.get("mods_dir"),
        database_path=options.get("database"),
    )


def get_scanner(config: ModkeeperConfig) -> TreeScanner:
    """Create a scanner for the configured mod directory."""
    return TreeScanner(config.effective_mods_dir, shared_data_dir=config.shared_data_dir)


@contextmanager
def store_session(config: ModkeeperConfig) -> Iterator[SqlModStore]:
    """Open the configured store for the duration of a command.

    Store failures inside the block are reported and end the command
    with exit code 1.

    Raises:
        typer.Exit: If the store is missing, uninitialized, or fails.
    """
    database_path = config.effective_database_path
    try:
        with open_store(database_path) as store:
            yield store
    except StoreNotInitializedError as e:
        print_error(str(e))
        print_info("Run 'modkeeper init' to create the database.")
        raise typer.Exit(code=1) from e
    except StoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def parse_tags_option(value: str | None) -> frozenset[str] | None:
    """Parse a comma separated --tags option; None when not given."""
    if value is None:
        return None
    return parse_tag_list(value)

"""CLI commands for modkeeper.

This package contains all subcommand implementations.
"""

from modkeeper.cli.commands import config, edit, init, listing, open_dir, scan, tags

__all__ = ["config", "edit", "init", "listing", "open_dir", "scan", "tags"]

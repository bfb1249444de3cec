"""CLI package for modkeeper.

This package contains the Typer application and all subcommands.
"""

from modkeeper.cli.main import app

__all__ = ["app"]

"""Main CLI application entry point.

Defines the Typer application, global options and logging setup.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from modkeeper import __version__
from modkeeper.cli.commands import config, edit, init, listing, open_dir, scan, tags

# Create main Typer app
app = typer.Typer(
    name="modkeeper",
    help="Track and verify The Sims 4 mods.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"modkeeper version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr at the level selected by the global options."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    # Clear existing handlers so repeated invocations do not duplicate output
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root_logger.addHandler(handler)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    mods_dir: Annotated[
        Path | None,
        typer.Option(
            "--mods-dir",
            "-m",
            help="Mod directory to manage (overrides the config file).",
        ),
    ] = None,
    database: Annotated[
        Path | None,
        typer.Option(
            "--database",
            "-d",
            help="Database file to use (overrides the config file).",
        ),
    ] = None,
) -> None:
    """modkeeper - Track and verify The Sims 4 mods.

    Records every mod directory with its metadata and file hashes, and
    reconciles that record with what is actually installed.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["mods_dir"] = mods_dir
    ctx.obj["database"] = database


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(scan.app, name="scan")
app.add_typer(listing.app, name="list")
app.add_typer(tags.app, name="tags")
app.add_typer(edit.app, name="edit")
app.add_typer(open_dir.app, name="open")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()

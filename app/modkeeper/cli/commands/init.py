"""Init command implementation.

Creates an empty mod database.
"""

from typing import Annotated

import typer

from modkeeper.cli.types import get_config
from modkeeper.core.errors import StoreError, StoreExistsError
from modkeeper.store import initialize_store
from modkeeper.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Initialize the mod database.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def init_database(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Delete and recreate an existing database.",
        ),
    ] = False,
) -> None:
    """Initialize a new, empty mod database.

    Fails if the database already exists, unless --force is given, in
    which case all tracked mods, files and tags are discarded.

    Examples:
        modkeeper init                     # Create database in default location
        modkeeper --database my.db init    # Create database at custom path
        modkeeper init --force             # Recreate existing database
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)
    database_path = config.effective_database_path

    if force and database_path.exists():
        print_warning(f"Recreating existing database: {database_path}")

    try:
        saved_path = initialize_store(database_path, force=force)
    except StoreExistsError as e:
        print_error(str(e))
        print_info("Use --force to recreate it (all tracked data is lost).")
        raise typer.Exit(code=1) from e
    except StoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Database created: {saved_path}")
    console.print(f"  Mod directory: [muted]{config.effective_mods_dir}[/muted]")
    print_info("Run 'modkeeper scan --fix' to start tracking your mods.")

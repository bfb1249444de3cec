"""Config command implementation.

Shows the effective settings and writes a config file.
"""

from typing import Annotated

import typer

from modkeeper.cli.types import get_config
from modkeeper.core.config import ModkeeperConfig, save_config
from modkeeper.core.errors import ConfigError
from modkeeper.core.paths import get_config_path
from modkeeper.utils.formatting import (
    console,
    create_table,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    help="Show and create the configuration file.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective settings, including command line overrides."""
    config = get_config(ctx)
    config_path = get_config_path()

    table = create_table("Settings")
    table.add_column("Setting", no_wrap=True)
    table.add_column("Value")
    table.add_row("mods_dir", str(config.effective_mods_dir))
    table.add_row("database_path", str(config.effective_database_path))
    table.add_row("shared_data_dir", config.shared_data_dir)
    table.add_row("hash_workers", str(config.hash_workers))
    console.print(table)

    if config_path.exists():
        console.print(f"\n[dim]Config file: {config_path}[/]")
    else:
        console.print(f"\n[dim]No config file at {config_path}, using defaults.[/]")


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write the default settings to the config file.

    Paths are written resolved, so the file is a complete starting point
    for editing. Global --mods-dir and --database options are persisted.
    """
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_error(f"Config file already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    options = ctx.obj or {}
    config = ModkeeperConfig().with_overrides(
        mods_dir=options.get("mods_dir"),
        database_path=options.get("database"),
    )
    resolved = config.model_copy(
        update={
            "mods_dir": config.effective_mods_dir,
            "database_path": config.effective_database_path,
        }
    )
    try:
        saved_path = save_config(resolved, config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written: {saved_path}")

"""Open command implementation.

Opens the managed mod directory in the system file browser.
"""

import typer

from modkeeper.cli.types import get_config
from modkeeper.utils.formatting import print_error, print_info

app = typer.Typer(
    help="Open the mod directory in the file browser.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def open_mods_dir(ctx: typer.Context) -> None:
    """Open the mod directory in the system file browser."""
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    mods_dir = get_config(ctx).effective_mods_dir
    if not mods_dir.is_dir():
        print_error(f"Mod directory not found: {mods_dir}")
        raise typer.Exit(code=1)

    print_info(f"Opening {mods_dir}")
    if typer.launch(str(mods_dir)) != 0:
        print_error(f"Could not open {mods_dir}")
        raise typer.Exit(code=1)

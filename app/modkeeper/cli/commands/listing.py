"""List command implementation.

Shows tracked mods, optionally filtered by tags and verified against
the files on disk.
"""

from typing import Annotated

import typer

from modkeeper.cli.display import create_mods_table, print_mod_details
from modkeeper.cli.types import get_config, get_scanner, parse_tags_option, store_session
from modkeeper.core.errors import FilesystemError
from modkeeper.core.reconciler import Reconciler
from modkeeper.models.report import ModDiff
from modkeeper.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="List tracked mods.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_mods(
    ctx: typer.Context,
    tags: Annotated[
        str | None,
        typer.Option(
            "--tags",
            "-t",
            help="Only list mods carrying any of these comma separated tags.",
        ),
    ] = None,
    verify: Annotated[
        bool,
        typer.Option(
            "--verify",
            help="Compare the files of each mod with the database.",
        ),
    ] = False,
    details: Annotated[
        bool,
        typer.Option(
            "--details",
            "-d",
            help="Show all fields and tracked files of each mod.",
        ),
    ] = False,
) -> None:
    """List the mods in the database.

    Examples:
        modkeeper list                       # All mods as a table
        modkeeper list --tags body,hair      # Mods tagged body or hair
        modkeeper list --verify              # Add a verification status
        modkeeper list --details --verify    # Full details per mod
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)
    tag_filter = parse_tags_option(tags)

    with store_session(config) as store:
        mods = store.find_mods_by_tags(tag_filter) if tag_filter else store.list_mods()
        if not mods:
            print_info("No mods found.")
            return

        statuses: dict[str, ModDiff] | None = None
        if verify:
            reconciler = Reconciler(store, get_scanner(config), hash_workers=config.hash_workers)
            try:
                report = reconciler.run(verify=True)
            except FilesystemError as e:
                print_error(str(e))
                raise typer.Exit(code=1) from e
            statuses = {m.directory_name: m for m in report.mods}

        if not details:
            console.print(create_mods_table(mods, statuses))
            console.print(f"\n[dim]{len(mods)} mods[/]")
            return

        for mod in mods:
            files = store.get_files(mod.id) if mod.id is not None else []
            mod_diff = statuses.get(mod.directory_name) if statuses is not None else None
            print_mod_details(mod, files, mod_diff)

"""Tags command implementation.

Shows tags with the mods carrying them, and deletes tags.
"""

from typing import Annotated

import typer

from modkeeper.cli.display import create_tags_table
from modkeeper.cli.types import get_config, parse_tags_option, store_session
from modkeeper.models.mod import Mod
from modkeeper.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and delete tags.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def manage_tags(
    ctx: typer.Context,
    delete: Annotated[
        str | None,
        typer.Option(
            "--delete",
            help="Delete this tag and detach it from every mod.",
        ),
    ] = None,
    tags: Annotated[
        str | None,
        typer.Option(
            "--tags",
            "-t",
            help="Only show these comma separated tags.",
        ),
    ] = None,
    prune: Annotated[
        bool,
        typer.Option(
            "--prune",
            help="Delete tags no mod carries anymore.",
        ),
    ] = False,
) -> None:
    """Show tags and the mods carrying them.

    Examples:
        modkeeper tags                   # All tags with their mods
        modkeeper tags --tags body,hair  # Only the given tags
        modkeeper tags --delete old      # Delete a tag
        modkeeper tags --prune           # Delete unused tags
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    if delete is not None and tags is not None:
        print_error("--delete and --tags cannot be used together.")
        raise typer.Exit(code=1)

    config = get_config(ctx)

    with store_session(config) as store:
        if delete is not None:
            if not store.delete_tag(delete.strip()):
                print_error(f"Tag not found: {delete}")
                raise typer.Exit(code=1)
            print_success(f"Deleted tag: {delete}")
            return

        if prune:
            pruned = store.prune_tags()
            if pruned:
                print_success(f"Deleted {len(pruned)} unused tags: {', '.join(pruned)}")
            else:
                print_info("No unused tags.")

        wanted = parse_tags_option(tags)
        all_tags = store.list_tags()
        shown = [t for t in all_tags if wanted is None or t.name in wanted]
        if not shown:
            print_info("No tags found.")
            return

        mods_by_tag: dict[str, list[Mod]] = {
            tag.name: store.find_mods_by_tags([tag.name]) for tag in shown
        }

    console.print(create_tags_table(shown, mods_by_tag))

"""Edit command implementation.

Changes the metadata of a tracked mod, either from options or through
interactive menus.
"""

import logging
from dataclasses import replace
from typing import Annotated

import typer

from modkeeper.cli.prompt import TerminalPrompter
from modkeeper.cli.types import get_config, parse_tags_option, store_session
from modkeeper.core.policy import Prompter
from modkeeper.models.mod import Mod, parse_tag_list, utc_now
from modkeeper.store import ModStore
from modkeeper.utils.formatting import print_error, print_info, print_success, print_warning

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Edit mod metadata.",
    invoke_without_command=True,
)

_MOD_FIELDS = ["Name", "Source URL", "Version", "Tags", "Back"]


def _save(store: ModStore, mod: Mod) -> Mod:
    """Save a changed mod, refreshing its last updated time."""
    saved = store.upsert_mod(replace(mod, last_updated=utc_now()))
    logger.info("Updated metadata of %s", saved.directory_name)
    return saved


def _pick_mod(store: ModStore, prompter: Prompter) -> Mod | None:
    """Let the user choose a mod from all mods or from one tag."""
    while True:
        choice = prompter.ask_choice("Main menu", ["All mods", "Mods by tag", "Quit"])
        if choice == 2:
            return None

        if choice == 0:
            mods = store.list_mods()
        else:
            tags = store.list_tags()
            if not tags:
                print_warning("No tags found.")
                continue
            picked = prompter.ask_choice(
                "Select a tag",
                [f"{t.name} ({t.mod_count})" for t in tags] + ["Back"],
            )
            if picked == len(tags):
                continue
            mods = store.find_mods_by_tags([tags[picked].name])

        if not mods:
            print_warning("No mods found.")
            continue
        picked = prompter.ask_choice(
            "Select a mod",
            [f"{m.name} ({m.directory_name})" for m in mods] + ["Back"],
        )
        if picked < len(mods):
            return mods[picked]


def _edit_fields(store: ModStore, prompter: Prompter, mod: Mod) -> None:
    """Edit the fields of one mod until the user goes back."""
    while True:
        choice = prompter.ask_choice(f"Edit {mod.name}", _MOD_FIELDS)
        if choice == 0:
            name = prompter.ask_text("Name", default=mod.name).strip()
            if not name:
                print_warning("Mod name cannot be empty.")
                continue
            mod = _save(store, replace(mod, name=name))
        elif choice == 1:
            source_url = prompter.ask_text("Source URL", default=mod.source_url).strip()
            mod = _save(store, replace(mod, source_url=source_url))
        elif choice == 2:
            version = prompter.ask_text("Version", default=mod.version).strip()
            mod = _save(store, replace(mod, version=version))
        elif choice == 3:
            raw = prompter.ask_text("Tags (comma separated)", default=", ".join(sorted(mod.tags)))
            mod = _save(store, replace(mod, tags=parse_tag_list(raw)))
        else:
            return


def edit_interactively(store: ModStore, prompter: Prompter) -> None:
    """Run the interactive edit menus until the user quits.

    Every field change is saved immediately.

    Args:
        store: Open mod store.
        prompter: Collaborator used for all menus and questions.
    """
    while True:
        mod = _pick_mod(store, prompter)
        if mod is None:
            return
        _edit_fields(store, prompter, mod)


@app.callback(invoke_without_command=True)
def edit_mod(
    ctx: typer.Context,
    mod_id: Annotated[
        int | None,
        typer.Option(
            "--mod-id",
            "--id",
            help="ID of the mod to edit (see 'modkeeper list').",
        ),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="New display name."),
    ] = None,
    source_url: Annotated[
        str | None,
        typer.Option("--source-url", "-s", help="New source URL."),
    ] = None,
    version: Annotated[
        str | None,
        typer.Option("--version", help="New version."),
    ] = None,
    tags: Annotated[
        str | None,
        typer.Option(
            "--tags",
            "-t",
            help="Comma separated tags replacing the current ones.",
        ),
    ] = None,
    interactive: Annotated[
        bool,
        typer.Option(
            "--interactive",
            "-i",
            help="Choose the mod and fields from menus.",
        ),
    ] = False,
) -> None:
    """Edit the metadata of a tracked mod.

    Only the given fields change. Tags replace the mod's current tags;
    unknown tags are created.

    Examples:
        modkeeper edit --mod-id 3 --version 1.2.0
        modkeeper edit --mod-id 3 --tags body,patreon
        modkeeper edit --interactive
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    field_given = any(v is not None for v in (mod_id, name, source_url, version, tags))
    if interactive and field_given:
        print_error("--interactive cannot be combined with other options.")
        raise typer.Exit(code=1)
    if not interactive and mod_id is None:
        print_error("Either --mod-id or --interactive is required.")
        raise typer.Exit(code=1)
    if name is not None and not name.strip():
        print_error("Mod name cannot be empty.")
        raise typer.Exit(code=1)

    config = get_config(ctx)

    with store_session(config) as store:
        if interactive or mod_id is None:
            edit_interactively(store, TerminalPrompter())
            return

        mod = store.get_mod(mod_id)
        if mod is None:
            print_error(f"No mod with ID {mod_id} found.")
            raise typer.Exit(code=1)

        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = name.strip()
        if source_url is not None:
            changes["source_url"] = source_url
        if version is not None:
            changes["version"] = version
        new_tags = parse_tags_option(tags)
        if new_tags is not None:
            changes["tags"] = new_tags

        if not changes:
            print_info("Nothing to change.")
            return

        saved = _save(store, replace(mod, **changes))

    print_success(f"Updated {saved.name}")

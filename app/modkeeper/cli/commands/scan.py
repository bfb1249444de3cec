"""Scan command implementation.

Compares the mod directory with the database and, optionally, resolves
the differences.
"""

import json
from typing import Annotated

import typer

from modkeeper.cli.display import print_report
from modkeeper.cli.prompt import TerminalPrompter
from modkeeper.cli.types import OutputFormat, get_config, get_scanner, store_session
from modkeeper.core.errors import FilesystemError
from modkeeper.core.policy import InteractivePolicy, ResolutionPolicy, SyncHashesPolicy
from modkeeper.core.reconciler import Reconciler
from modkeeper.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Compare mods on disk with the database.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_mods(
    ctx: typer.Context,
    verify: Annotated[
        bool,
        typer.Option(
            "--verify",
            help="Hash files of tracked mods and compare them with the database.",
        ),
    ] = False,
    fix: Annotated[
        bool,
        typer.Option(
            "--fix",
            help="Interactively resolve every difference.",
        ),
    ] = False,
    sync_hashes: Annotated[
        bool,
        typer.Option(
            "--sync-hashes",
            help="Record current file hashes of tracked mods without asking.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Compare the mod directory with the database.

    Without options the scan only reports new and missing mods. --verify
    also hashes files of tracked mods. --fix asks how to resolve each
    difference; --sync-hashes accepts every file change of tracked mods.

    Examples:
        modkeeper scan                     # Report new and missing mods
        modkeeper scan --verify            # Also compare file hashes
        modkeeper scan --fix               # Resolve differences interactively
        modkeeper scan --sync-hashes       # Trust files on disk
        modkeeper scan --verify -f json    # Output report as JSON
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    if fix and sync_hashes:
        print_error("--fix and --sync-hashes cannot be used together.")
        raise typer.Exit(code=1)

    config = get_config(ctx)
    scanner = get_scanner(config)

    policy: ResolutionPolicy | None = None
    if fix:
        policy = InteractivePolicy(TerminalPrompter())
    elif sync_hashes:
        policy = SyncHashesPolicy()

    with store_session(config) as store:
        reconciler = Reconciler(store, scanner, hash_workers=config.hash_workers)
        try:
            report = reconciler.run(verify=verify, policy=policy)
        except FilesystemError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.to_dict()))
        return

    print_report(report)
    if policy is None and not report.is_in_sync:
        print_info("Run 'modkeeper scan --fix' to resolve the differences.")

"""Shared Rich display functions for reports, mods and tags.

Provides reusable table builders and summary printers used by the scan,
list and tags commands.
"""

from rich.markup import escape
from rich.table import Table

from modkeeper.models.mod import Mod, ModFile, Tag
from modkeeper.models.report import FileState, ModDiff, ModState, Outcome, ReconcileReport
from modkeeper.utils.formatting import (
    console,
    create_table,
    format_tags,
    format_timestamp,
    print_success,
    print_warning,
)

_MOD_STATE_LABELS: dict[ModState, str] = {
    ModState.NEW_ON_DISK: "[state.new]+new[/]",
    ModState.MISSING_FROM_DISK: "[state.missing]-missing[/]",
    ModState.UNCHANGED: "[state.unchanged]ok[/]",
}

_FILE_STATE_LABELS: dict[FileState, str] = {
    FileState.NEW_ON_DISK: "[state.new]+new[/]",
    FileState.MISSING_FROM_DISK: "[state.missing]-missing[/]",
    FileState.MODIFIED: "[state.modified]~modified[/]",
    FileState.UNCHANGED: "[state.unchanged]ok[/]",
    FileState.UNREADABLE: "[state.unreadable]!unreadable[/]",
}

_OUTCOME_LABELS: dict[Outcome, str] = {
    Outcome.REPORTED: "",
    Outcome.APPLIED: "[success]applied[/]",
    Outcome.SKIPPED: "[muted]skipped[/]",
}


def create_report_table(report: ReconcileReport) -> Table:
    """Create a table with one row per discrepancy in the report.

    Mods that match the store (and whose files all match, when verified)
    are left out; the summary line accounts for them.

    Args:
        report: Reconciliation report to display.

    Returns:
        Rich Table with State, Mod, File and Outcome columns.
    """
    table = create_table("Differences")
    table.add_column("State", width=12)
    table.add_column("Mod", no_wrap=True)
    table.add_column("File")
    table.add_column("Outcome", width=8)

    for mod_diff in report.mods:
        name = escape(mod_diff.display_name)
        if mod_diff.state != ModState.UNCHANGED:
            table.add_row(
                _MOD_STATE_LABELS[mod_diff.state],
                f"[mod_name]{name}[/]",
                f"[muted]{escape(mod_diff.directory_name)}/[/]",
                _OUTCOME_LABELS[mod_diff.outcome],
            )
            continue
        if mod_diff.anomaly is not None:
            table.add_row(
                _FILE_STATE_LABELS[FileState.UNREADABLE],
                f"[mod_name]{name}[/]",
                f"[muted]{escape(mod_diff.anomaly)}[/]",
                "",
            )
        for file_diff in mod_diff.files:
            if file_diff.state == FileState.UNCHANGED:
                continue
            detail = escape(file_diff.relative_path)
            if file_diff.error:
                detail = f"{detail} [muted]({escape(file_diff.error)})[/]"
            table.add_row(
                _FILE_STATE_LABELS[file_diff.state],
                f"[mod_name]{name}[/]",
                detail,
                _OUTCOME_LABELS[file_diff.outcome],
            )

    return table


def print_report_summary(report: ReconcileReport) -> None:
    """Print counts for a reconciliation report.

    Args:
        report: Reconciliation report to summarize.
    """
    summary = report.summary()
    parts = [
        f"{summary['mods_unchanged']} tracked",
        f"[state.new]{summary['mods_new']} new[/]",
        f"[state.missing]{summary['mods_missing']} missing[/]",
    ]
    if any(m.verified for m in report.mods):
        parts.append(
            f"files: [state.new]{summary['files_new']} new[/], "
            f"[state.missing]{summary['files_missing']} missing[/], "
            f"[state.modified]{summary['files_modified']} modified[/], "
            f"[state.unreadable]{summary['files_unreadable']} unreadable[/]"
        )
    console.print(f"\n[dim]Mods:[/] {', '.join(parts)}")

    if summary["applied"] or summary["skipped"]:
        console.print(
            f"[success]{summary['applied']} applied[/], [muted]{summary['skipped']} skipped[/]"
        )


def print_report(report: ReconcileReport) -> None:
    """Print the full report: differences table, warnings and summary."""
    if report.is_in_sync:
        print_success("Mods are in sync with the database.")
    else:
        console.print(create_report_table(report))

    for anomaly in report.anomalies:
        print_warning(f"Could not read {anomaly}")
    for collision in report.collisions:
        print_warning(f"Hash collision: {collision}")

    print_report_summary(report)


def create_mods_table(mods: list[Mod], statuses: dict[str, ModDiff] | None = None) -> Table:
    """Create a table listing mods.

    Args:
        mods: Mods to list.
        statuses: Verification result per directory name. Adds a Status
            column when given.

    Returns:
        Rich Table with one row per mod.
    """
    table = create_table("Mods")
    table.add_column("ID", justify="right", style="muted")
    table.add_column("Name", no_wrap=True)
    table.add_column("Version", style="muted")
    table.add_column("Tags")
    table.add_column("Updated", style="muted")
    if statuses is not None:
        table.add_column("Status")

    for mod in mods:
        row = [
            str(mod.id),
            f"[mod_name]{escape(mod.name)}[/]",
            escape(mod.version) or "-",
            format_tags(mod.tags),
            format_timestamp(mod.last_updated),
        ]
        if statuses is not None:
            row.append(_format_status(statuses.get(mod.directory_name)))
        table.add_row(*row)

    return table


def _format_status(mod_diff: ModDiff | None) -> str:
    if mod_diff is None:
        return "[muted]-[/]"
    if mod_diff.state == ModState.MISSING_FROM_DISK:
        return _MOD_STATE_LABELS[ModState.MISSING_FROM_DISK]
    if mod_diff.anomaly is not None:
        return _FILE_STATE_LABELS[FileState.UNREADABLE]
    if mod_diff.is_clean:
        return "[state.unchanged]ok[/]"
    changed = sum(1 for f in mod_diff.files if f.state != FileState.UNCHANGED)
    return f"[state.modified]{changed} changed[/]"


def print_mod_details(mod: Mod, files: list[ModFile], mod_diff: ModDiff | None = None) -> None:
    """Print every field of a mod and its tracked files.

    Args:
        mod: The mod to describe.
        files: Its tracked file records.
        mod_diff: Verification result. Adds a Verification line and the
            state of every file when given.
    """
    console.print(f"\n[mod_name]{escape(mod.name)}[/] [muted](id {mod.id})[/]")
    console.print(f"  Directory: {escape(mod.directory_name)}")
    console.print(f"  Version: {escape(mod.version) or '-'}")
    console.print(f"  Source: {escape(mod.source_url) or '-'}")
    console.print(f"  Tags: {format_tags(mod.tags)}")
    console.print(f"  Updated: {format_timestamp(mod.last_updated)}")

    if mod_diff is not None:
        passed = mod_diff.is_clean and mod_diff.verified
        verdict = "[success]PASSED[/]" if passed else "[error]FAILED[/]"
        console.print(f"  Verification: {verdict} {_format_status(mod_diff)}")
        if mod_diff.files:
            for file_diff in mod_diff.files:
                console.print(
                    f"    {_FILE_STATE_LABELS[file_diff.state]} {escape(file_diff.relative_path)}"
                )
            return

    if not files:
        console.print("  [muted]No tracked files[/]")
        return
    console.print(f"  Files ({len(files)}):")
    for mod_file in files:
        console.print(
            f"    {escape(mod_file.relative_path)} "
            f"[muted]{mod_file.file_kind.value} {mod_file.content_hash[:12]}[/]"
        )


def create_tags_table(tags: list[Tag], mods_by_tag: dict[str, list[Mod]]) -> Table:
    """Create a table of tags with the mods carrying each one.

    Args:
        tags: Tags to list.
        mods_by_tag: Mods per tag name.

    Returns:
        Rich Table with Tag, Mods and Names columns.
    """
    table = create_table("Tags")
    table.add_column("Tag", no_wrap=True)
    table.add_column("Mods", justify="right")
    table.add_column("Names")

    for tag in tags:
        names = ", ".join(escape(m.name) for m in mods_by_tag.get(tag.name, []))
        table.add_row(f"[tag]{escape(tag.name)}[/]", str(tag.mod_count), names or "[muted]-[/]")

    return table

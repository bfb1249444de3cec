"""Reconciliation report models.

The report is the classification of every mod and file found on disk or
in the store, in processing order, plus what happened to each
discrepancy when a resolution policy was active.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from modkeeper.models.mod import FileKind, Mod


class ModState(Enum):
    """Mod-level reconciliation state.

    Attributes:
        UNCHANGED: Directory on disk and mod in the store.
        NEW_ON_DISK: Directory on disk, no mod in the store.
        MISSING_FROM_DISK: Mod in the store, no directory on disk.
    """

    UNCHANGED = "unchanged"
    NEW_ON_DISK = "new"
    MISSING_FROM_DISK = "missing"


class FileState(Enum):
    """File-level reconciliation state (only computed during verification).

    Attributes:
        UNCHANGED: Stored hash matches the file on disk.
        NEW_ON_DISK: File on disk with no stored record.
        MISSING_FROM_DISK: Stored record with no file on disk.
        MODIFIED: File on disk whose hash differs from the stored one.
        UNREADABLE: File on disk that could not be hashed.
    """

    UNCHANGED = "unchanged"
    NEW_ON_DISK = "new"
    MISSING_FROM_DISK = "missing"
    MODIFIED = "modified"
    UNREADABLE = "unreadable"


class Outcome(Enum):
    """What happened to a discrepancy in this run."""

    REPORTED = "reported"
    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass(slots=True)
class FileDiff:
    """Classification of one file of an unchanged mod.

    Attributes:
        relative_path: File name within the mod directory.
        state: File-level state.
        file_kind: Package or script.
        old_hash: Stored hash, if a record exists.
        new_hash: Freshly computed hash, if the file was hashed.
        error: Read error for UNREADABLE files.
        outcome: Result of resolving this discrepancy.
    """

    relative_path: str
    state: FileState
    file_kind: FileKind
    old_hash: str | None = None
    new_hash: str | None = None
    error: str | None = None
    outcome: Outcome = Outcome.REPORTED

    @property
    def is_discrepancy(self) -> bool:
        """Check if a policy should be consulted for this file."""
        return self.state in (
            FileState.NEW_ON_DISK,
            FileState.MISSING_FROM_DISK,
            FileState.MODIFIED,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "path": self.relative_path,
            "state": self.state.value,
            "kind": self.file_kind.value,
            "outcome": self.outcome.value,
        }
        if self.old_hash is not None:
            result["old_hash"] = self.old_hash
        if self.new_hash is not None:
            result["new_hash"] = self.new_hash
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(slots=True)
class ModDiff:
    """Classification of one mod and, when verified, its files.

    Attributes:
        directory_name: Join key between disk and store.
        state: Mod-level state.
        mod: Stored record, None for NEW_ON_DISK mods.
        files: File classifications, in processing order.
        verified: Whether file-level classification was computed.
        anomaly: Directory read error, if any.
        outcome: Result of resolving the mod-level discrepancy.
    """

    directory_name: str
    state: ModState
    mod: Mod | None = None
    files: list[FileDiff] = field(default_factory=list)
    verified: bool = False
    anomaly: str | None = None
    outcome: Outcome = Outcome.REPORTED

    @property
    def display_name(self) -> str:
        """Stored name when known, otherwise the directory name."""
        return self.mod.name if self.mod is not None else self.directory_name

    @property
    def is_clean(self) -> bool:
        """Check if the mod and all its files match the store."""
        return (
            self.state == ModState.UNCHANGED
            and self.anomaly is None
            and all(f.state == FileState.UNCHANGED for f in self.files)
        )

    def files_in_state(self, state: FileState) -> list[FileDiff]:
        """Return the files classified with the given state."""
        return [f for f in self.files if f.state == state]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "directory": self.directory_name,
            "name": self.display_name,
            "state": self.state.value,
            "outcome": self.outcome.value,
            "verified": self.verified,
            "files": [f.to_dict() for f in self.files],
        }
        if self.mod is not None:
            result["id"] = self.mod.id
        if self.anomaly is not None:
            result["anomaly"] = self.anomaly
        return result


@dataclass(slots=True)
class ReconcileReport:
    """Result of one reconciliation run.

    Attributes:
        mods: One entry per directory name in D ∪ S, sorted by name.
        mode: Name of the mode that produced the report.
        collisions: Warnings about recorded hashes shared by other files.
    """

    mods: list[ModDiff] = field(default_factory=list)
    mode: str = "report"
    collisions: list[str] = field(default_factory=list)

    def in_state(self, state: ModState) -> list[ModDiff]:
        """Return the mods classified with the given state."""
        return [m for m in self.mods if m.state == state]

    @property
    def new_mods(self) -> list[ModDiff]:
        return self.in_state(ModState.NEW_ON_DISK)

    @property
    def missing_mods(self) -> list[ModDiff]:
        return self.in_state(ModState.MISSING_FROM_DISK)

    @property
    def unchanged_mods(self) -> list[ModDiff]:
        return self.in_state(ModState.UNCHANGED)

    def file_count(self, state: FileState) -> int:
        """Count file classifications with the given state across all mods."""
        return sum(len(m.files_in_state(state)) for m in self.mods)

    @property
    def anomalies(self) -> list[str]:
        """Human-readable list of every mod- and file-level read error."""
        messages: list[str] = []
        for mod_diff in self.mods:
            if mod_diff.anomaly is not None:
                messages.append(f"{mod_diff.directory_name}: {mod_diff.anomaly}")
            for file_diff in mod_diff.files_in_state(FileState.UNREADABLE):
                messages.append(
                    f"{mod_diff.directory_name}/{file_diff.relative_path}: {file_diff.error}"
                )
        return messages

    def outcome_count(self, outcome: Outcome) -> int:
        """Count mod- and file-level discrepancies with the given outcome."""
        count = 0
        for mod_diff in self.mods:
            if mod_diff.state != ModState.UNCHANGED and mod_diff.outcome == outcome:
                count += 1
            count += sum(1 for f in mod_diff.files if f.is_discrepancy and f.outcome == outcome)
        return count

    @property
    def is_in_sync(self) -> bool:
        """Check if disk and store agree everywhere that was examined."""
        return all(m.is_clean for m in self.mods)

    def summary(self) -> dict[str, int]:
        """Counts per classification and outcome."""
        return {
            "mods_unchanged": len(self.unchanged_mods),
            "mods_new": len(self.new_mods),
            "mods_missing": len(self.missing_mods),
            "files_unchanged": self.file_count(FileState.UNCHANGED),
            "files_new": self.file_count(FileState.NEW_ON_DISK),
            "files_missing": self.file_count(FileState.MISSING_FROM_DISK),
            "files_modified": self.file_count(FileState.MODIFIED),
            "files_unreadable": self.file_count(FileState.UNREADABLE),
            "applied": self.outcome_count(Outcome.APPLIED),
            "skipped": self.outcome_count(Outcome.SKIPPED),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mode": self.mode,
            "in_sync": self.is_in_sync,
            "summary": self.summary(),
            "anomalies": self.anomalies,
            "collisions": self.collisions,
            "mods": [m.to_dict() for m in self.mods],
        }

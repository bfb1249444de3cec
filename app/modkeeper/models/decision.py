"""Discrepancy and decision models.

A Discrepancy is one mismatch between the scanned tree and the store.
A resolution policy turns each discrepancy into a Decision, which the
reconciler applies to the store in a single transaction.
"""

from dataclasses import dataclass, field
from enum import Enum

from modkeeper.models.mod import FileKind, Mod, ModMetadata


class DiscrepancyKind(Enum):
    """Kind of mismatch presented to a resolution policy."""

    NEW_MOD = "new_mod"
    MISSING_MOD = "missing_mod"
    NEW_FILE = "new_file"
    MISSING_FILE = "missing_file"
    MODIFIED_FILE = "modified_file"

    @property
    def is_mod_level(self) -> bool:
        """Check if this discrepancy concerns a whole mod."""
        return self in (DiscrepancyKind.NEW_MOD, DiscrepancyKind.MISSING_MOD)


@dataclass(frozen=True, slots=True)
class HashedFile:
    """A file of a new mod, hashed so it can be adopted with the mod.

    Attributes:
        relative_path: File name within the mod directory.
        file_kind: Package or script.
        content_hash: Current digest of the file.
    """

    relative_path: str
    file_kind: FileKind
    content_hash: str


@dataclass(frozen=True, slots=True)
class Discrepancy:
    """Everything a policy needs to decide on one mismatch.

    Attributes:
        kind: What kind of mismatch this is.
        directory_name: Mod directory under the managed root.
        mod: Stored mod record (None for NEW_MOD).
        relative_path: File concerned (file-level kinds only).
        file_kind: Kind of that file.
        old_hash: Stored hash (MISSING_FILE, MODIFIED_FILE).
        new_hash: Current hash (NEW_FILE, MODIFIED_FILE).
        files: Readable files adopted together with a NEW_MOD.
    """

    kind: DiscrepancyKind
    directory_name: str
    mod: Mod | None = None
    relative_path: str | None = None
    file_kind: FileKind | None = None
    old_hash: str | None = None
    new_hash: str | None = None
    files: tuple[HashedFile, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        """Stored mod name when known, otherwise the directory name."""
        return self.mod.name if self.mod is not None else self.directory_name


@dataclass(frozen=True, slots=True)
class AddMod:
    """Create the mod with the given metadata and adopt its files."""

    metadata: ModMetadata


@dataclass(frozen=True, slots=True)
class DeleteMod:
    """Delete the mod record and, by cascade, its file records."""


@dataclass(frozen=True, slots=True)
class UpdateFile:
    """Record a file hash, optionally refreshing the mod's metadata.

    Used for both new and modified files; applying it is an upsert.
    """

    content_hash: str
    metadata: ModMetadata | None = None


@dataclass(frozen=True, slots=True)
class DeleteFile:
    """Delete the stored record of a file."""


@dataclass(frozen=True, slots=True)
class Skip:
    """Leave store and disk untouched for this discrepancy."""

    reason: str = "declined"


Decision = AddMod | DeleteMod | UpdateFile | DeleteFile | Skip

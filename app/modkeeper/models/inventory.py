"""Scanned inventory models.

These describe what the tree scanner found on disk during one run.
Nothing here is persisted.
"""

from dataclasses import dataclass, field
from pathlib import Path

from modkeeper.models.mod import FileKind


@dataclass(frozen=True, slots=True)
class ScannedFile:
    """A candidate mod file found directly inside a mod directory.

    Attributes:
        relative_path: File name relative to the mod directory.
        path: Absolute path used for hashing.
        file_kind: Package or script.
    """

    relative_path: str
    path: Path
    file_kind: FileKind


@dataclass(frozen=True, slots=True)
class ScannedMod:
    """A candidate mod directory under the managed root.

    Attributes:
        directory_name: Name of the directory under the managed root.
        path: Absolute path of the directory.
        files: Candidate files in discovery order.
        anomaly: Read error for the directory listing, if any. When set,
            ``files`` is empty and must not be trusted.
    """

    directory_name: str
    path: Path
    files: tuple[ScannedFile, ...] = field(default_factory=tuple)
    anomaly: str | None = None

    @property
    def is_readable(self) -> bool:
        """Check if the directory listing succeeded."""
        return self.anomaly is None

"""Mod models for the tracked inventory.

This module defines the records persisted for every mod and every
tracked file, plus the user-editable metadata carried by decisions.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import PurePath


class FileKind(Enum):
    """Category of a tracked mod file, derived from its extension."""

    PACKAGE = "package"
    SCRIPT = "script"

    @property
    def extension(self) -> str:
        """File extension (with leading dot) for this kind."""
        return _KIND_EXTENSIONS[self]

    @classmethod
    def from_path(cls, path: str | PurePath) -> "FileKind | None":
        """Classify a file by extension.

        Matching is case-insensitive.

        Args:
            path: File name or path.

        Returns:
            The matching FileKind, or None if the file is not trackable.
        """
        suffix = PurePath(path).suffix.lower()
        for kind, extension in _KIND_EXTENSIONS.items():
            if suffix == extension:
                return kind
        return None


_KIND_EXTENSIONS: dict[FileKind, str] = {
    FileKind.PACKAGE: ".package",
    FileKind.SCRIPT: ".ts4script",
}


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def normalize_tags(tags: Iterable[str]) -> frozenset[str]:
    """Strip whitespace and drop empty tag names."""
    return frozenset(t.strip() for t in tags if t.strip())


def parse_tag_list(raw: str) -> frozenset[str]:
    """Parse a comma separated tag list such as "Body, Patreon"."""
    return normalize_tags(raw.split(","))


@dataclass(frozen=True, slots=True)
class ModMetadata:
    """User-supplied metadata for a mod.

    Attributes:
        name: Display name.
        version: Free-form version string.
        source_url: Where the mod was downloaded from (not validated).
        tags: Tag names attached to the mod.
    """

    name: str
    version: str = ""
    source_url: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate metadata after initialization."""
        if not self.name.strip():
            msg = "Mod name cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Mod:
    """A tracked mod: one top-level directory of the managed root.

    Attributes:
        id: Store-assigned identifier. None until first saved.
        name: Display name, defaults to the directory name.
        directory_name: Directory under the managed root; unique per mod.
        version: Free-form version string.
        source_url: Free-form source URL.
        tags: Tag names attached to this mod.
        last_updated: When metadata or hashes were last confirmed.
    """

    name: str
    directory_name: str
    version: str = ""
    source_url: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    last_updated: datetime = field(default_factory=utc_now)
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate mod data after initialization."""
        if not self.name:
            msg = "Mod name cannot be empty"
            raise ValueError(msg)
        if not self.directory_name:
            msg = "Mod directory name cannot be empty"
            raise ValueError(msg)

    @property
    def metadata(self) -> ModMetadata:
        """The user-editable part of this mod."""
        return ModMetadata(
            name=self.name,
            version=self.version,
            source_url=self.source_url,
            tags=self.tags,
        )

    @classmethod
    def from_metadata(cls, directory_name: str, metadata: ModMetadata) -> "Mod":
        """Create an unsaved mod for a directory."""
        return cls(
            name=metadata.name,
            directory_name=directory_name,
            version=metadata.version,
            source_url=metadata.source_url,
            tags=metadata.tags,
        )


@dataclass(frozen=True, slots=True)
class ModFile:
    """A tracked package or script file inside a mod directory.

    Attributes:
        mod_id: Owning mod.
        relative_path: File name within the mod directory; unique per mod.
        content_hash: Digest of the file bytes when last confirmed.
        file_kind: Package or script, from the extension.
    """

    mod_id: int
    relative_path: str
    content_hash: str
    file_kind: FileKind


@dataclass(frozen=True, slots=True)
class Tag:
    """A tag and how many mods carry it."""

    name: str
    mod_count: int = 0

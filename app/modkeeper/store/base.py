"""Abstract base class for mod stores.

This module defines the ModStore interface the reconciler and the CLI
use against the persisted database. Every method raises StoreError on
backend failure.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractContextManager
from types import TracebackType

from modkeeper.models.mod import Mod, ModFile, Tag


class ModStore(ABC):
    """Abstract base class for mod metadata storage.

    All writes are upserts or deletes keyed by stable identifiers
    (mod id, directory name, file path within a mod), so replaying a
    write is harmless.

    Example:
        >>> with open_store(path) as store:
        ...     for mod in store.list_mods():
        ...         print(mod.name, len(store.get_files(mod.id)))
    """

    @abstractmethod
    def list_mods(self) -> list[Mod]:
        """Return every mod, sorted by directory name."""

    @abstractmethod
    def get_mod(self, mod_id: int) -> Mod | None:
        """Return the mod with the given id, or None."""

    @abstractmethod
    def get_mod_by_directory(self, directory_name: str) -> Mod | None:
        """Return the mod tracking the given directory, or None."""

    @abstractmethod
    def get_files(self, mod_id: int) -> list[ModFile]:
        """Return the tracked files of a mod, sorted by path."""

    @abstractmethod
    def upsert_mod(self, mod: Mod) -> Mod:
        """Create or update a mod.

        The record is matched by id, then by directory name. Tags are
        replaced by ``mod.tags``; unknown tags are created.

        Returns:
            The saved mod, with its id assigned.
        """

    @abstractmethod
    def delete_mod(self, mod_id: int) -> None:
        """Delete a mod and all its file records. Unknown ids are ignored."""

    @abstractmethod
    def upsert_file(self, mod_file: ModFile) -> None:
        """Create or update a file record keyed by (mod id, path).

        Raises:
            StoreError: If the owning mod does not exist.
        """

    @abstractmethod
    def delete_file(self, mod_id: int, relative_path: str) -> None:
        """Delete a file record. Unknown records are ignored."""

    @abstractmethod
    def find_files_by_hash(self, content_hash: str) -> list[ModFile]:
        """Return every file record with the given hash."""

    @abstractmethod
    def list_tags(self) -> list[Tag]:
        """Return every tag with its mod count, sorted by name."""

    @abstractmethod
    def delete_tag(self, name: str) -> bool:
        """Delete a tag and detach it from every mod.

        Returns:
            True if the tag existed.
        """

    @abstractmethod
    def find_mods_by_tags(self, tags: Iterable[str]) -> list[Mod]:
        """Return mods carrying any of the given tags, sorted by directory."""

    @abstractmethod
    def prune_tags(self) -> list[str]:
        """Delete tags attached to no mod.

        Returns:
            Names of the deleted tags.
        """

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Group the writes made inside the block into one commit.

        On error nothing written inside the block is kept.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the backend connection."""

    def __enter__(self) -> "ModStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

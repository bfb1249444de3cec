"""Tree scanner for the managed mod directory.

Walks exactly one level of subdirectories below the managed root and
collects package and script files directly inside each of them.

Rules:
- Each non-hidden subdirectory of the root is a mod candidate, except
  the shared-data directory.
- Within a mod directory only regular files with a known extension
  count; nested directories are never descended into.
- Hidden entries (names starting with ".") are ignored at both levels.
- Mods and files are returned sorted by name.
"""

import logging
from pathlib import Path

from modkeeper.core.config import DEFAULT_SHARED_DATA_DIR
from modkeeper.core.errors import FilesystemError
from modkeeper.models.inventory import ScannedFile, ScannedMod
from modkeeper.models.mod import FileKind

logger = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    """Check if a directory entry name is hidden."""
    return name.startswith(".")


class TreeScanner:
    """Scans the managed root into a candidate mod inventory.

    Args:
        root: The managed mod directory.
        shared_data_dir: Name of the subdirectory that is never a mod.

    Example:
        >>> scanner = TreeScanner(Path("~/Mods").expanduser())
        >>> for scanned in scanner.scan():
        ...     print(scanned.directory_name, len(scanned.files))
    """

    def __init__(self, root: Path, shared_data_dir: str = DEFAULT_SHARED_DATA_DIR) -> None:
        self._root = root
        self._shared_data_dir = shared_data_dir

    @property
    def root(self) -> Path:
        """The managed mod directory."""
        return self._root

    def scan(self) -> list[ScannedMod]:
        """Enumerate mod candidates under the managed root.

        Returns:
            ScannedMod per candidate directory, sorted by directory name.

        Raises:
            FilesystemError: If the root is missing, not a directory, or
                cannot be listed.
        """
        if not self._root.exists():
            raise FilesystemError(f"Mod directory not found: {self._root}")
        if not self._root.is_dir():
            raise FilesystemError(f"Mod directory is not a directory: {self._root}")

        try:
            entries = sorted(self._root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise FilesystemError(f"Cannot read mod directory {self._root}: {e}") from e

        mods: list[ScannedMod] = []
        for entry in entries:
            name = entry.name
            if is_hidden(name) or name == self._shared_data_dir:
                continue
            try:
                if not entry.is_dir():
                    continue
            except OSError:
                logger.warning("Cannot determine type of: %s", entry)
                continue
            mods.append(self._scan_mod(entry))

        logger.debug("Found %d mod directories in %s", len(mods), self._root)
        return mods

    def _scan_mod(self, mod_dir: Path) -> ScannedMod:
        """List candidate files of one mod directory.

        A listing failure is returned as an anomaly rather than raised.
        """
        try:
            entries = sorted(mod_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning("Cannot read mod directory %s: %s", mod_dir, e)
            return ScannedMod(
                directory_name=mod_dir.name,
                path=mod_dir,
                anomaly=f"cannot list directory: {e.strerror or e}",
            )

        files: list[ScannedFile] = []
        for entry in entries:
            if is_hidden(entry.name):
                continue
            kind = FileKind.from_path(entry.name)
            if kind is None:
                continue
            try:
                if not entry.is_file():
                    continue
            except OSError:
                logger.warning("Cannot determine type of: %s", entry)
                continue
            files.append(ScannedFile(relative_path=entry.name, path=entry, file_kind=kind))

        logger.debug("Scanned %s: %d candidate files", mod_dir.name, len(files))
        return ScannedMod(directory_name=mod_dir.name, path=mod_dir, files=tuple(files))

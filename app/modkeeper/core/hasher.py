"""Content hashing for tracked mod files.

Digests are lowercase hex SHA-256 of the raw file bytes, so they are
stable across runs and platforms. Hashing many files may use a bounded
thread pool; results always come back in input order.
"""

import hashlib
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from modkeeper.core.errors import HashError

logger = logging.getLogger(__name__)

# 256KB reads keep memory flat for large package files
CHUNK_SIZE = 262144


def hash_bytes(data: bytes) -> str:
    """Hash an in-memory byte string.

    Args:
        data: Bytes to hash. Empty input is valid.

    Returns:
        64-character hexadecimal SHA-256 digest.
    """
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path, chunk_size: int = CHUNK_SIZE) -> str:
    """Compute the content digest of a single file.

    Zero-length files hash like any other content.

    Args:
        path: File to hash.
        chunk_size: Size of each read.

    Returns:
        64-character hexadecimal SHA-256 digest.

    Raises:
        HashError: If the file cannot be opened or read.
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            buffer = bytearray(chunk_size)
            mv = memoryview(buffer)
            while True:
                n = f.readinto(mv)
                if not n:
                    break
                digest.update(mv[:n])
    except OSError as e:
        raise HashError(path, e.strerror or str(e)) from e
    logger.debug("Hashed %s", path)
    return digest.hexdigest()


@dataclass(frozen=True, slots=True)
class HashOutcome:
    """Result of hashing one file in a batch.

    Exactly one of ``digest`` and ``error`` is set.
    """

    path: Path
    digest: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Check if the file was hashed successfully."""
        return self.digest is not None


def _hash_one(path: Path) -> HashOutcome:
    try:
        return HashOutcome(path=path, digest=hash_file(path))
    except HashError as e:
        logger.warning("Cannot hash %s: %s", path, e.message)
        return HashOutcome(path=path, error=e.message)


def hash_files(paths: Sequence[Path], workers: int = 1) -> list[HashOutcome]:
    """Hash several files, possibly in parallel.

    A failure on one file never aborts the batch; it is reported in that
    file's outcome instead.

    Args:
        paths: Files to hash.
        workers: Maximum number of threads. 1 hashes sequentially.

    Returns:
        One HashOutcome per path, in the same order as ``paths``.
    """
    if workers <= 1 or len(paths) <= 1:
        return [_hash_one(p) for p in paths]

    with ThreadPoolExecutor(max_workers=min(workers, len(paths))) as executor:
        # map() yields in submission order regardless of completion order
        return list(executor.map(_hash_one, paths))

"""Reconciliation engine between the mod tree and the store.

Classification joins the scanned tree and the stored mods on directory
name, then (when verifying) joins each unchanged mod's files on path and
compares content hashes. With a resolution policy, every discrepancy is
turned into a decision and applied to the store, one transaction per
decision, in processing order.

Processing order:
- Mods sorted by directory name.
- Within a mod, files found on disk (sorted by name), then stored files
  missing from disk (sorted by path).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

from modkeeper.core.errors import StoreError
from modkeeper.core.hasher import HashOutcome, hash_files
from modkeeper.models.decision import (
    AddMod,
    Decision,
    DeleteFile,
    DeleteMod,
    Discrepancy,
    DiscrepancyKind,
    HashedFile,
    Skip,
    UpdateFile,
)
from modkeeper.models.mod import Mod, ModFile, utc_now
from modkeeper.models.report import (
    FileDiff,
    FileState,
    ModDiff,
    ModState,
    Outcome,
    ReconcileReport,
)

if TYPE_CHECKING:
    from modkeeper.core.policy import ResolutionPolicy
    from modkeeper.core.scanner import TreeScanner
    from modkeeper.models.inventory import ScannedFile, ScannedMod
    from modkeeper.store.base import ModStore

logger = logging.getLogger(__name__)

_FILE_DISCREPANCY_KINDS: dict[FileState, DiscrepancyKind] = {
    FileState.NEW_ON_DISK: DiscrepancyKind.NEW_FILE,
    FileState.MISSING_FROM_DISK: DiscrepancyKind.MISSING_FILE,
    FileState.MODIFIED: DiscrepancyKind.MODIFIED_FILE,
}


def classify_mods(scanned: Sequence[ScannedMod], stored: Sequence[Mod]) -> list[ModDiff]:
    """Partition the union of scanned and stored directory names.

    Every directory name lands in exactly one state. Directory read
    anomalies are carried over from the scan.

    Args:
        scanned: Mod candidates found on disk.
        stored: Mods recorded in the store.

    Returns:
        One ModDiff per directory name, sorted by directory name.
    """
    on_disk = {m.directory_name: m for m in scanned}
    in_store = {m.directory_name: m for m in stored}

    diffs: list[ModDiff] = []
    for name in sorted(on_disk.keys() | in_store.keys()):
        scanned_mod = on_disk.get(name)
        mod = in_store.get(name)
        if scanned_mod is None:
            diffs.append(ModDiff(directory_name=name, state=ModState.MISSING_FROM_DISK, mod=mod))
            continue
        state = ModState.UNCHANGED if mod is not None else ModState.NEW_ON_DISK
        diffs.append(
            ModDiff(
                directory_name=name,
                state=state,
                mod=mod,
                anomaly=scanned_mod.anomaly,
            )
        )
    return diffs


def classify_files(
    scanned_files: Sequence[ScannedFile],
    outcomes: Sequence[HashOutcome],
    stored_files: Sequence[ModFile],
) -> list[FileDiff]:
    """Classify the files of one mod present both on disk and in the store.

    Args:
        scanned_files: Files found in the mod directory.
        outcomes: Hash outcome per scanned file, in the same order.
        stored_files: File records of the mod.

    Returns:
        FileDiff per file in processing order.
    """
    recorded = {f.relative_path: f for f in stored_files}
    seen: set[str] = set()

    diffs: list[FileDiff] = []
    for scanned_file, outcome in zip(scanned_files, outcomes, strict=True):
        path = scanned_file.relative_path
        seen.add(path)
        record = recorded.get(path)
        old_hash = record.content_hash if record is not None else None

        if not outcome.ok:
            state = FileState.UNREADABLE
        elif record is None:
            state = FileState.NEW_ON_DISK
        elif record.content_hash == outcome.digest:
            state = FileState.UNCHANGED
        else:
            state = FileState.MODIFIED

        diffs.append(
            FileDiff(
                relative_path=path,
                state=state,
                file_kind=scanned_file.file_kind,
                old_hash=old_hash,
                new_hash=outcome.digest,
                error=outcome.error,
            )
        )

    for path in sorted(recorded.keys() - seen):
        record = recorded[path]
        diffs.append(
            FileDiff(
                relative_path=path,
                state=FileState.MISSING_FROM_DISK,
                file_kind=record.file_kind,
                old_hash=record.content_hash,
            )
        )
    return diffs


class Reconciler:
    """Compares the mod tree with the store and applies decisions.

    Args:
        store: Open mod store.
        scanner: Scanner for the managed root.
        hash_workers: Maximum threads used for hashing.
        clock: Source of the current time for ``last_updated``.

    Example:
        >>> with open_store(db_path) as store:
        ...     reconciler = Reconciler(store, TreeScanner(mods_dir))
        ...     report = reconciler.run(verify=True)
        ...     print(report.summary())
    """

    def __init__(
        self,
        store: ModStore,
        scanner: TreeScanner,
        hash_workers: int = 1,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.scanner = scanner
        self.hash_workers = hash_workers
        self._clock = clock

    def run(
        self,
        verify: bool = False,
        policy: ResolutionPolicy | None = None,
    ) -> ReconcileReport:
        """Classify the tree against the store and resolve discrepancies.

        Without a policy the run is read-only.

        Args:
            verify: Compute file-level classification for unchanged mods.
            policy: Resolution policy. Forces verification if the policy
                requires it.

        Returns:
            The report, with outcomes set for resolved discrepancies.

        Raises:
            FilesystemError: If the managed root cannot be read.
            StoreError: If the store fails. Decisions applied before the
                failure stay applied.
        """
        if policy is not None and policy.requires_verification:
            verify = True

        scanned = {m.directory_name: m for m in self.scanner.scan()}
        report = ReconcileReport(
            mods=classify_mods(list(scanned.values()), self.store.list_mods()),
            mode=policy.name if policy is not None else "report",
        )

        if verify:
            for mod_diff in report.unchanged_mods:
                self._verify(mod_diff, scanned[mod_diff.directory_name])

        logger.info(
            "Classified %d mods (%d new, %d missing)",
            len(report.mods),
            len(report.new_mods),
            len(report.missing_mods),
        )

        if policy is not None:
            for mod_diff in report.mods:
                self._resolve_mod(report, mod_diff, scanned.get(mod_diff.directory_name), policy)

        return report

    def _verify(self, mod_diff: ModDiff, scanned_mod: ScannedMod) -> None:
        """Compute file-level classification for one unchanged mod."""
        if not scanned_mod.is_readable or mod_diff.mod is None or mod_diff.mod.id is None:
            return
        outcomes = hash_files([f.path for f in scanned_mod.files], workers=self.hash_workers)
        mod_diff.files = classify_files(
            scanned_mod.files,
            outcomes,
            self.store.get_files(mod_diff.mod.id),
        )
        mod_diff.verified = True

    def _resolve_mod(
        self,
        report: ReconcileReport,
        mod_diff: ModDiff,
        scanned_mod: ScannedMod | None,
        policy: ResolutionPolicy,
    ) -> None:
        if mod_diff.state == ModState.NEW_ON_DISK:
            files: tuple[HashedFile, ...] = ()
            if policy.adopts_new_mods and scanned_mod is not None and scanned_mod.is_readable:
                files = self._hash_new_mod(scanned_mod)
            discrepancy = Discrepancy(
                kind=DiscrepancyKind.NEW_MOD,
                directory_name=mod_diff.directory_name,
                files=files,
            )
            decision = policy.resolve(discrepancy)
            mod_diff.outcome = self._apply_mod(report, mod_diff, discrepancy, decision)
            return

        if mod_diff.state == ModState.MISSING_FROM_DISK:
            discrepancy = Discrepancy(
                kind=DiscrepancyKind.MISSING_MOD,
                directory_name=mod_diff.directory_name,
                mod=mod_diff.mod,
            )
            decision = policy.resolve(discrepancy)
            mod_diff.outcome = self._apply_mod(report, mod_diff, discrepancy, decision)
            return

        for file_diff in mod_diff.files:
            if not file_diff.is_discrepancy:
                continue
            discrepancy = Discrepancy(
                kind=_FILE_DISCREPANCY_KINDS[file_diff.state],
                directory_name=mod_diff.directory_name,
                mod=mod_diff.mod,
                relative_path=file_diff.relative_path,
                file_kind=file_diff.file_kind,
                old_hash=file_diff.old_hash,
                new_hash=file_diff.new_hash,
            )
            file_diff.outcome = self._apply_file(
                report, mod_diff, file_diff, policy.resolve(discrepancy)
            )

    def _hash_new_mod(self, scanned_mod: ScannedMod) -> tuple[HashedFile, ...]:
        """Hash the files of a new mod; unreadable files are left out."""
        outcomes = hash_files([f.path for f in scanned_mod.files], workers=self.hash_workers)
        hashed: list[HashedFile] = []
        for scanned_file, outcome in zip(scanned_mod.files, outcomes, strict=True):
            if outcome.digest is None:
                continue
            hashed.append(
                HashedFile(
                    relative_path=scanned_file.relative_path,
                    file_kind=scanned_file.file_kind,
                    content_hash=outcome.digest,
                )
            )
        return tuple(hashed)

    def _apply_mod(
        self,
        report: ReconcileReport,
        mod_diff: ModDiff,
        discrepancy: Discrepancy,
        decision: Decision,
    ) -> Outcome:
        """Apply a decision about a whole mod."""
        if isinstance(decision, Skip):
            logger.info("Skipped %s: %s", mod_diff.directory_name, decision.reason)
            return Outcome.SKIPPED

        if isinstance(decision, AddMod) and discrepancy.kind == DiscrepancyKind.NEW_MOD:
            with self.store.transaction():
                mod = replace(
                    Mod.from_metadata(mod_diff.directory_name, decision.metadata),
                    last_updated=self._clock(),
                )
                mod = self.store.upsert_mod(mod)
                if mod.id is None:
                    msg = f"Store returned no ID for {mod_diff.directory_name}"
                    raise StoreError(msg)
                for hashed in discrepancy.files:
                    self._check_collision(report, mod, hashed.relative_path, hashed.content_hash)
                    self.store.upsert_file(
                        ModFile(
                            mod_id=mod.id,
                            relative_path=hashed.relative_path,
                            content_hash=hashed.content_hash,
                            file_kind=hashed.file_kind,
                        )
                    )
            mod_diff.mod = mod
            logger.info("Added %s with %d files", mod_diff.directory_name, len(discrepancy.files))
            return Outcome.APPLIED

        mod = mod_diff.mod
        if isinstance(decision, DeleteMod) and mod is not None and mod.id is not None:
            with self.store.transaction():
                self.store.delete_mod(mod.id)
            logger.info("Deleted %s", mod_diff.directory_name)
            return Outcome.APPLIED

        msg = f"{type(decision).__name__} cannot resolve {discrepancy.kind.value}"
        raise ValueError(msg)

    def _apply_file(
        self,
        report: ReconcileReport,
        mod_diff: ModDiff,
        file_diff: FileDiff,
        decision: Decision,
    ) -> Outcome:
        """Apply a decision about one file of an unchanged mod."""
        if isinstance(decision, Skip):
            logger.info(
                "Skipped %s/%s: %s",
                mod_diff.directory_name,
                file_diff.relative_path,
                decision.reason,
            )
            return Outcome.SKIPPED

        mod = mod_diff.mod
        if mod is None or mod.id is None:
            msg = f"{mod_diff.directory_name} has no stored record"
            raise StoreError(msg)

        if isinstance(decision, UpdateFile):
            updated = replace(mod, last_updated=self._clock())
            if decision.metadata is not None:
                updated = replace(
                    updated,
                    name=decision.metadata.name,
                    version=decision.metadata.version,
                    source_url=decision.metadata.source_url,
                    tags=decision.metadata.tags,
                )
            with self.store.transaction():
                self._check_collision(report, mod, file_diff.relative_path, decision.content_hash)
                self.store.upsert_file(
                    ModFile(
                        mod_id=mod.id,
                        relative_path=file_diff.relative_path,
                        content_hash=decision.content_hash,
                        file_kind=file_diff.file_kind,
                    )
                )
                mod_diff.mod = self.store.upsert_mod(updated)
            logger.info("Updated %s/%s", mod_diff.directory_name, file_diff.relative_path)
            return Outcome.APPLIED

        if isinstance(decision, DeleteFile):
            with self.store.transaction():
                self.store.delete_file(mod.id, file_diff.relative_path)
                mod_diff.mod = self.store.upsert_mod(replace(mod, last_updated=self._clock()))
            logger.info("Removed %s/%s", mod_diff.directory_name, file_diff.relative_path)
            return Outcome.APPLIED

        msg = f"{type(decision).__name__} cannot resolve a file discrepancy"
        raise ValueError(msg)

    def _check_collision(
        self,
        report: ReconcileReport,
        mod: Mod,
        relative_path: str,
        content_hash: str,
    ) -> None:
        """Warn when a hash about to be recorded already belongs to another mod."""
        for other in self.store.find_files_by_hash(content_hash):
            if other.mod_id == mod.id:
                continue
            owner = self.store.get_mod(other.mod_id)
            owner_dir = owner.directory_name if owner is not None else f"#{other.mod_id}"
            message = (
                f"{mod.directory_name}/{relative_path} has the same content as "
                f"{owner_dir}/{other.relative_path}"
            )
            logger.warning("Hash collision: %s", message)
            report.collisions.append(message)

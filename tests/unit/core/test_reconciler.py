"""Unit tests for the reconciliation engine."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from modkeeper.core.errors import FilesystemError, StoreError
from modkeeper.core.hasher import HashOutcome, hash_bytes
from modkeeper.core.policy import InteractivePolicy, SyncHashesPolicy
from modkeeper.core.reconciler import Reconciler, classify_files, classify_mods
from modkeeper.core.scanner import TreeScanner
from modkeeper.models.decision import Discrepancy, DiscrepancyKind, Skip
from modkeeper.models.inventory import ScannedFile, ScannedMod
from modkeeper.models.mod import FileKind, Mod, ModFile
from modkeeper.models.report import FileState, ModState, Outcome
from modkeeper.store import SqlModStore

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


def _track(store: SqlModStore, directory: str, files: dict[str, bytes]) -> Mod:
    """Record a mod and its file hashes as if it had been adopted earlier."""
    mod = store.upsert_mod(
        Mod(
            name=directory,
            directory_name=directory,
            last_updated=datetime(2024, 1, 1, tzinfo=UTC),
        )
    )
    assert mod.id is not None
    for name, content in files.items():
        store.upsert_file(
            ModFile(
                mod_id=mod.id,
                relative_path=name,
                content_hash=hash_bytes(content),
                file_kind=FileKind.from_path(name) or FileKind.PACKAGE,
            )
        )
    return mod


def _reconciler(store: SqlModStore, mods_root: Path) -> Reconciler:
    return Reconciler(store, TreeScanner(mods_root), clock=lambda: FIXED_NOW)


class _SkipAll(SyncHashesPolicy):
    """Policy that declines everything, for verification-only runs."""

    def resolve(self, discrepancy: Discrepancy) -> Skip:
        return Skip()


class TestClassifyMods:
    """Tests for classify_mods function."""

    def test_partitions_union_of_names(self, tmp_path: Path) -> None:
        """Every name lands in exactly one state."""
        scanned = [ScannedMod(directory_name=n, path=tmp_path / n) for n in ("a", "b", "c")]
        stored = [Mod(name=n, directory_name=n, id=i) for i, n in enumerate(("b", "c", "d"))]

        diffs = classify_mods(scanned, stored)

        states = {d.directory_name: d.state for d in diffs}
        assert states == {
            "a": ModState.NEW_ON_DISK,
            "b": ModState.UNCHANGED,
            "c": ModState.UNCHANGED,
            "d": ModState.MISSING_FROM_DISK,
        }

    def test_sorted_by_directory_name(self, tmp_path: Path) -> None:
        scanned = [ScannedMod(directory_name=n, path=tmp_path / n) for n in ("z", "m")]
        stored = [Mod(name="a", directory_name="a", id=1)]

        diffs = classify_mods(scanned, stored)

        assert [d.directory_name for d in diffs] == ["a", "m", "z"]

    def test_empty_inputs(self) -> None:
        assert classify_mods([], []) == []

    def test_carries_anomaly_and_stored_mod(self, tmp_path: Path) -> None:
        mod = Mod(name="Shown", directory_name="x", id=7)
        scanned = [ScannedMod(directory_name="x", path=tmp_path / "x", anomaly="denied")]

        (diff,) = classify_mods(scanned, [mod])

        assert diff.mod == mod
        assert diff.anomaly == "denied"
        assert diff.display_name == "Shown"


class TestClassifyFiles:
    """Tests for classify_files function."""

    def _scanned(self, tmp_path: Path, *names: str) -> list[ScannedFile]:
        return [
            ScannedFile(relative_path=n, path=tmp_path / n, file_kind=FileKind.PACKAGE)
            for n in names
        ]

    def _stored(self, **hashes: str) -> list[ModFile]:
        return [
            ModFile(
                mod_id=1,
                relative_path=f"{n}.package",
                content_hash=h,
                file_kind=FileKind.PACKAGE,
            )
            for n, h in hashes.items()
        ]

    def test_all_states(self, tmp_path: Path) -> None:
        """Files are unchanged, modified, new, unreadable or missing."""
        scanned = self._scanned(
            tmp_path, "same.package", "changed.package", "fresh.package", "bad.package"
        )
        outcomes = [
            HashOutcome(path=tmp_path / "same.package", digest="h1"),
            HashOutcome(path=tmp_path / "changed.package", digest="h2-new"),
            HashOutcome(path=tmp_path / "fresh.package", digest="h3"),
            HashOutcome(path=tmp_path / "bad.package", error="Permission denied"),
        ]
        stored = self._stored(same="h1", changed="h2", bad="h4", gone="h5")

        diffs = classify_files(scanned, outcomes, stored)

        assert [(d.relative_path, d.state) for d in diffs] == [
            ("same.package", FileState.UNCHANGED),
            ("changed.package", FileState.MODIFIED),
            ("fresh.package", FileState.NEW_ON_DISK),
            ("bad.package", FileState.UNREADABLE),
            ("gone.package", FileState.MISSING_FROM_DISK),
        ]
        changed = diffs[1]
        assert (changed.old_hash, changed.new_hash) == ("h2", "h2-new")
        assert diffs[3].error == "Permission denied"
        assert diffs[3].old_hash == "h4"
        assert diffs[4].old_hash == "h5"
        assert diffs[4].new_hash is None

    def test_missing_files_sorted_after_scanned(self, tmp_path: Path) -> None:
        stored = self._stored(b="x", a="y")

        diffs = classify_files([], [], stored)

        assert [d.relative_path for d in diffs] == ["a.package", "b.package"]
        assert all(d.state == FileState.MISSING_FROM_DISK for d in diffs)

    def test_unreadable_is_not_a_discrepancy(self, tmp_path: Path) -> None:
        scanned = self._scanned(tmp_path, "bad.package")
        outcomes = [HashOutcome(path=tmp_path / "bad.package", error="I/O error")]

        (diff,) = classify_files(scanned, outcomes, [])

        assert diff.state == FileState.UNREADABLE
        assert not diff.is_discrepancy


class TestReportMode:
    """Tests for read-only reconciliation."""

    def test_scenario_new_mods_are_reported_without_files(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """Untracked mods are new at mod level only."""
        make_mod("Alice", {"a.package": b"alice"})
        make_mod("Bob", {"b.ts4script": b"bob"})

        report = _reconciler(store, mods_root).run(verify=True)

        assert [(m.directory_name, m.state) for m in report.mods] == [
            ("Alice", ModState.NEW_ON_DISK),
            ("Bob", ModState.NEW_ON_DISK),
        ]
        assert all(m.files == [] for m in report.mods)
        assert report.mode == "report"
        assert store.list_mods() == []

    def test_scenario_modified_file_is_reported(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """A changed file of a tracked mod is reported with both hashes."""
        _track(store, "Alice", {"a.package": b"version 1"})
        make_mod("Alice", {"a.package": b"version 2"})

        report = _reconciler(store, mods_root).run(verify=True)

        (alice,) = report.mods
        assert alice.state == ModState.UNCHANGED
        assert alice.verified
        (file_diff,) = alice.files
        assert file_diff.state == FileState.MODIFIED
        assert file_diff.old_hash == hash_bytes(b"version 1")
        assert file_diff.new_hash == hash_bytes(b"version 2")
        assert not report.is_in_sync

    def test_without_verify_files_are_not_hashed(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        _track(store, "Alice", {"a.package": b"old"})
        make_mod("Alice", {"a.package": b"new"})

        with patch("modkeeper.core.reconciler.hash_files") as mock_hash:
            report = _reconciler(store, mods_root).run()

        mock_hash.assert_not_called()
        assert report.mods[0].files == []
        assert not report.mods[0].verified
        assert report.is_in_sync

    def test_missing_mod_reported(
        self,
        store: SqlModStore,
        mods_root: Path,
    ) -> None:
        _track(store, "Carol", {"c.package": b"c"})

        report = _reconciler(store, mods_root).run(verify=True)

        (carol,) = report.missing_mods
        assert carol.directory_name == "Carol"
        assert carol.files == []

    def test_report_is_idempotent(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """Two report runs without changes classify identically."""
        _track(store, "Tracked", {"t.package": b"old", "gone.package": b"g"})
        _track(store, "Missing", {})
        make_mod("Tracked", {"t.package": b"new", "extra.ts4script": b"e"})
        make_mod("Untracked", {"u.package": b"u"})

        reconciler = _reconciler(store, mods_root)
        first = reconciler.run(verify=True)
        second = reconciler.run(verify=True)

        assert first.to_dict() == second.to_dict()

    def test_report_never_writes(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        _track(store, "Tracked", {"t.package": b"old"})
        make_mod("Tracked", {"t.package": b"new"})
        before = store.get_files(store.list_mods()[0].id or 0)

        _reconciler(store, mods_root).run(verify=True)

        assert store.get_files(store.list_mods()[0].id or 0) == before

    def test_unreadable_file_surfaces_as_anomaly(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """Hash failures are reported, never raised."""
        _track(store, "Locked", {"l.package": b"l"})
        make_mod("Locked", {"l.package": b"l"})
        failing = [HashOutcome(path=mods_root / "Locked" / "l.package", error="Permission denied")]

        with patch("modkeeper.core.reconciler.hash_files", return_value=failing):
            report = _reconciler(store, mods_root).run(verify=True)

        assert report.mods[0].files[0].state == FileState.UNREADABLE
        assert report.anomalies == ["Locked/l.package: Permission denied"]
        assert report.summary()["files_unreadable"] == 1

    def test_unlistable_mod_gets_no_file_classification(
        self,
        store: SqlModStore,
        mods_root: Path,
    ) -> None:
        _track(store, "Broken", {"b.package": b"b"})
        scanner = TreeScanner(mods_root)
        broken = ScannedMod(
            directory_name="Broken",
            path=mods_root / "Broken",
            anomaly="cannot list directory: Permission denied",
        )

        with patch.object(scanner, "scan", return_value=[broken]):
            report = Reconciler(store, scanner).run(verify=True)

        (diff,) = report.mods
        assert diff.state == ModState.UNCHANGED
        assert diff.files == []
        assert not diff.verified
        assert report.anomalies == ["Broken: cannot list directory: Permission denied"]

    def test_missing_root_is_fatal(self, store: SqlModStore, tmp_path: Path) -> None:
        with pytest.raises(FilesystemError):
            Reconciler(store, TreeScanner(tmp_path / "nowhere")).run()

    def test_parallel_hashing_matches_sequential(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        files = {f"{i}.package": bytes([i]) * 50 for i in range(6)}
        _track(store, "Many", {name: b"stale" for name in files})
        make_mod("Many", files)

        sequential = Reconciler(store, TreeScanner(mods_root), hash_workers=1).run(verify=True)
        parallel = Reconciler(store, TreeScanner(mods_root), hash_workers=4).run(verify=True)

        assert sequential.to_dict() == parallel.to_dict()


class TestSyncHashes:
    """Tests for non-interactive hash synchronization."""

    def test_scenario_sync_records_new_hash(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """After syncing, a verify run finds no modified files."""
        mod = _track(store, "Alice", {"a.package": b"version 1"})
        make_mod("Alice", {"a.package": b"version 2"})
        reconciler = _reconciler(store, mods_root)

        report = reconciler.run(policy=SyncHashesPolicy())

        assert report.mode == "sync-hashes"
        assert report.mods[0].files[0].outcome == Outcome.APPLIED
        (stored,) = store.get_files(mod.id or 0)
        assert stored.content_hash == hash_bytes(b"version 2")
        assert reconciler.run(verify=True).file_count(FileState.MODIFIED) == 0

    def test_sync_is_idempotent(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """A second sync run finds nothing to do."""
        _track(store, "Mod", {"keep.package": b"k", "old.package": b"o", "gone.package": b"g"})
        make_mod("Mod", {"keep.package": b"k", "old.package": b"changed", "new.ts4script": b"n"})
        reconciler = _reconciler(store, mods_root)

        reconciler.run(policy=SyncHashesPolicy())
        second = reconciler.run(policy=SyncHashesPolicy())

        for state in (FileState.MODIFIED, FileState.NEW_ON_DISK, FileState.MISSING_FROM_DISK):
            assert second.file_count(state) == 0
        assert second.outcome_count(Outcome.APPLIED) == 0

    def test_sync_adopts_files_new_on_disk(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """Sync also records files that have no stored record yet.

        Adopting new files (not only updating existing hashes) is an
        explicit choice; this test pins it.
        """
        mod = _track(store, "Mod", {})
        make_mod("Mod", {"added.package": b"a"})

        _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        assert [f.relative_path for f in store.get_files(mod.id or 0)] == ["added.package"]

    def test_sync_drops_missing_file_records(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        mod = _track(store, "Mod", {"gone.package": b"g"})
        make_mod("Mod")

        _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        assert store.get_files(mod.id or 0) == []

    def test_sync_leaves_mod_level_changes_alone(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """New and missing mods are skipped, never created or deleted."""
        _track(store, "Missing", {"m.package": b"m"})
        make_mod("Untracked", {"u.package": b"u"})

        report = _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        assert [m.directory_name for m in store.list_mods()] == ["Missing"]
        assert all(m.outcome == Outcome.SKIPPED for m in report.mods)

    def test_sync_refreshes_last_updated_but_not_metadata(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        mod = store.upsert_mod(
            Mod(
                name="Pretty Name",
                directory_name="Mod",
                version="1.0",
                source_url="https://example.com/mod",
                tags=frozenset({"cc"}),
                last_updated=datetime(2024, 1, 1, tzinfo=UTC),
            )
        )
        make_mod("Mod", {"new.package": b"n"})

        _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        saved = store.get_mod(mod.id or 0)
        assert saved is not None
        assert saved.last_updated == FIXED_NOW
        assert saved.metadata == mod.metadata

    def test_sync_excludes_unreadable_files(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """Unreadable files keep their stored record untouched."""
        mod = _track(store, "Mod", {"l.package": b"old"})
        make_mod("Mod", {"l.package": b"new"})
        failing = [HashOutcome(path=mods_root / "Mod" / "l.package", error="I/O error")]

        with patch("modkeeper.core.reconciler.hash_files", return_value=failing):
            report = _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        (stored,) = store.get_files(mod.id or 0)
        assert stored.content_hash == hash_bytes(b"old")
        assert report.mods[0].files[0].outcome == Outcome.REPORTED

    def test_store_failure_aborts_but_keeps_committed_work(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """Decisions applied before a store failure stay applied."""
        first = _track(store, "First", {"f.package": b"old"})
        _track(store, "Second", {"s.package": b"old"})
        make_mod("First", {"f.package": b"new"})
        make_mod("Second", {"s.package": b"new"})
        original_upsert = store.upsert_file
        calls = {"count": 0}

        def flaky_upsert(mod_file: ModFile) -> None:
            calls["count"] += 1
            if calls["count"] > 1:
                raise StoreError("disk full")
            original_upsert(mod_file)

        with (
            patch.object(store, "upsert_file", side_effect=flaky_upsert),
            pytest.raises(StoreError, match="disk full"),
        ):
            _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        (kept,) = store.get_files(first.id or 0)
        assert kept.content_hash == hash_bytes(b"new")
        # Re-running after the failure converges
        _reconciler(store, mods_root).run(policy=SyncHashesPolicy())
        assert _reconciler(store, mods_root).run(verify=True).is_in_sync


class TestInteractiveFix:
    """Tests for reconciliation with the interactive policy."""

    def test_adopting_new_mod_records_metadata_and_files(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        make_mod("Hair", {"hair.package": b"h", "hair.ts4script": b"s"})
        prompter = make_prompter(True, "Nice Hair", "https://example.com/hair", "2.0", "cc, hair")

        report = _reconciler(store, mods_root).run(policy=InteractivePolicy(prompter))

        (mod,) = store.list_mods()
        assert mod.name == "Nice Hair"
        assert mod.version == "2.0"
        assert mod.source_url == "https://example.com/hair"
        assert mod.tags == frozenset({"cc", "hair"})
        assert mod.last_updated == FIXED_NOW
        files = store.get_files(mod.id or 0)
        assert [(f.relative_path, f.content_hash) for f in files] == [
            ("hair.package", hash_bytes(b"h")),
            ("hair.ts4script", hash_bytes(b"s")),
        ]
        assert report.mods[0].outcome == Outcome.APPLIED
        assert _reconciler(store, mods_root).run(verify=True).is_in_sync

    def test_declining_new_mod_leaves_store_untouched(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        make_mod("Hair", {"hair.package": b"h"})

        report = _reconciler(store, mods_root).run(policy=InteractivePolicy(make_prompter(False)))

        assert store.list_mods() == []
        assert report.mods[0].outcome == Outcome.SKIPPED
        assert report.summary()["skipped"] == 1

    def test_scenario_declined_deletion_keeps_mod(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_prompter: Callable[..., object],
    ) -> None:
        """A missing mod whose deletion is declined is reported again next run."""
        carol = _track(store, "Carol", {"c.package": b"c"})
        reconciler = _reconciler(store, mods_root)

        reconciler.run(policy=InteractivePolicy(make_prompter(False)))

        assert store.get_mod(carol.id or 0) == carol
        assert len(store.get_files(carol.id or 0)) == 1
        again = reconciler.run()
        assert [m.directory_name for m in again.missing_mods] == ["Carol"]

    def test_confirmed_deletion_cascades_to_files(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_prompter: Callable[..., object],
    ) -> None:
        carol = _track(store, "Carol", {"c.package": b"c"})

        _reconciler(store, mods_root).run(policy=InteractivePolicy(make_prompter(True)))

        assert store.list_mods() == []
        assert store.get_files(carol.id or 0) == []
        assert store.find_files_by_hash(hash_bytes(b"c")) == []

    def test_metadata_refresh_asked_once_per_mod(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        """Several changed files of one mod ask for version and source once."""
        mod = _track(store, "Mod", {"a.package": b"a1", "b.package": b"b1"})
        make_mod("Mod", {"a.package": b"a2", "b.package": b"b2"})
        prompter = make_prompter(True, "https://new.example.com", "3.1", True)

        _reconciler(store, mods_root).run(verify=True, policy=InteractivePolicy(prompter))

        saved = store.get_mod(mod.id or 0)
        assert saved is not None
        assert saved.version == "3.1"
        assert saved.source_url == "https://new.example.com"
        assert saved.name == "Mod"
        assert [q[0] for q in prompter.questions] == ["yes_no", "text", "text", "yes_no"]
        hashes = {f.relative_path: f.content_hash for f in store.get_files(mod.id or 0)}
        assert hashes == {"a.package": hash_bytes(b"a2"), "b.package": hash_bytes(b"b2")}

    def test_mixed_file_decisions(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        """Each file discrepancy is resolved on its own, in processing order."""
        mod = _track(store, "Mod", {"changed.package": b"old", "gone.package": b"g"})
        make_mod("Mod", {"changed.package": b"new", "fresh.ts4script": b"f"})
        # changed: decline; fresh: accept; gone: decline removal
        prompter = make_prompter(False, True, False)

        report = _reconciler(store, mods_root).run(
            verify=True, policy=InteractivePolicy(prompter)
        )

        outcomes = {f.relative_path: f.outcome for f in report.mods[0].files}
        assert outcomes == {
            "changed.package": Outcome.SKIPPED,
            "fresh.ts4script": Outcome.APPLIED,
            "gone.package": Outcome.SKIPPED,
        }
        stored = {f.relative_path: f.content_hash for f in store.get_files(mod.id or 0)}
        assert stored == {
            "changed.package": hash_bytes(b"old"),
            "fresh.ts4script": hash_bytes(b"f"),
            "gone.package": hash_bytes(b"g"),
        }

    def test_fix_without_verify_only_handles_mods(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        """Without --verify, interactive fix never asks about files."""
        _track(store, "Mod", {"a.package": b"old"})
        make_mod("Mod", {"a.package": b"new"})
        prompter = make_prompter()

        report = _reconciler(store, mods_root).run(policy=InteractivePolicy(prompter))

        assert prompter.questions == []
        assert report.mode == "fix"

    def test_adopting_mod_without_files(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        """A directory with no candidate files is still a valid mod."""
        make_mod("Empty")
        prompter = make_prompter(True, None, None, None, None)

        _reconciler(store, mods_root).run(policy=InteractivePolicy(prompter))

        (mod,) = store.list_mods()
        assert mod.directory_name == "Empty"
        assert store.get_files(mod.id or 0) == []
        report = _reconciler(store, mods_root).run(verify=True)
        assert report.is_in_sync
        assert report.mods[0].state == ModState.UNCHANGED
        assert report.mods[0].files == []

    def test_upsert_without_id_raises_store_error(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        make_mod("Hair", {"hair.package": b"h"})
        prompter = make_prompter(True, None, None, None, None)
        without_id = Mod(name="Hair", directory_name="Hair")

        with (
            patch.object(store, "upsert_mod", return_value=without_id),
            pytest.raises(StoreError, match="no ID for Hair"),
        ):
            _reconciler(store, mods_root).run(policy=InteractivePolicy(prompter))

        assert store.find_files_by_hash(hash_bytes(b"h")) == []


class TestHashCollisions:
    """Tests for duplicate content warnings."""

    def test_identical_content_in_other_mod_is_reported(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        _track(store, "Original", {"shared.package": b"same bytes"})
        make_mod("Original", {"shared.package": b"same bytes"})
        make_mod("Copy", {"copy.package": b"same bytes"})
        prompter = make_prompter(True, None, None, None, None)

        report = _reconciler(store, mods_root).run(policy=InteractivePolicy(prompter))

        assert report.collisions == [
            "Copy/copy.package has the same content as Original/shared.package"
        ]
        # Collisions never block adoption
        assert len(store.list_mods()) == 2

    def test_rehashing_same_file_is_not_a_collision(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        _track(store, "Mod", {"a.package": b"a"})
        make_mod("Mod", {"a.package": b"a", "b.package": b"b"})

        report = _reconciler(store, mods_root).run(policy=SyncHashesPolicy())

        assert report.collisions == []

    def test_duplicate_content_within_one_mod_is_not_reported(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
        make_prompter: Callable[..., object],
    ) -> None:
        """Only files of other mods count as collisions."""
        make_mod("Hair", {"a.package": b"same", "b.package": b"same"})
        prompter = make_prompter(True, None, None, None, None)

        report = _reconciler(store, mods_root).run(policy=InteractivePolicy(prompter))

        (mod,) = store.list_mods()
        assert len(store.get_files(mod.id or 0)) == 2
        assert report.collisions == []


class TestSkipOutcomes:
    """Tests for skipped discrepancies."""

    def test_skip_marks_every_discrepancy(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        _track(store, "Mod", {"a.package": b"old"})
        make_mod("Mod", {"a.package": b"new"})

        report = _reconciler(store, mods_root).run(policy=_SkipAll())

        assert report.mods[0].files[0].outcome == Outcome.SKIPPED
        assert report.outcome_count(Outcome.SKIPPED) == 1

    def test_discrepancy_kinds_passed_to_policy(
        self,
        store: SqlModStore,
        mods_root: Path,
        make_mod: Callable[..., Path],
    ) -> None:
        """The policy sees one discrepancy per mismatch, with context."""
        mod = _track(store, "Mod", {"a.package": b"old"})
        _track(store, "Gone", {})
        make_mod("Mod", {"a.package": b"new"})
        make_mod("New")
        seen: list[Discrepancy] = []

        class Recording(_SkipAll):
            def resolve(self, discrepancy: Discrepancy) -> Skip:
                seen.append(discrepancy)
                return Skip()

        _reconciler(store, mods_root).run(policy=Recording())

        assert [(d.kind, d.directory_name) for d in seen] == [
            (DiscrepancyKind.MISSING_MOD, "Gone"),
            (DiscrepancyKind.MODIFIED_FILE, "Mod"),
            (DiscrepancyKind.NEW_MOD, "New"),
        ]
        modified = seen[1]
        assert modified.mod is not None
        assert modified.mod.id == mod.id
        assert modified.old_hash == hash_bytes(b"old")
        assert modified.new_hash == hash_bytes(b"new")

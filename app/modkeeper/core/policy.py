"""Resolution policies for reconciliation discrepancies.

A policy turns one Discrepancy into one Decision. The reconciler applies
decisions; policies never touch the store themselves.

Built-in policies:
- SyncHashesPolicy: non-interactive, records current hashes for tracked mods.
- InteractivePolicy: asks the user through a Prompter for every discrepancy.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

from modkeeper.models.decision import (
    AddMod,
    Decision,
    DeleteFile,
    DeleteMod,
    Discrepancy,
    DiscrepancyKind,
    Skip,
    UpdateFile,
)
from modkeeper.models.mod import ModMetadata, parse_tag_list, utc_now

logger = logging.getLogger(__name__)

# Default version for newly added mods, e.g. "181026"
DEFAULT_VERSION_FORMAT = "%d%m%y"


class Prompter(Protocol):
    """User interaction needed by the interactive policy.

    Implementations re-ask on invalid input; callers get valid answers only.
    """

    def ask_yes_no(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...

    def ask_text(self, prompt: str, default: str | None = None) -> str:
        """Ask for a line of text, offering an optional default."""
        ...

    def ask_choice(self, prompt: str, options: Sequence[str]) -> int:
        """Ask the user to pick one option; returns its index."""
        ...


class ResolutionPolicy(ABC):
    """Abstract base class for resolution policies.

    Attributes:
        name: Short identifier used in reports ("sync-hashes", "fix").
        requires_verification: Whether file-level classification must run
            even if the caller did not ask for it.
        adopts_new_mods: Whether new mods are offered for adoption, which
            requires hashing their files before resolving.
    """

    name: str = "policy"
    requires_verification: bool = False
    adopts_new_mods: bool = False

    @abstractmethod
    def resolve(self, discrepancy: Discrepancy) -> Decision:
        """Decide what to do about one discrepancy.

        Args:
            discrepancy: The mismatch, with all context needed to decide.

        Returns:
            The decision to apply. Skip leaves everything untouched.
        """


class SyncHashesPolicy(ResolutionPolicy):
    """Non-interactive policy that trusts whatever is on disk.

    For mods that exist in both places, hashes of new and modified files
    are recorded and records of missing files are dropped. Mods themselves
    are never created or deleted and metadata is never changed.

    Adopting files that are new on disk (not just updating existing
    hashes) is a deliberate choice; see DESIGN.md.
    """

    name = "sync-hashes"
    requires_verification = True

    def resolve(self, discrepancy: Discrepancy) -> Decision:
        kind = discrepancy.kind
        if kind in (DiscrepancyKind.NEW_FILE, DiscrepancyKind.MODIFIED_FILE):
            if discrepancy.new_hash is None:
                return Skip(reason="no hash available")
            return UpdateFile(content_hash=discrepancy.new_hash)
        if kind == DiscrepancyKind.MISSING_FILE:
            return DeleteFile()
        return Skip(reason="mod changes require --fix")


class InteractivePolicy(ResolutionPolicy):
    """Asks the user about every discrepancy.

    A changed file bundles the hash update with a refresh of the mod's
    source URL and version. That refresh is asked once per mod per run;
    further changed files of the same mod only ask for confirmation.

    Args:
        prompter: Collaborator used for all questions.
        clock: Source of the current time, for the default version.
    """

    name = "fix"
    adopts_new_mods = True

    def __init__(
        self,
        prompter: Prompter,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._prompter = prompter
        self._clock = clock
        self._refreshed: set[str] = set()
        self._handlers: dict[DiscrepancyKind, Callable[[Discrepancy], Decision]] = {
            DiscrepancyKind.NEW_MOD: self._resolve_new_mod,
            DiscrepancyKind.MISSING_MOD: self._resolve_missing_mod,
            DiscrepancyKind.MODIFIED_FILE: self._resolve_modified_file,
            DiscrepancyKind.NEW_FILE: self._resolve_new_file,
            DiscrepancyKind.MISSING_FILE: self._resolve_missing_file,
        }

    def resolve(self, discrepancy: Discrepancy) -> Decision:
        return self._handlers[discrepancy.kind](discrepancy)

    def _resolve_new_mod(self, discrepancy: Discrepancy) -> Decision:
        directory = discrepancy.directory_name
        question = f"Do you want to add {directory} to the database?"
        if discrepancy.files:
            count = len(discrepancy.files)
            question = f"Do you want to add {directory} ({count} files) to the database?"
        if not self._prompter.ask_yes_no(question, default=True):
            return Skip()

        name = self._prompter.ask_text("Name", default=directory).strip() or directory
        source_url = self._prompter.ask_text("Source URL", default="").strip()
        version = self._prompter.ask_text(
            "Version",
            default=self._clock().strftime(DEFAULT_VERSION_FORMAT),
        ).strip()
        tags = parse_tag_list(self._prompter.ask_text("Tags (comma separated)", default=""))

        return AddMod(
            metadata=ModMetadata(name=name, version=version, source_url=source_url, tags=tags)
        )

    def _resolve_missing_mod(self, discrepancy: Discrepancy) -> Decision:
        question = (
            f"{discrepancy.display_name} is missing. "
            "Do you want to remove it from the database?"
        )
        if self._prompter.ask_yes_no(question, default=False):
            return DeleteMod()
        return Skip()

    def _resolve_modified_file(self, discrepancy: Discrepancy) -> Decision:
        name = discrepancy.display_name
        question = (
            f"{discrepancy.relative_path} in {name} has changed. Do you want to update {name}?"
        )
        if discrepancy.new_hash is None or not self._prompter.ask_yes_no(question, default=True):
            return Skip()

        if discrepancy.directory_name in self._refreshed or discrepancy.mod is None:
            return UpdateFile(content_hash=discrepancy.new_hash)

        current = discrepancy.mod.metadata
        source_url = self._prompter.ask_text("Source URL", default=current.source_url).strip()
        version = self._prompter.ask_text("Version", default=current.version).strip()
        self._refreshed.add(discrepancy.directory_name)

        return UpdateFile(
            content_hash=discrepancy.new_hash,
            metadata=ModMetadata(
                name=current.name,
                version=version,
                source_url=source_url,
                tags=current.tags,
            ),
        )

    def _resolve_new_file(self, discrepancy: Discrepancy) -> Decision:
        question = f"Track new file {discrepancy.relative_path} in {discrepancy.display_name}?"
        if discrepancy.new_hash is None or not self._prompter.ask_yes_no(question, default=True):
            return Skip()
        return UpdateFile(content_hash=discrepancy.new_hash)

    def _resolve_missing_file(self, discrepancy: Discrepancy) -> Decision:
        question = (
            f"{discrepancy.relative_path} is missing from {discrepancy.display_name}. "
            "Do you want to remove it from the database?"
        )
        if self._prompter.ask_yes_no(question, default=False):
            return DeleteFile()
        return Skip()

"""Data models for modkeeper.

This module exports the core data structures used throughout the application.
"""

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
from modkeeper.models.inventory import ScannedFile, ScannedMod
from modkeeper.models.mod import FileKind, Mod, ModFile, ModMetadata, Tag
from modkeeper.models.report import (
    FileDiff,
    FileState,
    ModDiff,
    ModState,
    Outcome,
    ReconcileReport,
)

__all__ = [
    "AddMod",
    "Decision",
    "DeleteFile",
    "DeleteMod",
    "Discrepancy",
    "DiscrepancyKind",
    "FileDiff",
    "FileKind",
    "FileState",
    "HashedFile",
    "Mod",
    "ModDiff",
    "ModFile",
    "ModMetadata",
    "ModState",
    "Outcome",
    "ReconcileReport",
    "ScannedFile",
    "ScannedMod",
    "Skip",
    "Tag",
    "UpdateFile",
]

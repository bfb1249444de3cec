"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
import os
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from unittest.mock import patch

import pytest
from modkeeper.store import SqlModStore, initialize_store


class ScriptedPrompter:
    """Prompter that replays prepared answers and records every question.

    Answers are consumed in order regardless of the question type. A None
    answer to ask_text selects the offered default.
    """

    def __init__(self, answers: Sequence[object]) -> None:
        self.answers = list(answers)
        self.questions: list[tuple[str, str]] = []

    def _next(self, kind: str, prompt: str) -> object:
        self.questions.append((kind, prompt))
        if not self.answers:
            msg = f"Unexpected {kind} question: {prompt}"
            raise AssertionError(msg)
        return self.answers.pop(0)

    def ask_yes_no(self, question: str, default: bool = False) -> bool:
        answer = self._next("yes_no", question)
        assert isinstance(answer, bool)
        return answer

    def ask_text(self, prompt: str, default: str | None = None) -> str:
        answer = self._next("text", prompt)
        if answer is None:
            return default or ""
        assert isinstance(answer, str)
        return answer

    def ask_choice(self, prompt: str, options: Sequence[str]) -> int:
        answer = self._next("choice", prompt)
        assert isinstance(answer, int)
        assert 0 <= answer < len(options)
        return answer


@pytest.fixture
def make_prompter() -> Callable[..., ScriptedPrompter]:
    """Factory for prompters answering with the given values in order."""

    def _make(*answers: object) -> ScriptedPrompter:
        return ScriptedPrompter(answers)

    return _make


@pytest.fixture
def mods_root(tmp_path: Path) -> Path:
    """Empty managed mod directory."""
    root = tmp_path / "Mods"
    root.mkdir()
    return root


@pytest.fixture
def make_mod(mods_root: Path) -> Callable[..., Path]:
    """Factory creating a mod directory with the given files.

    Usage: make_mod("BetterBuild", {"build.package": b"data"})
    """

    def _make(name: str, files: dict[str, bytes] | None = None) -> Path:
        mod_dir = mods_root / name
        mod_dir.mkdir(exist_ok=True)
        for file_name, content in (files or {}).items():
            (mod_dir / file_name).write_bytes(content)
        return mod_dir

    return _make


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Path of an initialized, empty database."""
    return initialize_store(tmp_path / "data" / "mods.sqlite")


@pytest.fixture
def store(database_path: Path) -> Iterator[SqlModStore]:
    """Open store on an initialized, empty database."""
    mod_store = SqlModStore(database_path)
    yield mod_store
    mod_store.close()


@pytest.fixture
def isolated_config(tmp_path: Path) -> Iterator[Path]:
    """Point the XDG config and data homes into tmp_path.

    Yields the modkeeper config directory, which does not exist yet.
    """
    env = {
        "XDG_CONFIG_HOME": str(tmp_path / "config"),
        "XDG_DATA_HOME": str(tmp_path / "share"),
    }
    with patch.dict(os.environ, env):
        yield tmp_path / "config" / "modkeeper"


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers() -> Iterator[None]:
    """Remove the stderr handler the CLI installs on the root logger."""
    yield
    root = logging.getLogger()
    for handler in [h for h in root.handlers if type(h) is logging.StreamHandler]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)

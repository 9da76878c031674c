"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from kk.editor import ExternalEditSession
from kk.navigation import Navigator
from kk.store import KanbanStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@dataclass
class _Edit:
    text: str | None
    exit_code: int
    error: BaseException | None


class ScriptedEditor:
    """Launcher standing in for the user's editor.

    Each launch consumes the next queued edit: the scratch file is replaced
    with ``text`` (left alone when None) and ``exit_code`` is returned, or
    ``error`` is raised as if the editor could not be started.
    """

    def __init__(self) -> None:
        self.edits: list[_Edit] = []
        self.calls: list[list[str]] = []
        self.seen: list[str] = []
        self.paths: list[Path] = []

    def queue(
        self,
        text: str | None = None,
        exit_code: int = 0,
        error: BaseException | None = None,
    ) -> ScriptedEditor:
        self.edits.append(_Edit(text=text, exit_code=exit_code, error=error))
        return self

    def __call__(self, argv: list[str]) -> int:
        self.calls.append(argv)
        edit = self.edits.pop(0)
        if edit.error is not None:
            raise edit.error
        path = Path(argv[-1])
        self.paths.append(path)
        self.seen.append(path.read_text(encoding="utf-8"))
        if edit.text is not None:
            path.write_text(edit.text, encoding="utf-8")
        return edit.exit_code


# Shared fixtures


@pytest.fixture
def store() -> KanbanStore:
    """Create an in-memory KanbanStore for testing."""
    kanban_store = KanbanStore(":memory:")
    yield kanban_store
    kanban_store.close()


@pytest.fixture
def editor() -> ScriptedEditor:
    """Scripted stand-in for the user's editor."""
    return ScriptedEditor()


@pytest.fixture
def edit_session(editor: ScriptedEditor, tmp_path: Path) -> ExternalEditSession:
    """Edit session whose editor is the scripted launcher."""
    return ExternalEditSession("fake-editor --wait", scratch_dir=tmp_path, launcher=editor)


@pytest.fixture
def navigator(store: KanbanStore, edit_session: ExternalEditSession) -> Navigator:
    """Started navigator over the in-memory store."""
    nav = Navigator(store, edit_session)
    nav.start()
    return nav


@pytest.fixture
def open_board(store: KanbanStore, navigator: Navigator):
    """Create a board with cards and open it in the navigator.

    Usage: ``open_board("Work", {"Todo": ["A", "B"], "Done": []})``
    """

    def _open(name: str, columns: dict[str, list[str]]):
        board = store.create_board(name, list(columns))
        for column_id, titles in zip(board.column_order, columns.values(), strict=True):
            for title in titles:
                store.create_card(column_id, title)
        navigator.start()
        navigator.board_index = [b.id for b in navigator.boards].index(board.id)
        navigator.handle_key("enter")
        return store.load_board(board.id)

    return _open

"""Textual application driving the navigator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.widgets import Header, Static

from kk.editor import ExternalEditSession, spawn_editor
from kk.navigation import Navigator
from kk.tui.render import render_main, render_status

if TYPE_CHECKING:
    from kk.store import KanbanStore

logger = logging.getLogger(__name__)


def key_name(event: events.Key) -> str:
    """Name the navigator understands for a key event.

    Printable characters keep their case so ``H`` and ``h`` stay distinct;
    everything else uses textual's key name ("enter", "escape", "down").
    """
    if event.character and event.character.isprintable():
        return event.character
    return event.key


class KanbanApp(App[None]):
    """kk Kanban boards."""

    TITLE = "kk"

    CSS = """
    Screen {
        background: $surface;
    }

    #main {
        height: 1fr;
        padding: 0 1;
    }

    #status {
        height: 1;
        padding: 0 1;
    }

    #hints {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(self, store: KanbanStore, editor_command: str) -> None:
        super().__init__()
        editor = ExternalEditSession(editor_command, launcher=self.launch_editor)
        self.navigator = Navigator(store, editor)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="main")
        yield Static(id="status")
        yield Static(id="hints")

    def on_mount(self) -> None:
        self.navigator.start()
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self.navigator.handle_key(key_name(event))
        if not self.navigator.running:
            self.exit()
            return
        self.refresh_view()

    def refresh_view(self) -> None:
        screen = self.navigator.view()
        board = self.navigator.board
        self.sub_title = board.name if board is not None else "boards"
        self.query_one("#main", Static).update(render_main(screen))
        self.query_one("#status", Static).update(render_status(screen.status))
        self.query_one("#hints", Static).update(screen.hints)

    def launch_editor(self, argv: list[str]) -> int:
        """Hand the terminal to the editor until it exits."""
        try:
            with self.suspend():
                return spawn_editor(argv)
        except SuspendNotSupported as e:
            logger.error("Cannot suspend the terminal for the editor: %s", e)
            raise OSError("this terminal cannot be handed over to an editor") from e

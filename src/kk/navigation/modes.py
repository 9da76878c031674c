"""UI modes of the navigator.

Modes are immutable values. The navigator swaps one for another on every
transition and dispatches each key to the handler of the current mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class DeleteTarget(StrEnum):
    """Kinds of entity that can be deleted behind a confirmation prompt."""

    BOARD = "board"
    COLUMN = "column"
    CARD = "card"


class Choice(StrEnum):
    """Answer currently highlighted in a confirmation prompt."""

    YES = "yes"
    NO = "no"

    def toggled(self) -> Choice:
        return Choice.NO if self is Choice.YES else Choice.YES


@dataclass(frozen=True)
class BoardList:
    """Choosing among boards. ``empty`` when there are none yet."""

    empty: bool = False


@dataclass(frozen=True)
class BoardView:
    """A board's columns and cards are visible, cursor on a card or column."""


@dataclass(frozen=True)
class CardDetail:
    """Full, read-only view of the selected card."""


@dataclass(frozen=True)
class MovingCard:
    """The selected card is picked up; movement keys carry it along."""


@dataclass(frozen=True)
class ConfirmDelete:
    """Yes/no prompt before deleting ``entity_id``."""

    target: DeleteTarget
    entity_id: str
    label: str
    return_to: BoardList | BoardView
    choice: Choice = Choice.NO


@dataclass(frozen=True)
class Editing:
    """An external edit session is running. Always left for ``return_to``."""

    return_to: BoardList | BoardView | CardDetail


Mode = BoardList | BoardView | CardDetail | MovingCard | ConfirmDelete | Editing


def mode_name(mode: Mode) -> str:
    """Short lowercase name of a mode, used for hints and logging."""
    return {
        BoardList: "board-list",
        BoardView: "board",
        CardDetail: "card",
        MovingCard: "moving",
        ConfirmDelete: "confirm",
        Editing: "editing",
    }[type(mode)]

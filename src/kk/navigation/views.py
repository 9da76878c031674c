"""View models - what the renderer is allowed to see of the navigator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class StatusLevel(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    """One-line message shown under the board until the next key press."""

    text: str
    level: StatusLevel = StatusLevel.INFO


@dataclass(frozen=True)
class BoardListView:
    names: tuple[str, ...] = ()
    selected: int | None = None


@dataclass(frozen=True)
class CardView:
    number: int
    title: str
    selected: bool = False
    has_body: bool = False


@dataclass(frozen=True)
class ColumnView:
    name: str
    cards: tuple[CardView, ...] = ()
    selected: bool = False


@dataclass(frozen=True)
class BoardViewModel:
    name: str
    columns: tuple[ColumnView, ...] = ()
    moving: bool = False


@dataclass(frozen=True)
class CardDetailView:
    number: int
    title: str
    body: str
    column_name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ConfirmView:
    prompt: str
    yes: bool = False


@dataclass(frozen=True)
class Screen:
    """Everything needed to draw one frame.

    Exactly one of ``board_list`` and ``board`` is set. ``card`` and
    ``confirm`` are overlays drawn on top of it.
    """

    mode: str
    hints: str
    board_list: BoardListView | None = None
    board: BoardViewModel | None = None
    card: CardDetailView | None = None
    confirm: ConfirmView | None = None
    status: StatusMessage | None = None

"""Key bindings per mode.

Keys are named the way textual names them: printable characters as
themselves (``"j"``, ``"H"``), everything else by name (``"enter"``,
``"escape"``, ``"down"``).
"""

from __future__ import annotations

from enum import StrEnum

from kk.navigation.modes import (
    BoardList,
    BoardView,
    CardDetail,
    ConfirmDelete,
    Editing,
    Mode,
    MovingCard,
)


class Command(StrEnum):
    """Everything a key can ask the navigator to do."""

    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    SELECT = "select"
    BACK = "back"
    SWITCH_BOARD = "switch-board"
    CREATE_BOARD = "create-board"
    EDIT_BOARD = "edit-board"
    DELETE_BOARD = "delete-board"
    CREATE_CARD = "create-card"
    EDIT_CARD = "edit-card"
    DELETE_CARD = "delete-card"
    MOVE_CARD_LEFT = "move-card-left"
    MOVE_CARD_RIGHT = "move-card-right"
    MOVE_CARD_UP = "move-card-up"
    MOVE_CARD_DOWN = "move-card-down"
    PICK_UP = "pick-up"
    DROP = "drop"
    ADD_COLUMN = "add-column"
    RENAME_COLUMN = "rename-column"
    DELETE_COLUMN = "delete-column"
    TOGGLE = "toggle"
    YES = "yes"
    NO = "no"
    CONFIRM = "confirm"
    CANCEL = "cancel"


_VERTICAL = {
    "j": Command.DOWN,
    "down": Command.DOWN,
    "k": Command.UP,
    "up": Command.UP,
}

_SPATIAL = {
    **_VERTICAL,
    "h": Command.LEFT,
    "left": Command.LEFT,
    "l": Command.RIGHT,
    "right": Command.RIGHT,
}

KEYMAPS: dict[type, dict[str, Command]] = {
    BoardList: {
        **_VERTICAL,
        "enter": Command.SELECT,
        "n": Command.CREATE_BOARD,
        "e": Command.EDIT_BOARD,
        "d": Command.DELETE_BOARD,
        "q": Command.QUIT,
    },
    BoardView: {
        **_SPATIAL,
        "enter": Command.SELECT,
        "b": Command.SWITCH_BOARD,
        "n": Command.CREATE_CARD,
        "e": Command.EDIT_CARD,
        "d": Command.DELETE_CARD,
        "H": Command.MOVE_CARD_LEFT,
        "L": Command.MOVE_CARD_RIGHT,
        "K": Command.MOVE_CARD_UP,
        "J": Command.MOVE_CARD_DOWN,
        "m": Command.PICK_UP,
        "a": Command.ADD_COLUMN,
        "r": Command.RENAME_COLUMN,
        "D": Command.DELETE_COLUMN,
        "E": Command.EDIT_BOARD,
        "q": Command.QUIT,
    },
    CardDetail: {
        "escape": Command.BACK,
        "enter": Command.BACK,
        "backspace": Command.BACK,
        "e": Command.EDIT_CARD,
        "q": Command.QUIT,
    },
    MovingCard: {
        **_SPATIAL,
        "m": Command.DROP,
        "enter": Command.DROP,
        "escape": Command.DROP,
        "q": Command.QUIT,
    },
    ConfirmDelete: {
        "h": Command.TOGGLE,
        "l": Command.TOGGLE,
        "left": Command.TOGGLE,
        "right": Command.TOGGLE,
        "tab": Command.TOGGLE,
        "y": Command.YES,
        "n": Command.NO,
        "enter": Command.CONFIRM,
        "escape": Command.CANCEL,
    },
    Editing: {},
}

HINTS: dict[type, str] = {
    BoardList: "j/k move  enter open  n new  e edit  d delete  q quit",
    BoardView: (
        "hjkl move  enter open  n new  e edit  d delete  HJKL/m move card  "
        "a add column  r rename  D delete column  E edit board  b boards  q quit"
    ),
    CardDetail: "esc back  e edit  q quit",
    MovingCard: "hjkl carry card  m/enter/esc drop  q quit",
    ConfirmDelete: "h/l toggle  y yes  n no  enter confirm  esc cancel",
    Editing: "",
}


def resolve(mode: Mode, key: str) -> Command | None:
    """Command bound to ``key`` in ``mode``, or None if the key is unbound."""
    return KEYMAPS[type(mode)].get(key)


def hints(mode: Mode) -> str:
    return HINTS[type(mode)]

"""Navigation package - modal state machine and the view model it exposes."""

from kk.navigation.keys import Command, hints, resolve
from kk.navigation.modes import (
    BoardList,
    BoardView,
    CardDetail,
    Choice,
    ConfirmDelete,
    DeleteTarget,
    Editing,
    Mode,
    MovingCard,
    mode_name,
)
from kk.navigation.navigator import Navigator
from kk.navigation.views import (
    BoardListView,
    BoardViewModel,
    CardDetailView,
    CardView,
    ColumnView,
    ConfirmView,
    Screen,
    StatusLevel,
    StatusMessage,
)

__all__ = [
    # Navigator
    "Navigator",
    # Modes
    "BoardList",
    "BoardView",
    "CardDetail",
    "Choice",
    "ConfirmDelete",
    "DeleteTarget",
    "Editing",
    "Mode",
    "MovingCard",
    "mode_name",
    # Keys
    "Command",
    "hints",
    "resolve",
    # Views
    "BoardListView",
    "BoardViewModel",
    "CardDetailView",
    "CardView",
    "ColumnView",
    "ConfirmView",
    "Screen",
    "StatusLevel",
    "StatusMessage",
]

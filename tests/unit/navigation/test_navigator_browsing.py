"""Unit tests for Navigator browsing: board list, cursor and card detail."""

import pytest

from kk.navigation import (
    BoardList,
    BoardView,
    CardDetail,
    Navigator,
    StatusLevel,
    StatusMessage,
)
from kk.store import KanbanStore


@pytest.mark.unit
class TestStart:
    """Tests for the initial state."""

    def test_empty_store_starts_in_empty_board_list(self, navigator: Navigator) -> None:
        assert navigator.mode == BoardList(empty=True)
        assert navigator.boards == []
        assert navigator.selected_board is None
        assert navigator.running is True

        screen = navigator.view()
        assert screen.mode == "board-list"
        assert screen.board_list.names == ()
        assert screen.board_list.selected is None
        assert screen.board is None

    def test_existing_boards_are_listed(self, store: KanbanStore, navigator: Navigator) -> None:
        store.create_board("Home")
        store.create_board("Work")

        navigator.start()

        assert navigator.mode == BoardList(empty=False)
        assert sorted(navigator.view().board_list.names) == ["Home", "Work"]
        assert navigator.view().board_list.selected == 0


@pytest.mark.unit
class TestBoardList:
    """Tests for moving through and opening boards."""

    def test_cursor_stays_in_range(self, store: KanbanStore, navigator: Navigator) -> None:
        store.create_board("Home")
        store.create_board("Work")
        navigator.start()

        navigator.handle_key("k")
        assert navigator.board_index == 0
        navigator.handle_key("j")
        assert navigator.board_index == 1
        navigator.handle_key("j")
        assert navigator.board_index == 1

    def test_enter_opens_board(self, store: KanbanStore, navigator: Navigator) -> None:
        board = store.create_board("Work", ["Todo"])
        navigator.start()

        navigator.handle_key("enter")

        assert navigator.mode == BoardView()
        assert navigator.board.id == board.id
        assert navigator.cursor == (0, None)
        assert navigator.view().board.name == "Work"

    def test_opening_marks_board_viewed(self, store: KanbanStore, navigator: Navigator) -> None:
        """The most recently opened board is listed first."""
        store.create_board("Home")
        store.create_board("Work")
        navigator.start()
        second = navigator.boards[1]
        viewed_before = second.viewed_at

        navigator.handle_key("j")
        navigator.handle_key("enter")

        assert store.get_board(second.id).viewed_at > viewed_before
        navigator.handle_key("b")
        assert navigator.boards[0].id == second.id
        assert navigator.selected_board.id == second.id

    def test_enter_on_empty_list_does_nothing(self, navigator: Navigator) -> None:
        navigator.handle_key("enter")
        assert navigator.mode == BoardList(empty=True)

    def test_switch_board_returns_to_list(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A"]})

        navigator.handle_key("b")

        assert navigator.mode == BoardList(empty=False)
        assert navigator.snapshot is None
        assert navigator.view().board_list.names == ("Work",)


@pytest.mark.unit
class TestCursor:
    """Tests for cursor movement inside a board."""

    def test_opens_on_first_card(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A", "B"], "Done": []})

        assert navigator.cursor == (0, 0)
        assert navigator.selected_card.title == "A"
        assert navigator.selected_column.name == "Todo"

    def test_vertical_clamps_without_wrapping(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A", "B", "C"]})

        navigator.handle_key("k")
        assert navigator.cursor == (0, 0)
        navigator.handle_key("j")
        navigator.handle_key("down")
        assert navigator.cursor == (0, 2)
        navigator.handle_key("j")
        assert navigator.cursor == (0, 2)

    def test_horizontal_clamps_without_wrapping(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A"], "Done": ["X"]})

        navigator.handle_key("h")
        assert navigator.cursor == (0, 0)
        navigator.handle_key("l")
        navigator.handle_key("right")
        assert navigator.cursor == (1, 0)

    def test_horizontal_keeps_row_when_possible(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A", "B"], "Done": ["X", "Y", "Z"]})

        navigator.handle_key("j")
        navigator.handle_key("l")
        assert navigator.cursor == (1, 1)
        assert navigator.selected_card.title == "Y"

        navigator.handle_key("j")
        navigator.handle_key("h")
        assert navigator.cursor == (0, 1)
        assert navigator.selected_card.title == "B"

    def test_empty_column_has_no_card_selected(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A"], "Doing": [], "Done": ["X"]})

        navigator.handle_key("l")
        assert navigator.cursor == (1, None)
        assert navigator.selected_card is None
        assert navigator.selected_column.name == "Doing"

        navigator.handle_key("j")
        assert navigator.cursor == (1, None)

        navigator.handle_key("l")
        assert navigator.cursor == (2, 0)

    def test_board_without_columns(self, open_board, navigator: Navigator) -> None:
        open_board("Empty", {})

        for key in ("h", "j", "k", "l", "enter", "m"):
            navigator.handle_key(key)

        assert navigator.mode == BoardView()
        assert navigator.cursor == (0, None)
        assert navigator.selected_column is None
        assert navigator.view().board.columns == ()

    def test_view_marks_selection(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A", "B"], "Done": ["X"]})
        navigator.handle_key("j")

        board = navigator.view().board

        assert [c.name for c in board.columns] == ["Todo", "Done"]
        assert [c.selected for c in board.columns] == [True, False]
        assert [card.selected for card in board.columns[0].cards] == [False, True]
        assert not any(card.selected for card in board.columns[1].cards)
        assert [card.number for card in board.columns[0].cards] == [1, 2]


@pytest.mark.unit
class TestCardDetail:
    """Tests for opening and closing a card."""

    def test_open_and_close(self, open_board, store: KanbanStore, navigator: Navigator) -> None:
        snapshot = open_board("Work", {"Todo": ["A"]})
        card = snapshot.columns[0].cards[0]
        store.update_card(card.id, "A", "details")

        navigator.handle_key("enter")

        assert navigator.mode == CardDetail()
        detail = navigator.view().card
        assert (detail.number, detail.title, detail.body) == (1, "A", "details")
        assert detail.column_name == "Todo"
        assert navigator.view().mode == "card"

        navigator.handle_key("escape")

        assert navigator.mode == BoardView()
        assert navigator.view().card is None
        assert navigator.cursor == (0, 0)

    def test_enter_on_empty_column(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": []})

        navigator.handle_key("enter")

        assert navigator.mode == BoardView()

    def test_movement_keys_ignored_in_detail(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A", "B"]})
        navigator.handle_key("enter")

        navigator.handle_key("j")

        assert navigator.mode == CardDetail()
        assert navigator.cursor == (0, 0)


@pytest.mark.unit
class TestKeysAndStatus:
    """Tests for key dispatch and status messages."""

    def test_quit(self, navigator: Navigator) -> None:
        navigator.handle_key("q")
        assert navigator.running is False

    def test_quit_from_board(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A"]})
        navigator.handle_key("q")
        assert navigator.running is False

    def test_bound_key_clears_status(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A", "B"]})
        navigator.status = StatusMessage("old", StatusLevel.ERROR)

        navigator.handle_key("j")

        assert navigator.status is None

    def test_unbound_key_keeps_status(self, open_board, navigator: Navigator) -> None:
        open_board("Work", {"Todo": ["A"]})
        navigator.status = StatusMessage("old")

        navigator.handle_key("z")

        assert navigator.status == StatusMessage("old")
        assert navigator.view().status.text == "old"

    def test_hints_follow_mode(self, open_board, navigator: Navigator) -> None:
        assert "new" in navigator.view().hints
        open_board("Work", {"Todo": ["A"]})
        assert "move card" in navigator.view().hints

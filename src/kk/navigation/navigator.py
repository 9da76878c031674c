"""Navigator - Modal state machine over boards, columns and cards."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from kk.editor import EditResult, EditStatus
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
from kk.store import NotFoundError, StoreError
from kk.templates import EntityKind, decode, empty_template, encode

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from kk.editor import ExternalEditSession
    from kk.store import Board, BoardSnapshot, Card, Column, KanbanStore
    from kk.templates import Draft

logger = logging.getLogger(__name__)

NEW = "new"


def _clamp(value: int, size: int) -> int:
    return min(max(value, 0), size - 1)


class Navigator:
    """Turns key presses into mode transitions, store calls and edit sessions.

    The navigator owns the cursor and the current mode. Every store call is
    made before any state is touched, so a failing call leaves the navigator
    exactly where it was and only sets ``status``. Edit sessions run
    synchronously: ``mode`` is ``Editing`` while the editor is open and is
    restored afterwards, whatever the outcome.
    """

    def __init__(self, store: KanbanStore, editor: ExternalEditSession) -> None:
        """Initialize the Navigator.

        Args:
            store: KanbanStore used for every read and write.
            editor: ExternalEditSession used for every text edit.
        """
        self.store = store
        self.editor = editor
        self.mode: Mode = BoardList(empty=True)
        self.running = True
        self.status: StatusMessage | None = None

        self.boards: list[Board] = []
        self.board_index = 0
        self.snapshot: BoardSnapshot | None = None
        self.column_index = 0
        self.card_index: int | None = None
        self.detail: Card | None = None

        # Edited text that failed to parse or commit, keyed by edit target
        self._recovered: dict[tuple[EntityKind, str], str] = {}

    def start(self) -> None:
        """Load the board list and enter the initial mode."""
        with self._storage_errors("Loading boards"):
            self._load_boards()
        self.mode = BoardList(empty=not self.boards)
        logger.info("Navigator started with %d board(s)", len(self.boards))

    # --- Selection ---

    @property
    def selected_board(self) -> Board | None:
        """Board under the cursor in the board list."""
        return self.boards[self.board_index] if self.boards else None

    @property
    def board(self) -> Board | None:
        """Board currently open, if any."""
        return self.snapshot.board if self.snapshot is not None else None

    @property
    def cursor(self) -> tuple[int, int | None]:
        return self.column_index, self.card_index

    @property
    def selected_column(self) -> Column | None:
        if self.snapshot is None or not self.snapshot.columns:
            return None
        return self.snapshot.columns[self.column_index].column

    @property
    def selected_card(self) -> Card | None:
        if self.snapshot is None or not self.snapshot.columns or self.card_index is None:
            return None
        return self.snapshot.columns[self.column_index].cards[self.card_index]

    def has_recovered_text(self, kind: EntityKind, target: str) -> bool:
        """Whether the next edit of ``target`` starts from previously rejected text."""
        return (kind, target) in self._recovered

    # --- Key dispatch ---

    def handle_key(self, key: str) -> None:
        """Process one key press to completion.

        Args:
            key: Key name as textual reports it ("j", "H", "enter", "escape").
        """
        command = resolve(self.mode, key)
        if command is None:
            return
        self.status = None
        logger.debug("Key %r -> %s (%s)", key, command, mode_name(self.mode))

        if command is Command.QUIT:
            self.quit()
            return

        match self.mode:
            case BoardList():
                self._on_board_list(command)
            case BoardView():
                self._on_board_view(command)
            case CardDetail():
                self._on_card_detail(command)
            case MovingCard():
                self._on_moving_card(command)
            case ConfirmDelete() as prompt:
                self._on_confirm(prompt, command)

    def _on_board_list(self, command: Command) -> None:
        match command:
            case Command.UP:
                self.move_board_cursor(-1)
            case Command.DOWN:
                self.move_board_cursor(1)
            case Command.SELECT:
                self.select_board()
            case Command.CREATE_BOARD:
                self.create_board()
            case Command.EDIT_BOARD:
                self.edit_board()
            case Command.DELETE_BOARD:
                self.request_delete(DeleteTarget.BOARD)

    def _on_board_view(self, command: Command) -> None:
        match command:
            case Command.LEFT:
                self.move_cursor_horizontal(-1)
            case Command.RIGHT:
                self.move_cursor_horizontal(1)
            case Command.UP:
                self.move_cursor_vertical(-1)
            case Command.DOWN:
                self.move_cursor_vertical(1)
            case Command.SELECT:
                self.open_card()
            case Command.SWITCH_BOARD:
                self.switch_board()
            case Command.CREATE_CARD:
                self.create_card()
            case Command.EDIT_CARD:
                self.edit_card()
            case Command.DELETE_CARD:
                self.request_delete(DeleteTarget.CARD)
            case Command.MOVE_CARD_LEFT:
                self.move_card_horizontal(-1)
            case Command.MOVE_CARD_RIGHT:
                self.move_card_horizontal(1)
            case Command.MOVE_CARD_UP:
                self.move_card_vertical(-1)
            case Command.MOVE_CARD_DOWN:
                self.move_card_vertical(1)
            case Command.PICK_UP:
                self.pick_up_card()
            case Command.ADD_COLUMN:
                self.add_column()
            case Command.RENAME_COLUMN:
                self.rename_column()
            case Command.DELETE_COLUMN:
                self.request_delete(DeleteTarget.COLUMN)
            case Command.EDIT_BOARD:
                self.edit_board()

    def _on_card_detail(self, command: Command) -> None:
        match command:
            case Command.BACK:
                self.close_card()
            case Command.EDIT_CARD:
                self.edit_card()

    def _on_moving_card(self, command: Command) -> None:
        match command:
            case Command.LEFT:
                self.move_card_horizontal(-1)
            case Command.RIGHT:
                self.move_card_horizontal(1)
            case Command.UP:
                self.move_card_vertical(-1)
            case Command.DOWN:
                self.move_card_vertical(1)
            case Command.DROP:
                self.drop_card()

    def _on_confirm(self, prompt: ConfirmDelete, command: Command) -> None:
        match command:
            case Command.TOGGLE:
                self.mode = replace(prompt, choice=prompt.choice.toggled())
            case Command.YES:
                self.confirm_delete()
            case Command.NO | Command.CANCEL:
                self.cancel_delete()
            case Command.CONFIRM:
                if prompt.choice is Choice.YES:
                    self.confirm_delete()
                else:
                    self.cancel_delete()

    def quit(self) -> None:
        self.running = False
        logger.info("Quit requested")

    # --- Board list ---

    def move_board_cursor(self, delta: int) -> None:
        target = self.board_index + delta
        if 0 <= target < len(self.boards):
            self.board_index = target

    def select_board(self) -> None:
        """Open the board under the cursor and stamp it as viewed."""
        board = self.selected_board
        if board is None:
            return
        with self._storage_errors("Opening board"):
            self.store.mark_viewed(board.id)
            self.snapshot = self.store.load_board(board.id)
            self.column_index = 0
            self.card_index = None
            self._clamp_cursor()
            self.mode = BoardView()
            logger.info("Opened board %r", board.name)

    def switch_board(self) -> None:
        """Leave the open board for the board list, cursor on that board."""
        current = self.board
        with self._storage_errors("Loading boards"):
            self._load_boards(select_id=current.id if current else None)
            self.snapshot = None
            self.detail = None
            self.mode = BoardList(empty=not self.boards)

    def create_board(self) -> None:
        """Create a board from the empty board template."""

        def commit(draft: Draft) -> Board:
            return self.store.create_board(draft.name, draft.columns or ())

        result = self._run_edit(EntityKind.BOARD, NEW, empty_template(EntityKind.BOARD), commit)
        self._refresh(select_id=result.value.id if result.success else None)
        if result.success:
            self._set_status(f"Created board '{result.value.name}'")

    def edit_board(self) -> None:
        """Rename the board, re-order its columns or append new ones."""
        board = self.board if isinstance(self.mode, BoardView) else self.selected_board
        if board is None:
            return
        snapshot = None
        with self._storage_errors("Loading board"):
            snapshot = self.store.load_board(board.id)
        if snapshot is None:
            return

        def commit(draft: Draft) -> Board:
            return self.store.update_board(board.id, draft.name, draft.columns)

        self._run_edit(EntityKind.BOARD, board.id, encode(snapshot), commit)
        self._refresh(select_id=board.id)

    # --- Board view ---

    def move_cursor_horizontal(self, delta: int) -> None:
        """Move to the neighbouring column, keeping the card row where possible."""
        if self.snapshot is None:
            return
        target = self.column_index + delta
        if not 0 <= target < len(self.snapshot.columns):
            return
        self.column_index = target
        cards = self.snapshot.columns[target].cards
        if not cards:
            self.card_index = None
        else:
            self.card_index = _clamp(self.card_index or 0, len(cards))

    def move_cursor_vertical(self, delta: int) -> None:
        if self.snapshot is None or self.card_index is None:
            return
        target = self.card_index + delta
        if 0 <= target < len(self.snapshot.columns[self.column_index].cards):
            self.card_index = target

    def open_card(self) -> None:
        card = self.selected_card
        if card is None:
            return
        with self._storage_errors("Opening card"):
            self.detail = self.store.get_card(card.id)
            self.mode = CardDetail()

    def close_card(self) -> None:
        self.detail = None
        self.mode = BoardView()
        self._refresh()

    def create_card(self) -> None:
        """Create a card at the bottom of the column under the cursor."""
        column = self.selected_column
        if column is None:
            self._set_status("Add a column first (press a)", StatusLevel.WARNING)
            return

        def commit(draft: Draft) -> Card:
            return self.store.create_card(column.id, draft.title, draft.body)

        result = self._run_edit(
            EntityKind.CARD, f"{NEW}:{column.id}", empty_template(EntityKind.CARD), commit
        )
        self._refresh()
        if result.success:
            self._focus_card(result.value.id)
            self._set_status(f"Created card #{result.value.number}")

    def edit_card(self) -> None:
        """Edit the selected card (or the one shown in detail)."""
        card = self.detail if isinstance(self.mode, CardDetail) else self.selected_card
        if card is None:
            return
        current = None
        with self._storage_errors("Loading card"):
            current = self.store.get_card(card.id)
        if current is None:
            return

        def commit(draft: Draft) -> Card:
            return self.store.update_card(card.id, draft.title, draft.body)

        result = self._run_edit(EntityKind.CARD, card.id, encode(current), commit)
        self._refresh()
        if result.success:
            self._set_status(f"Saved card #{result.value.number}")

    def move_card_horizontal(self, delta: int) -> None:
        """Move the selected card to the top of the neighbouring column."""
        card = self.selected_card
        if card is None or self.snapshot is None:
            return
        target = self.column_index + delta
        if not 0 <= target < len(self.snapshot.columns):
            return
        target_column = self.snapshot.columns[target].column
        with self._storage_errors("Moving card"):
            self.store.move_card(card.id, target_column.id, 0)
            self._reload_board()
            self._focus_card(card.id)

    def move_card_vertical(self, delta: int) -> None:
        """Shift the selected card within its column; the cursor follows it."""
        card = self.selected_card
        if card is None or self.snapshot is None or self.card_index is None:
            return
        target = self.card_index + delta
        if not 0 <= target < len(self.snapshot.columns[self.column_index].cards):
            return
        with self._storage_errors("Moving card"):
            self.store.reorder_card(card.id, delta)
            self._reload_board()
            self._focus_card(card.id)

    def pick_up_card(self) -> None:
        if self.selected_card is not None:
            self.mode = MovingCard()

    def drop_card(self) -> None:
        self.mode = BoardView()

    def add_column(self, name: str | None = None) -> None:
        """Append an empty column and move the cursor to it.

        Args:
            name: Column name. When omitted the name is asked for through
                  the editor.
        """
        board = self.board
        if board is None:
            return
        if name is not None:
            with self._storage_errors("Adding column"):
                column = self.store.add_column(board.id, name)
                self._reload_board()
                self._focus_column(column.id)
            return

        def commit(draft: Draft) -> Column:
            return self.store.add_column(board.id, draft.name)

        result = self._run_edit(
            EntityKind.COLUMN, f"{NEW}:{board.id}", empty_template(EntityKind.COLUMN), commit
        )
        self._refresh()
        if result.success:
            self._focus_column(result.value.id)

    def rename_column(self) -> None:
        column = self.selected_column
        if column is None:
            return

        def commit(draft: Draft) -> Column:
            return self.store.rename_column(column.id, draft.name)

        self._run_edit(EntityKind.COLUMN, column.id, encode(column), commit)
        self._refresh()

    # --- Deletion ---

    def request_delete(self, target: DeleteTarget) -> None:
        """Ask for confirmation before deleting the selected entity."""
        if not isinstance(self.mode, BoardList | BoardView):
            return
        match target:
            case DeleteTarget.BOARD:
                board = self.selected_board if isinstance(self.mode, BoardList) else self.board
                if board is None:
                    return
                entity_id, label = board.id, board.name
            case DeleteTarget.COLUMN:
                column = self.selected_column
                if column is None:
                    return
                entity_id, label = column.id, column.name
            case DeleteTarget.CARD:
                card = self.selected_card
                if card is None:
                    return
                entity_id, label = card.id, f"#{card.number} {card.title}"
        self.mode = ConfirmDelete(
            target=target, entity_id=entity_id, label=label, return_to=self.mode
        )

    def confirm_delete(self) -> None:
        prompt = self.mode
        if not isinstance(prompt, ConfirmDelete):
            return
        self.mode = prompt.return_to
        with self._storage_errors(f"Deleting {prompt.target}"):
            match prompt.target:
                case DeleteTarget.BOARD:
                    self.store.delete_board(prompt.entity_id)
                    self.snapshot = None
                    self._load_boards()
                    self.mode = BoardList(empty=not self.boards)
                case DeleteTarget.COLUMN:
                    self.store.delete_column(prompt.entity_id)
                    self._reload_board()
                case DeleteTarget.CARD:
                    self.store.delete_card(prompt.entity_id)
                    self._reload_board()
            self._forget_vanished()
            logger.info("Deleted %s %s", prompt.target, prompt.entity_id)
            self._set_status(f"Deleted {prompt.target} '{prompt.label}'")

    def cancel_delete(self) -> None:
        prompt = self.mode
        if isinstance(prompt, ConfirmDelete):
            self.mode = prompt.return_to
            self._set_status("Nothing deleted")

    # --- Edit sessions ---

    def _run_edit(
        self,
        kind: EntityKind,
        target: str,
        template: str,
        commit: Callable[[Draft], Any],
    ) -> EditResult:
        """Run an edit session for ``target`` and report its outcome.

        Text rejected by the last session for the same target replaces
        ``template``.
        """
        key = (kind, target)
        return_to = self.mode
        self.mode = Editing(return_to=return_to)
        try:
            result = self.editor.run(
                self._recovered.get(key, template),
                lambda text: decode(kind, text),
                commit,
            )
        finally:
            self.mode = return_to
        logger.info("Edit of %s %s ended: %s", kind, target, result.status)

        if result.success:
            self._recovered.pop(key, None)
        elif result.recoverable_text is not None:
            self._recovered[key] = result.recoverable_text
            self._set_status(
                f"{result.error} (your text is kept for the next edit)", StatusLevel.ERROR
            )
        elif result.status is EditStatus.ABORTED:
            self._recovered.pop(key, None)
            self._set_status(result.error or "Edit cancelled")
        else:
            self._set_status(result.error or "Editor failed", StatusLevel.ERROR)
        return result

    # --- State helpers ---

    def _set_status(self, text: str, level: StatusLevel = StatusLevel.INFO) -> None:
        self.status = StatusMessage(text=text, level=level)

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        """Turn store failures inside the block into a status message."""
        try:
            yield
        except NotFoundError as e:
            logger.warning("%s failed: %s", action, e)
            self._set_status(f"{action} failed: {e}", StatusLevel.ERROR)
            self._recover()
        except StoreError as e:
            logger.error("%s failed: %s", action, e)
            self._set_status(f"{action} failed: {e}", StatusLevel.ERROR)

    def _recover(self) -> None:
        """Re-read state after something vanished underneath the cursor."""
        try:
            self._forget_vanished()
            if self.snapshot is not None:
                try:
                    self._reload_board()
                    self.detail = None
                    self.mode = BoardView()
                    return
                except NotFoundError:
                    self.snapshot = None
            self._load_boards()
            self.mode = BoardList(empty=not self.boards)
        except StoreError as e:
            logger.error("Refresh after missing entity failed: %s", e)

    def _forget_vanished(self) -> None:
        """Drop kept text whose edit target no longer exists."""
        for key in list(self._recovered):
            entity_id = key[1].removeprefix(f"{NEW}:")
            if entity_id != NEW and self.store.get(entity_id) is None:
                logger.debug("Dropping kept %s text for vanished %s", *key)
                del self._recovered[key]

    def _refresh(self, select_id: str | None = None) -> None:
        """Re-read whatever the current mode shows."""
        with self._storage_errors("Refreshing"):
            if isinstance(self.mode, BoardList):
                self._load_boards(select_id)
                self.mode = BoardList(empty=not self.boards)
            elif self.snapshot is not None:
                self._reload_board()
                if isinstance(self.mode, CardDetail) and self.detail is not None:
                    self.detail = self.store.get_card(self.detail.id)

    def _load_boards(self, select_id: str | None = None) -> None:
        self.boards = self.store.list_boards()
        if select_id is not None:
            for index, board in enumerate(self.boards):
                if board.id == select_id:
                    self.board_index = index
                    break
        self.board_index = _clamp(self.board_index, len(self.boards)) if self.boards else 0

    def _reload_board(self) -> None:
        if self.snapshot is None:
            return
        self.snapshot = self.store.load_board(self.snapshot.board.id)
        self._clamp_cursor()

    def _clamp_cursor(self) -> None:
        columns = self.snapshot.columns if self.snapshot is not None else []
        if not columns:
            self.column_index, self.card_index = 0, None
            return
        self.column_index = _clamp(self.column_index, len(columns))
        cards = columns[self.column_index].cards
        if not cards:
            self.card_index = None
        else:
            self.card_index = _clamp(self.card_index or 0, len(cards))

    def _focus_column(self, column_id: str) -> None:
        if self.snapshot is None:
            return
        index = self.snapshot.column_index(column_id)
        if index is not None:
            self.column_index = index
            self.card_index = None
            self._clamp_cursor()

    def _focus_card(self, card_id: str) -> None:
        if self.snapshot is None:
            return
        for column_index, column in enumerate(self.snapshot.columns):
            for card_index, card in enumerate(column.cards):
                if card.id == card_id:
                    self.column_index, self.card_index = column_index, card_index
                    return

    # --- View ---

    def view(self) -> Screen:
        """Build the view model for the current state."""
        shown = self.mode.return_to if isinstance(self.mode, Editing) else self.mode
        base = shown.return_to if isinstance(shown, ConfirmDelete) else shown

        board_list = None
        board = None
        if isinstance(base, BoardList):
            board_list = BoardListView(
                names=tuple(b.name for b in self.boards),
                selected=self.board_index if self.boards else None,
            )
        elif self.snapshot is not None:
            board = self._board_view_model(moving=isinstance(base, MovingCard))

        confirm = None
        if isinstance(shown, ConfirmDelete):
            confirm = ConfirmView(
                prompt=f"Delete {shown.target} '{shown.label}'?",
                yes=shown.choice is Choice.YES,
            )

        return Screen(
            mode=mode_name(self.mode),
            hints=hints(self.mode),
            board_list=board_list,
            board=board,
            card=self._card_detail_view() if isinstance(base, CardDetail) else None,
            confirm=confirm,
            status=self.status,
        )

    def _board_view_model(self, moving: bool) -> BoardViewModel:
        assert self.snapshot is not None
        columns = []
        for column_index, column in enumerate(self.snapshot.columns):
            in_column = column_index == self.column_index
            cards = tuple(
                CardView(
                    number=card.number,
                    title=card.title,
                    selected=in_column and card_index == self.card_index,
                    has_body=bool(card.body),
                )
                for card_index, card in enumerate(column.cards)
            )
            columns.append(ColumnView(name=column.column.name, cards=cards, selected=in_column))
        return BoardViewModel(
            name=self.snapshot.board.name, columns=tuple(columns), moving=moving
        )

    def _card_detail_view(self) -> CardDetailView | None:
        card = self.detail
        if card is None:
            return None
        column_name = ""
        if self.snapshot is not None:
            index = self.snapshot.column_index(card.column_id)
            if index is not None:
                column_name = self.snapshot.columns[index].column.name
        return CardDetailView(
            number=card.number,
            title=card.title,
            body=card.body,
            column_name=column_name,
            created_at=card.created_at,
            updated_at=card.updated_at,
        )

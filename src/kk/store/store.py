"""KanbanStore - Main API for board, column and card persistence."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from kk.store.database import Database
from kk.store.exceptions import (
    BoardExistsError,
    BoardNotFoundError,
    CardNotFoundError,
    ColumnExistsError,
    ColumnNotFoundError,
    NotFoundError,
    OrderError,
    StoreError,
    ValidationError,
)
from kk.store.models import (
    Board,
    BoardSnapshot,
    Card,
    Column,
    ColumnSnapshot,
    next_timestamp,
    utcnow,
)
from kk.store.operations import (
    EDITABLE_FIELDS,
    Create,
    Delete,
    Entity,
    Link,
    Operation,
    Reorder,
    Unlink,
    Update,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

    from sqlalchemy.orm import Session

logger = logging.getLogger("kk.store")

_NOT_FOUND: dict[type, type[NotFoundError]] = {
    Board: BoardNotFoundError,
    Column: ColumnNotFoundError,
    Card: CardNotFoundError,
}


def _clean_name(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must not be empty")
    if "\n" in value.strip():
        raise ValidationError(f"{label} must be a single line")
    return value.strip()


def _insert(order: list[str], item: str, position: int | None) -> list[str]:
    new_order = list(order)
    if position is None:
        new_order.append(item)
    else:
        new_order.insert(max(0, position), item)
    return new_order


class KanbanStore:
    """Main API for the Kanban store.

    Every public method runs in its own session and its own transaction, so
    no record is held between calls. Failures surface as ``StoreError``
    subclasses with the database left as it was before the call.
    """

    def __init__(self, db_path: str | Path = "kk.db") -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file, or ":memory:".

        Raises:
            StoreError: If the database cannot be opened or created.
        """
        self._db = Database(db_path)
        try:
            self._db.create_tables()
        except (SQLAlchemyError, OSError) as e:
            self._db.close()
            raise StoreError(f"Cannot open database at '{db_path}': {e}") from e

    @property
    def database(self) -> Database:
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with self._db.transaction() as session:
                yield session
                unlinked = session.info.get("unlinked")
                if unlinked:
                    raise OrderError(
                        f"Card(s) unlinked without being linked again: {sorted(unlinked)}"
                    )
        except StoreError:
            raise
        except IntegrityError as e:
            message = str(e.orig)
            if "boards.name" in message:
                raise BoardExistsError("A board with that name already exists") from e
            if "columns.board_id" in message or "columns.name" in message:
                raise ColumnExistsError("A column with that name already exists") from e
            raise StoreError(f"Constraint violation: {message}") from e
        except SQLAlchemyError as e:
            logger.exception("Storage failure")
            raise StoreError(f"Storage failure: {e}") from e

    # --- Generic gateway ---

    def get(self, entity_id: str) -> Entity | None:
        """Get a board, column or card by ID.

        Returns:
            The record, or None if no record has that ID.
        """
        with self._transaction() as session:
            return self._find(session, entity_id)

    def list_children_in_order(self, parent_id: str) -> list[str]:
        """Return the ordered child IDs of a board (columns) or a column (cards).

        Raises:
            NotFoundError: If no board or column has that ID.
        """
        with self._transaction() as session:
            parent = self._find(session, parent_id)
            if isinstance(parent, Board):
                return list(parent.column_order)
            if isinstance(parent, Column):
                return list(parent.card_order)
            raise NotFoundError(f"No board or column with id '{parent_id}'")

    def create(self, entity: Entity, position: int | None = None) -> str:
        """Insert a record, linking columns and cards into their parent.

        Returns:
            The new record's ID.
        """
        return self.transaction([Create(entity, position)])[0]

    def update(self, entity_id: str, entity: Any) -> None:
        """Copy the editable fields of ``entity`` onto the stored record.

        ``entity`` may be a record or any object carrying the same field names
        (for example a template draft).
        """
        with self._transaction() as session:
            record = self._find(session, entity_id)
            if record is None:
                raise NotFoundError(f"No record with id '{entity_id}'")
            fields = {name: getattr(entity, name) for name in EDITABLE_FIELDS[type(record)]}
            self._apply(session, Update(entity_id, fields))

    def delete(self, entity_id: str) -> None:
        """Delete a record, its descendants, and its place in the parent order."""
        self.transaction([Delete(entity_id)])

    def reorder(self, parent_id: str, new_order: Sequence[str]) -> None:
        """Replace a parent's order list. Must be a permutation of the current one."""
        self.transaction([Reorder(parent_id, list(new_order))])

    def transaction(self, ops: Sequence[Operation]) -> list[Any]:
        """Apply operations atomically.

        Returns:
            One result per operation: the new ID for Create, None otherwise.
        """
        with self._transaction() as session:
            results = [self._apply(session, op) for op in ops]
        logger.debug("Committed transaction of %d operation(s)", len(ops))
        return results

    # --- Board Operations ---

    def list_boards(self) -> list[Board]:
        """List all boards, most recently viewed first."""
        with self._transaction() as session:
            stmt = select(Board).order_by(Board.viewed_at.desc(), Board.name)
            return list(session.execute(stmt).scalars().all())

    def get_board(self, board_id: str) -> Board:
        """Get board by ID.

        Raises:
            BoardNotFoundError: If board doesn't exist
        """
        with self._transaction() as session:
            return self._require(session, Board, board_id)

    def load_board(self, board_id: str) -> BoardSnapshot:
        """Read a board with its columns and cards in order, in one session."""
        with self._transaction() as session:
            board = self._require(session, Board, board_id)
            snapshot = BoardSnapshot(board=board)
            for column_id in board.column_order:
                column = self._require(session, Column, column_id)
                cards = [self._require(session, Card, card_id) for card_id in column.card_order]
                snapshot.columns.append(ColumnSnapshot(column=column, cards=cards))
            return snapshot

    def mark_viewed(self, board_id: str) -> None:
        """Record that a board was just opened."""
        with self._transaction() as session:
            board = self._require(session, Board, board_id)
            board.viewed_at = next_timestamp(board.viewed_at)

    def create_board(self, name: str, columns: Sequence[str] = ()) -> Board:
        """Create a board and its initial columns in one transaction.

        Raises:
            BoardExistsError: If a board with the same name exists
            ColumnExistsError: If ``columns`` repeats a name
        """
        with self._transaction() as session:
            board = Board(name=name)
            self._apply(session, Create(board))
            for column_name in columns:
                self._apply(session, Create(Column(board_id=board.id, name=column_name)))
        logger.info("Created board %r with %d column(s)", board.name, len(columns))
        return self.get_board(board.id)

    def update_board(
        self,
        board_id: str,
        name: str,
        columns: Sequence[str] | None = None,
    ) -> Board:
        """Rename a board and optionally re-order / extend its columns.

        Every existing column must still be listed in ``columns``; names not
        yet on the board become new empty columns. ``None`` keeps the order.

        Raises:
            BoardNotFoundError: If board doesn't exist
            ValidationError: If ``columns`` drops an existing column
        """
        with self._transaction() as session:
            board = self._require(session, Board, board_id)
            self._apply(session, Update(board_id, {"name": name}))
            if columns is not None:
                existing = {}
                for column_id in board.column_order:
                    column = self._require(session, Column, column_id)
                    existing[column.name] = column.id
                dropped = [n for n in existing if n not in columns]
                if dropped:
                    raise ValidationError(
                        "Columns cannot be removed by editing the board: " + ", ".join(dropped)
                    )
                new_order = []
                for column_name in columns:
                    if column_name in existing:
                        new_order.append(existing[column_name])
                    else:
                        column = Column(board_id=board_id, name=column_name)
                        self._apply(session, Create(column))
                        new_order.append(column.id)
                self._apply(session, Reorder(board_id, new_order))
        return self.get_board(board_id)

    def delete_board(self, board_id: str) -> None:
        """Delete a board with all of its columns and cards."""
        with self._transaction() as session:
            self._require(session, Board, board_id)
            self._apply(session, Delete(board_id))
        logger.info("Deleted board %s", board_id)

    # --- Column Operations ---

    def get_column(self, column_id: str) -> Column:
        """Get column by ID.

        Raises:
            ColumnNotFoundError: If column doesn't exist
        """
        with self._transaction() as session:
            return self._require(session, Column, column_id)

    def add_column(self, board_id: str, name: str, position: int | None = None) -> Column:
        """Create an empty column on a board (appended unless ``position`` is given)."""
        with self._transaction() as session:
            self._require(session, Board, board_id)
            column = Column(board_id=board_id, name=name)
            self._apply(session, Create(column, position))
        return self.get_column(column.id)

    def rename_column(self, column_id: str, name: str) -> Column:
        with self._transaction() as session:
            self._require(session, Column, column_id)
            self._apply(session, Update(column_id, {"name": name}))
        return self.get_column(column_id)

    def delete_column(self, column_id: str) -> None:
        """Delete a column and its cards, unlinking it from the board."""
        with self._transaction() as session:
            self._require(session, Column, column_id)
            self._apply(session, Delete(column_id))

    # --- Card Operations ---

    def get_card(self, card_id: str) -> Card:
        """Get card by ID.

        Raises:
            CardNotFoundError: If card doesn't exist
        """
        with self._transaction() as session:
            return self._require(session, Card, card_id)

    def create_card(
        self,
        column_id: str,
        title: str,
        body: str = "",
        position: int | None = None,
    ) -> Card:
        """Create a card in a column, numbered from the board's counter.

        Raises:
            ColumnNotFoundError: If column doesn't exist
            ValidationError: If title is empty
        """
        with self._transaction() as session:
            column = self._require(session, Column, column_id)
            card = Card(board_id=column.board_id, column_id=column_id, title=title, body=body)
            self._apply(session, Create(card, position))
        logger.info("Created card #%d %r", card.number, card.title)
        return self.get_card(card.id)

    def update_card(self, card_id: str, title: str, body: str) -> Card:
        """Replace a card's title and body, advancing its updated_at."""
        with self._transaction() as session:
            self._require(session, Card, card_id)
            self._apply(session, Update(card_id, {"title": title, "body": body}))
        return self.get_card(card_id)

    def delete_card(self, card_id: str) -> None:
        """Delete a card and unlink it from its column."""
        with self._transaction() as session:
            self._require(session, Card, card_id)
            self._apply(session, Delete(card_id))

    def move_card(self, card_id: str, target_column_id: str, position: int | None = 0) -> Card:
        """Move a card to another column of the same board.

        Unlinking from the old column and linking into the new one happen in
        the same transaction, so the card is never in zero or two columns.
        """
        with self._transaction() as session:
            card = self._require(session, Card, card_id)
            if card.column_id != target_column_id:
                self._apply(session, Unlink(card.column_id, card_id))
                self._apply(session, Link(target_column_id, card_id, position))
        return self.get_card(card_id)

    def reorder_card(self, card_id: str, offset: int) -> int:
        """Shift a card up (negative) or down (positive) within its column.

        Returns:
            The card's new index. Shifting past either end is a no-op.
        """
        with self._transaction() as session:
            card = self._require(session, Card, card_id)
            column = self._require(session, Column, card.column_id)
            order = list(column.card_order)
            if card_id not in order:
                raise OrderError(f"Card '{card_id}' is missing from column '{column.id}' order")
            index = order.index(card_id)
            target = min(max(index + offset, 0), len(order) - 1)
            if target != index:
                order.insert(target, order.pop(index))
                self._apply(session, Reorder(column.id, order))
            return target

    # --- Integrity ---

    def check_integrity(self) -> list[str]:
        """Verify order lists against back-references.

        Returns:
            A list of problems; empty when every column appears in exactly its
            board's order and every card in exactly its column's order.
        """
        problems: list[str] = []
        with self._transaction() as session:
            boards = session.execute(select(Board)).scalars().all()
            columns = session.execute(select(Column)).scalars().all()
            cards = session.execute(select(Card)).scalars().all()

        columns_by_id = {c.id: c for c in columns}
        cards_by_id = {c.id: c for c in cards}
        seen_columns: dict[str, int] = {}
        seen_cards: dict[str, int] = {}

        for board in boards:
            for column_id in board.column_order:
                seen_columns[column_id] = seen_columns.get(column_id, 0) + 1
                column = columns_by_id.get(column_id)
                if column is None:
                    problems.append(f"board {board.id} lists missing column {column_id}")
                elif column.board_id != board.id:
                    problems.append(f"board {board.id} lists column {column_id} of another board")
        for column in columns:
            if seen_columns.get(column.id, 0) != 1:
                problems.append(
                    f"column {column.id} appears {seen_columns.get(column.id, 0)} time(s) in board orders"
                )
            for card_id in column.card_order:
                seen_cards[card_id] = seen_cards.get(card_id, 0) + 1
                card = cards_by_id.get(card_id)
                if card is None:
                    problems.append(f"column {column.id} lists missing card {card_id}")
                elif card.column_id != column.id:
                    problems.append(f"column {column.id} lists card {card_id} of another column")
                elif card.board_id != column.board_id:
                    problems.append(f"card {card_id} belongs to another board than its column")
        for card in cards:
            if seen_cards.get(card.id, 0) != 1:
                problems.append(
                    f"card {card.id} appears {seen_cards.get(card.id, 0)} time(s) in column orders"
                )
        return problems

    # --- Internals ---

    @staticmethod
    def _find(session: Session, entity_id: str) -> Entity | None:
        for model in (Board, Column, Card):
            record = session.get(model, entity_id)
            if record is not None:
                return record
        return None

    @staticmethod
    def _require(session: Session, model: type, entity_id: str) -> Any:
        record = session.get(model, entity_id)
        if record is None:
            raise _NOT_FOUND[model](f"{model.__name__} with id '{entity_id}' not found")
        return record

    def _touch_board(self, session: Session, board_id: str) -> None:
        board = session.get(Board, board_id)
        if board is not None:
            board.updated_at = next_timestamp(board.updated_at)

    def _apply(self, session: Session, op: Operation) -> Any:
        match op:
            case Create(entity=Board() as board):
                return self._create_board(session, board)
            case Create(entity=Column() as column, position=position):
                return self._create_column(session, column, position)
            case Create(entity=Card() as card, position=position):
                return self._create_card(session, card, position)
            case Update(entity_id=entity_id, fields=fields):
                self._update(session, entity_id, fields)
            case Delete(entity_id=entity_id):
                self._delete(session, entity_id)
            case Reorder(parent_id=parent_id, new_order=new_order):
                self._reorder(session, parent_id, new_order)
            case Unlink(parent_id=parent_id, child_id=child_id):
                self._unlink(session, parent_id, child_id)
            case Link(parent_id=parent_id, child_id=child_id, position=position):
                self._link(session, parent_id, child_id, position)
            case _:
                raise StoreError(f"Unsupported operation: {op!r}")
        session.flush()
        return None

    def _create_board(self, session: Session, board: Board) -> str:
        board.name = _clean_name(board.name, "Board name")
        if board.column_order:
            raise ValidationError("A new board cannot reference existing columns")
        clash = session.execute(select(Board.id).where(Board.name == board.name)).first()
        if clash is not None:
            raise BoardExistsError(f"Board '{board.name}' already exists")
        session.add(board)
        session.flush()
        return board.id

    def _create_column(self, session: Session, column: Column, position: int | None) -> str:
        column.name = _clean_name(column.name, "Column name")
        if column.card_order:
            raise ValidationError("A new column cannot reference existing cards")
        board = self._require(session, Board, column.board_id)
        self._check_column_name(session, board.id, column.name)
        session.add(column)
        board.column_order = _insert(board.column_order, column.id, position)
        board.updated_at = next_timestamp(board.updated_at)
        session.flush()
        return column.id

    def _create_card(self, session: Session, card: Card, position: int | None) -> str:
        card.title = _clean_name(card.title, "Card title")
        column = self._require(session, Column, card.column_id)
        if card.board_id != column.board_id:
            raise ValidationError("Card and column belong to different boards")
        board = self._require(session, Board, column.board_id)
        card.number = board.next_card_number
        board.next_card_number = board.next_card_number + 1
        now = utcnow()
        card.created_at = now
        card.updated_at = now
        session.add(card)
        column.card_order = _insert(column.card_order, card.id, position)
        board.updated_at = next_timestamp(board.updated_at)
        session.flush()
        return card.id

    def _check_column_name(
        self, session: Session, board_id: str, name: str, column_id: str | None = None
    ) -> None:
        stmt = select(Column.id).where(Column.board_id == board_id, Column.name == name)
        clash = session.execute(stmt).scalar_one_or_none()
        if clash is not None and clash != column_id:
            raise ColumnExistsError(f"Column '{name}' already exists on this board")

    def _update(self, session: Session, entity_id: str, fields: dict[str, Any]) -> None:
        record = self._find(session, entity_id)
        if record is None:
            raise NotFoundError(f"No record with id '{entity_id}'")
        allowed = EDITABLE_FIELDS[type(record)]
        unknown = sorted(set(fields) - set(allowed))
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(unknown)}")

        if isinstance(record, Board):
            name = _clean_name(fields.get("name", record.name), "Board name")
            clash = session.execute(
                select(Board.id).where(Board.name == name, Board.id != record.id)
            ).first()
            if clash is not None:
                raise BoardExistsError(f"Board '{name}' already exists")
            record.name = name
            record.updated_at = next_timestamp(record.updated_at)
        elif isinstance(record, Column):
            name = _clean_name(fields.get("name", record.name), "Column name")
            self._check_column_name(session, record.board_id, name, record.id)
            record.name = name
            self._touch_board(session, record.board_id)
        else:
            record.title = _clean_name(fields.get("title", record.title), "Card title")
            body = fields.get("body", record.body)
            record.body = body if body is not None else ""
            record.updated_at = next_timestamp(record.updated_at)
            self._touch_board(session, record.board_id)

    def _delete(self, session: Session, entity_id: str) -> None:
        record = self._find(session, entity_id)
        if record is None:
            raise NotFoundError(f"No record with id '{entity_id}'")

        if isinstance(record, Board):
            session.execute(delete(Card).where(Card.board_id == record.id))
            session.execute(delete(Column).where(Column.board_id == record.id))
            session.delete(record)
        elif isinstance(record, Column):
            session.execute(delete(Card).where(Card.column_id == record.id))
            board = self._require(session, Board, record.board_id)
            board.column_order = [c for c in board.column_order if c != record.id]
            board.updated_at = next_timestamp(board.updated_at)
            session.delete(record)
        else:
            column = self._require(session, Column, record.column_id)
            column.card_order = [c for c in column.card_order if c != record.id]
            self._touch_board(session, record.board_id)
            session.info.get("unlinked", set()).discard(record.id)
            session.delete(record)

    def _reorder(self, session: Session, parent_id: str, new_order: list[str]) -> None:
        parent = self._find(session, parent_id)
        if isinstance(parent, Board):
            current = parent.column_order
        elif isinstance(parent, Column):
            current = parent.card_order
        else:
            raise NotFoundError(f"No board or column with id '{parent_id}'")

        if len(new_order) != len(current) or sorted(new_order) != sorted(current):
            raise OrderError("New order must be a permutation of the current order")

        if isinstance(parent, Board):
            parent.column_order = list(new_order)
            parent.updated_at = next_timestamp(parent.updated_at)
        else:
            parent.card_order = list(new_order)
            self._touch_board(session, parent.board_id)

    def _unlink(self, session: Session, parent_id: str, child_id: str) -> None:
        column = self._require(session, Column, parent_id)
        if child_id not in column.card_order:
            raise OrderError(f"Card '{child_id}' is not in column '{parent_id}'")
        column.card_order = [c for c in column.card_order if c != child_id]
        session.info.setdefault("unlinked", set()).add(child_id)

    def _link(self, session: Session, parent_id: str, child_id: str, position: int | None) -> None:
        column = self._require(session, Column, parent_id)
        card = self._require(session, Card, child_id)
        if card.board_id != column.board_id:
            raise ValidationError("Cards can only move between columns of the same board")
        current = session.get(Column, card.column_id)
        if current is not None and child_id in current.card_order:
            raise OrderError(f"Card '{child_id}' is still linked to column '{current.id}'")
        card.column_id = column.id
        column.card_order = _insert(column.card_order, child_id, position)
        session.info.get("unlinked", set()).discard(child_id)
        self._touch_board(session, column.board_id)

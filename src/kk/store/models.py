"""SQLAlchemy models for the Kanban store.

Hierarchy lives in the order lists owned by each parent (``Board.column_order``
and ``Column.card_order``). The ``board_id``/``column_id`` back-references exist
for validation and cascading deletes only.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (SQLite drops tzinfo)."""
    return datetime.now(UTC).replace(tzinfo=None)


def next_timestamp(previous: datetime | None) -> datetime:
    """Return a timestamp strictly after ``previous``.

    Clock resolution or a clock stepping backwards must never make a
    modification time go down.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Board(Base):
    """Board model - a named, ordered list of columns."""

    __tablename__ = "boards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    column_order: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    next_card_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        name: str,
        id: str | None = None,
        column_order: list[str] | None = None,
        next_card_number: int = 1,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        now = utcnow()
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.column_order = list(column_order) if column_order is not None else []
        self.next_card_number = next_card_number
        self.created_at = now
        self.updated_at = now
        self.viewed_at = now

    def __repr__(self) -> str:
        return f"<Board(id={self.id!r}, name={self.name!r}, columns={len(self.column_order)})>"


class Column(Base):
    """Column model - a named lane holding an ordered list of cards."""

    __tablename__ = "columns"
    __table_args__ = (UniqueConstraint("board_id", "name", name="uq_columns_board_name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    board_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    card_order: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        board_id: str,
        name: str,
        id: str | None = None,
        card_order: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.board_id = board_id
        self.name = name
        self.card_order = list(card_order) if card_order is not None else []
        self.created_at = utcnow()

    def __repr__(self) -> str:
        return f"<Column(id={self.id!r}, name={self.name!r}, cards={len(self.card_order)})>"


class Card(Base):
    """Card model - the unit of work."""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    board_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    column_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("columns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        board_id: str,
        column_id: str,
        title: str,
        id: str | None = None,
        body: str = "",
        number: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        now = utcnow()
        self.id = id if id is not None else generate_uuid()
        self.board_id = board_id
        self.column_id = column_id
        self.number = number
        self.title = title
        self.body = body
        self.created_at = now
        self.updated_at = now

    def __repr__(self) -> str:
        return f"<Card(id={self.id!r}, number={self.number!r}, title={self.title!r})>"


@dataclass
class ColumnSnapshot:
    """A column together with its cards, in display order."""

    column: Column
    cards: list[Card] = field(default_factory=list)


@dataclass
class BoardSnapshot:
    """A board with all of its columns and cards, read in one session."""

    board: Board
    columns: list[ColumnSnapshot] = field(default_factory=list)

    def column_index(self, column_id: str) -> int | None:
        for index, snapshot in enumerate(self.columns):
            if snapshot.column.id == column_id:
                return index
        return None

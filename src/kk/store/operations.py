"""Operations accepted by ``KanbanStore.transaction``.

Each operation is plain data. A transaction applies a sequence of them in one
database session: either every operation is visible afterwards or none is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kk.store.models import Board, Card, Column

Entity = Board | Column | Card

# Fields a caller may change through Update, per record type
EDITABLE_FIELDS: dict[type, tuple[str, ...]] = {
    Board: ("name",),
    Column: ("name",),
    Card: ("title", "body"),
}


@dataclass
class Create:
    """Insert a new record.

    Columns and cards are also linked into their parent's order list, at
    ``position`` (``None`` appends).
    """

    entity: Entity
    position: int | None = None


@dataclass
class Update:
    """Change editable fields of an existing record."""

    entity_id: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class Delete:
    """Delete a record, its descendants, and its entry in the parent order list."""

    entity_id: str


@dataclass
class Reorder:
    """Replace a parent's order list with a permutation of itself."""

    parent_id: str
    new_order: list[str]


@dataclass
class Unlink:
    """Remove a card from a column's order list (first half of a move)."""

    parent_id: str
    child_id: str


@dataclass
class Link:
    """Insert an unlinked card into a column's order list (second half of a move)."""

    parent_id: str
    child_id: str
    position: int | None = None


Operation = Create | Update | Delete | Reorder | Unlink | Link

"""Store - Persistent storage for boards, columns and cards."""

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
)
from kk.store.operations import Create, Delete, Link, Reorder, Unlink, Update
from kk.store.store import KanbanStore

__all__ = [
    "Board",
    "BoardExistsError",
    "BoardNotFoundError",
    "BoardSnapshot",
    "Card",
    "CardNotFoundError",
    "Column",
    "ColumnExistsError",
    "ColumnNotFoundError",
    "ColumnSnapshot",
    "Create",
    "Delete",
    "KanbanStore",
    "Link",
    "NotFoundError",
    "OrderError",
    "Reorder",
    "StoreError",
    "Unlink",
    "Update",
    "ValidationError",
]

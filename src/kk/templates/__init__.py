"""Templates - plain-text serialization of boards, columns and cards."""

from kk.templates.codec import (
    DEFAULT_COLUMNS,
    EntityKind,
    decode,
    decode_board,
    decode_card,
    decode_column,
    empty_template,
    encode,
)
from kk.templates.models import BoardDraft, CardDraft, ColumnDraft, Draft, ParseFailure

__all__ = [
    "DEFAULT_COLUMNS",
    "BoardDraft",
    "CardDraft",
    "ColumnDraft",
    "Draft",
    "EntityKind",
    "ParseFailure",
    "decode",
    "decode_board",
    "decode_card",
    "decode_column",
    "empty_template",
    "encode",
]

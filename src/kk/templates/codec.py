"""Template codec - plain-text templates handed to the external editor.

Formats (labels are stable)::

    name: Groceries          name: Todo          title: Milk

    columns:                                     Free text body,
    - Todo                                       any number of lines.
    - Done

Decoders never raise. They return a draft or a ``ParseFailure`` that carries
the edited text verbatim.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING

from kk.store.models import Board, BoardSnapshot, Card, Column
from kk.templates.models import BoardDraft, CardDraft, ColumnDraft, ParseFailure

if TYPE_CHECKING:
    from collections.abc import Callable

NAME_LABEL = "name"
COLUMNS_LABEL = "columns"
TITLE_LABEL = "title"

DEFAULT_COLUMNS = ("Todo", "Doing", "Done")

_LABEL_RE = re.compile(r"^\s*(?P<label>[A-Za-z_]+)\s*:(?P<value>.*)$")
_ITEM_RE = re.compile(r"^\s*-(?P<value>.*)$")


class EntityKind(StrEnum):
    """Kinds of entity that can be edited through a template."""

    BOARD = "board"
    COLUMN = "column"
    CARD = "card"


# --- Encoding ---


def encode_board(name: str, columns: tuple[str, ...] | list[str] | None) -> str:
    text = f"{NAME_LABEL}: {name}\n"
    if columns is not None:
        text += f"\n{COLUMNS_LABEL}:\n"
        text += "".join(f"- {column}\n" for column in columns)
    return text


def encode_column(name: str) -> str:
    return f"{NAME_LABEL}: {name}\n"


def encode_card(title: str, body: str) -> str:
    text = f"{TITLE_LABEL}: {title}\n\n"
    if body:
        text += f"{body}\n"
    return text


def encode(entity: object) -> str:
    """Render an entity (record, snapshot or draft) as an editable template.

    A bare ``Board`` record only knows its column IDs, so it is rendered
    without a ``columns:`` section; pass a ``BoardSnapshot`` to include them.
    """
    match entity:
        case BoardSnapshot(board=board, columns=columns):
            return encode_board(board.name, [c.column.name for c in columns])
        case Board(name=name):
            return encode_board(name, None)
        case BoardDraft(name=name, columns=columns):
            return encode_board(name, columns)
        case Column(name=name) | ColumnDraft(name=name):
            return encode_column(name)
        case Card(title=title, body=body) | CardDraft(title=title, body=body):
            return encode_card(title, body)
    raise TypeError(f"Cannot encode {type(entity).__name__}")


def empty_template(kind: EntityKind) -> str:
    """Template shown when creating a new entity of ``kind``."""
    if kind is EntityKind.BOARD:
        return encode_board("", DEFAULT_COLUMNS)
    if kind is EntityKind.COLUMN:
        return encode_column("")
    return encode_card("", "")


# --- Decoding ---


def _lines(text: str) -> list[str]:
    return [line.rstrip() for line in text.lstrip("\ufeff").splitlines()]


def _first_content(lines: list[str]) -> int | None:
    for index, line in enumerate(lines):
        if line.strip():
            return index
    return None


def _required_label(
    lines: list[str], label: str, section: str, raw_text: str
) -> tuple[str, int] | ParseFailure:
    """Read the mandatory first line ``<label>: <value>``.

    Returns the value and the index of the line after it.
    """
    start = _first_content(lines)
    expected = f"a '{label}: ...' line with a non-empty value"
    if start is None:
        return ParseFailure(section=section, expected=expected, raw_text=raw_text)
    match = _LABEL_RE.match(lines[start])
    if match is None or match.group("label").lower() != label:
        return ParseFailure(section=section, expected=expected, raw_text=raw_text, line=start + 1)
    value = match.group("value").strip()
    if not value:
        return ParseFailure(section=section, expected=expected, raw_text=raw_text, line=start + 1)
    return value, start + 1


def decode_board(text: str) -> BoardDraft | ParseFailure:
    lines = _lines(text)
    head = _required_label(lines, NAME_LABEL, "board name", text)
    if isinstance(head, ParseFailure):
        return head
    name, index = head

    columns: list[str] | None = None
    for number, line in enumerate(lines[index:], start=index + 1):
        if not line.strip():
            continue
        if columns is None:
            match = _LABEL_RE.match(line)
            if match is None or match.group("label").lower() != COLUMNS_LABEL:
                return ParseFailure(
                    section="board",
                    expected="only a 'columns:' section after the name",
                    raw_text=text,
                    line=number,
                )
            if match.group("value").strip():
                return ParseFailure(
                    section="columns",
                    expected="one '- <column name>' item per line below 'columns:'",
                    raw_text=text,
                    line=number,
                )
            columns = []
            continue
        item = _ITEM_RE.match(line)
        value = item.group("value").strip() if item else ""
        if not value:
            return ParseFailure(
                section="columns",
                expected="a '- <column name>' item",
                raw_text=text,
                line=number,
            )
        if value in columns:
            return ParseFailure(
                section="columns",
                expected=f"unique column names ('{value}' is listed twice)",
                raw_text=text,
                line=number,
            )
        columns.append(value)

    return BoardDraft(name=name, columns=tuple(columns) if columns is not None else None)


def decode_column(text: str) -> ColumnDraft | ParseFailure:
    lines = _lines(text)
    head = _required_label(lines, NAME_LABEL, "column name", text)
    if isinstance(head, ParseFailure):
        return head
    name, index = head
    for number, line in enumerate(lines[index:], start=index + 1):
        if line.strip():
            return ParseFailure(
                section="column",
                expected="nothing after the 'name:' line",
                raw_text=text,
                line=number,
            )
    return ColumnDraft(name=name)


def decode_card(text: str) -> CardDraft | ParseFailure:
    lines = _lines(text)
    head = _required_label(lines, TITLE_LABEL, "card title", text)
    if isinstance(head, ParseFailure):
        return head
    title, index = head

    body = lines[index:]
    while body and not body[0].strip():
        body.pop(0)
    while body and not body[-1].strip():
        body.pop()
    return CardDraft(title=title, body="\n".join(body))


DECODERS: dict[EntityKind, Callable[[str], BoardDraft | ColumnDraft | CardDraft | ParseFailure]] = {
    EntityKind.BOARD: decode_board,
    EntityKind.COLUMN: decode_column,
    EntityKind.CARD: decode_card,
}


def decode(kind: EntityKind, text: str) -> BoardDraft | ColumnDraft | CardDraft | ParseFailure:
    """Decode edited text for an entity of ``kind``."""
    return DECODERS[kind](text)

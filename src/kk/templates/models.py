"""Data models for the template codec."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BoardDraft:
    """User-editable fields of a board.

    Attributes:
        name: Board display name.
        columns: Column names in order, or None when the template had no
            ``columns:`` section.
    """

    name: str
    columns: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ColumnDraft:
    """User-editable fields of a column."""

    name: str


@dataclass(frozen=True)
class CardDraft:
    """User-editable fields of a card."""

    title: str
    body: str = ""


@dataclass(frozen=True)
class ParseFailure:
    """Edited text that could not be turned into a draft.

    Attributes:
        section: Which part of the template was wrong (e.g. "title").
        expected: What the parser wanted to see there.
        raw_text: The edited text, verbatim, so the edit is never lost.
        line: 1-based line number of the offending line, if any.
    """

    section: str
    expected: str
    raw_text: str
    line: int | None = None

    @property
    def message(self) -> str:
        where = f" (line {self.line})" if self.line is not None else ""
        return f"Could not read {self.section}{where}: expected {self.expected}"


Draft = BoardDraft | ColumnDraft | CardDraft

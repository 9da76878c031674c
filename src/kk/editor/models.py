"""Data models for external edit sessions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kk.templates import ParseFailure


class EditStatus(StrEnum):
    """How an edit session ended."""

    COMMITTED = "committed"
    LAUNCH_FAILED = "launch_failed"
    ABORTED = "aborted"
    PARSE_FAILED = "parse_failed"
    COMMIT_FAILED = "commit_failed"


@dataclass
class EditResult:
    """Result of an edit session.

    Attributes:
        status: How the session ended.
        value: Whatever the commit callback returned (COMMITTED only).
        error: Message for the user when the session did not commit.
        raw_text: The edited text when it was read back but not applied.
        failure: Parse details for PARSE_FAILED.
    """

    status: EditStatus
    value: Any = None
    error: str | None = None
    raw_text: str | None = None
    failure: ParseFailure | None = None

    @property
    def success(self) -> bool:
        return self.status is EditStatus.COMMITTED

    @property
    def recoverable_text(self) -> str | None:
        """Edited text worth offering again on the next edit of the same target."""
        if self.status in (EditStatus.PARSE_FAILED, EditStatus.COMMIT_FAILED):
            return self.raw_text
        return None

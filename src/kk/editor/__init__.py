"""Editor package - blocking round trips through the user's text editor."""

from kk.editor.models import EditResult, EditStatus
from kk.editor.session import ExternalEditSession, spawn_editor

__all__ = [
    "EditResult",
    "EditStatus",
    "ExternalEditSession",
    "spawn_editor",
]

"""TUI package - textual front end over the navigator."""

from kk.tui.app import KanbanApp, key_name

__all__ = ["KanbanApp", "key_name"]

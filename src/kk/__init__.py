"""kk - modal terminal Kanban boards edited through your own $EDITOR."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed kk version."""
    return __version__

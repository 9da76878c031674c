"""External edit session - hand a template to $EDITOR and read it back."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kk.editor.models import EditResult, EditStatus
from kk.logging import truncate_output
from kk.store.exceptions import StoreError
from kk.templates import ParseFailure

if TYPE_CHECKING:
    from collections.abc import Callable

    from kk.templates import Draft

    Launcher = Callable[[list[str]], int]

logger = logging.getLogger("kk.editor")


def spawn_editor(argv: list[str]) -> int:
    """Run the editor in the foreground and wait for it to exit.

    Returns:
        The editor's exit status.
    """
    completed = subprocess.run(argv, check=False)
    return completed.returncode


class ExternalEditSession:
    """Round trip of a template through an external editor.

    Writes the template to a private scratch file, blocks on the editor,
    decodes what comes back and commits it. Every step is gated on the
    previous one: nothing is committed unless the editor exits with status 0
    and the text decodes. The scratch file is removed in every case.
    """

    def __init__(
        self,
        editor_command: str,
        scratch_dir: str | Path | None = None,
        launcher: Launcher | None = None,
    ) -> None:
        """Initialize the session runner.

        Args:
            editor_command: Editor command line, e.g. "vim" or "code --wait".
            scratch_dir: Directory for scratch files (system temp dir if None).
            launcher: Callable running an argv and returning its exit status.
                      Defaults to a blocking ``subprocess.run``; the TUI wraps
                      it so the editor gets the terminal.
        """
        self.editor_command = editor_command
        self.scratch_dir = Path(scratch_dir) if scratch_dir is not None else None
        self.launcher: Launcher = launcher if launcher is not None else spawn_editor

    def build_command(self, path: Path) -> list[str]:
        """Editor argv with the scratch file as the single extra argument."""
        return [*shlex.split(self.editor_command), str(path)]

    def run(
        self,
        template: str,
        decode: Callable[[str], Draft | ParseFailure],
        commit: Callable[[Draft], Any],
    ) -> EditResult:
        """Run one edit session.

        Args:
            template: Text to put in front of the user.
            decode: Parser for the edited text.
            commit: Persists the decoded draft; may raise ``StoreError``.

        Returns:
            EditResult describing how the session ended.
        """
        try:
            path = self._write_scratch(template)
        except OSError as e:
            logger.error("Could not create scratch file: %s", e)
            return EditResult(EditStatus.LAUNCH_FAILED, error=f"Could not create scratch file: {e}")

        try:
            return self._edit(path, decode, commit)
        finally:
            path.unlink(missing_ok=True)

    def _write_scratch(self, template: str) -> Path:
        fd, name = tempfile.mkstemp(prefix="kk-", suffix=".txt", dir=self.scratch_dir)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(template)
        return Path(name)

    def _edit(
        self,
        path: Path,
        decode: Callable[[str], Draft | ParseFailure],
        commit: Callable[[Draft], Any],
    ) -> EditResult:
        try:
            argv = self.build_command(path)
        except ValueError as e:
            return EditResult(EditStatus.LAUNCH_FAILED, error=f"Invalid editor command: {e}")
        if len(argv) < 2:
            return EditResult(EditStatus.LAUNCH_FAILED, error="No editor configured")

        logger.info("Launching editor: %s", argv[0])
        try:
            returncode = self.launcher(argv)
        except FileNotFoundError:
            logger.error("Editor %r not found", argv[0])
            return EditResult(EditStatus.LAUNCH_FAILED, error=f"Editor '{argv[0]}' not found")
        except PermissionError:
            logger.error("Editor %r is not executable", argv[0])
            return EditResult(
                EditStatus.LAUNCH_FAILED, error=f"Editor '{argv[0]}' is not executable"
            )
        except OSError as e:
            logger.error("Failed to launch editor %r: %s", argv[0], e)
            return EditResult(EditStatus.LAUNCH_FAILED, error=f"Failed to launch editor: {e}")

        if returncode != 0:
            logger.info("Editor exited with code %d, discarding edit", returncode)
            return EditResult(
                EditStatus.ABORTED,
                error=f"Editor exited with code {returncode}; nothing was changed",
            )

        try:
            raw_text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.error("Could not read back scratch file: %s", e)
            return EditResult(EditStatus.ABORTED, error=f"Could not read edited text: {e}")

        draft = decode(raw_text)
        if isinstance(draft, ParseFailure):
            logger.warning(
                "Edited text rejected: %s\n%s", draft.message, truncate_output(raw_text)
            )
            return EditResult(
                EditStatus.PARSE_FAILED,
                error=draft.message,
                raw_text=raw_text,
                failure=draft,
            )

        try:
            value = commit(draft)
        except StoreError as e:
            logger.warning("Commit of edited %s failed: %s", type(draft).__name__, e)
            return EditResult(EditStatus.COMMIT_FAILED, error=str(e), raw_text=raw_text)

        logger.debug("Committed edited %s", type(draft).__name__)
        return EditResult(EditStatus.COMMITTED, value=value)

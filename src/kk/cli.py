"""CLI entry point for kk."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from kk import get_version
from kk.config import LOG_LEVELS, ConfigError, Settings, load_settings
from kk.logging import get_logger, setup_logging
from kk.store import KanbanStore, StoreError
from kk.tui import KanbanApp

logger = get_logger("cli")


def fail(message: str) -> NoReturn:
    """Print an error to stderr and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def open_store(settings: Settings) -> KanbanStore:
    try:
        return KanbanStore(settings.database_path)
    except StoreError as e:
        logger.error("Cannot open database %s: %s", settings.database_path, e)
        fail(str(e))


def run_check(store: KanbanStore) -> None:
    """Report order-list problems and exit non-zero if there are any."""
    try:
        problems = store.check_integrity()
    except StoreError as e:
        fail(str(e))
    if not problems:
        click.echo("OK: all boards, columns and cards are consistent")
        return
    for problem in problems:
        click.echo(f"  - {problem}", err=True)
    fail(f"{len(problems)} integrity problem(s) found")


@click.command()
@click.version_option(version=get_version(), prog_name="kk")
@click.option(
    "-d",
    "--database-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file (default: $XDG_DATA_HOME/kk/kk.db)",
)
@click.option(
    "-e",
    "--editor",
    default=None,
    help="Editor command, e.g. 'vim' or 'code --wait' (default: $VISUAL, $EDITOR or vi)",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml (default: $XDG_CONFIG_HOME/kk/config.yaml)",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for kk.log (default: $XDG_STATE_HOME/kk)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: INFO)",
)
@click.option(
    "--check",
    is_flag=True,
    help="Verify that every column and card is listed exactly once, then exit",
)
def main(
    database_path: Path | None,
    editor: str | None,
    config_path: Path | None,
    log_dir: Path | None,
    log_level: str | None,
    check: bool,
) -> None:
    """kk - modal Kanban boards in the terminal.

    Navigate with h/j/k/l, edit titles, bodies and names in your own editor.
    """
    try:
        settings = load_settings(
            database_path=database_path,
            editor=editor,
            log_dir=log_dir,
            log_level=log_level,
            config_path=config_path,
        )
    except ConfigError as e:
        fail(str(e))

    try:
        setup_logging(settings.log_dir, level=settings.log_level)
    except OSError as e:
        fail(f"Cannot write logs to {settings.log_dir}: {e}")
    logger.info(
        "Starting kk %s (database=%s, editor=%r, config=%s)",
        get_version(),
        settings.database_path,
        settings.editor,
        settings.config_path,
    )

    store = open_store(settings)
    try:
        if check:
            run_check(store)
            return

        KanbanApp(store, settings.editor).run()
    finally:
        store.close()
        logger.info("kk exited")

"""Rich renderables for the navigator's view model."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kk.navigation import (
    BoardListView,
    BoardViewModel,
    CardDetailView,
    ColumnView,
    ConfirmView,
    Screen,
    StatusLevel,
    StatusMessage,
)

STATUS_STYLES = {
    StatusLevel.INFO: "cyan",
    StatusLevel.WARNING: "yellow",
    StatusLevel.ERROR: "bold red",
}


def render_board_list(view: BoardListView) -> RenderableType:
    text = Text()
    if not view.names:
        text.append("No boards yet.\n\n", style="bold")
        text.append("Press n to create one.", style="dim")
    for index, name in enumerate(view.names):
        selected = index == view.selected
        prefix = "> " if selected else "  "
        text.append(f"{prefix}{name}\n", style="bold white" if selected else "dim")
    return Panel(text, title="[bold cyan]Boards[/bold cyan]", border_style="cyan", padding=(1, 2))


def render_column(column: ColumnView, moving: bool = False) -> RenderableType:
    text = Text()
    if not column.cards:
        text.append("(empty)", style="dim")
    for card in column.cards:
        if card.selected:
            style = "bold black on yellow" if moving else "bold black on cyan"
        else:
            style = "white"
        marker = " +" if card.has_body else ""
        text.append(f"#{card.number} {card.title}{marker}\n", style=style)
    return Panel(
        text,
        title=Text(column.name, style="bold" if column.selected else ""),
        border_style="bold cyan" if column.selected else "grey50",
        expand=True,
    )


def render_board(model: BoardViewModel) -> RenderableType:
    if not model.columns:
        body: RenderableType = Text("No columns yet. Press a to add one.", style="dim")
    else:
        grid = Table.grid(expand=True, padding=(0, 1))
        for _ in model.columns:
            grid.add_column(ratio=1)
        grid.add_row(*(render_column(column, model.moving) for column in model.columns))
        body = grid
    title = f"[bold cyan]{escape(model.name)}[/bold cyan]"
    if model.moving:
        title += " [yellow](moving card)[/yellow]"
    return Panel(body, title=title, border_style="cyan")


def render_card_detail(view: CardDetailView) -> RenderableType:
    header = Text()
    header.append(f"#{view.number} ", style="dim")
    header.append(view.title, style="bold")
    meta = Text(
        f"{view.column_name}  |  created {view.created_at:%Y-%m-%d %H:%M}  |  "
        f"updated {view.updated_at:%Y-%m-%d %H:%M} UTC",
        style="dim",
    )
    body = Text(view.body) if view.body else Text("No description", style="dim italic")
    return Panel(Group(header, meta, Text(), body), border_style="cyan", padding=(1, 2))


def render_confirm(view: ConfirmView) -> RenderableType:
    text = Text(f"{view.prompt}  ", style="bold")
    text.append(" Yes ", style="bold black on red" if view.yes else "dim")
    text.append(" ")
    text.append(" No ", style="dim" if view.yes else "bold black on cyan")
    return Panel(text, border_style="red")


def render_status(status: StatusMessage | None) -> RenderableType:
    if status is None:
        return Text("")
    return Text(status.text, style=STATUS_STYLES[status.level])


def render_main(screen: Screen) -> RenderableType:
    """Board list or board, with the card detail and delete prompt on top."""
    parts: list[RenderableType] = []
    if screen.card is not None:
        parts.append(render_card_detail(screen.card))
    elif screen.board is not None:
        parts.append(render_board(screen.board))
    elif screen.board_list is not None:
        parts.append(render_board_list(screen.board_list))
    if screen.confirm is not None:
        parts.append(render_confirm(screen.confirm))
    return Group(*parts)

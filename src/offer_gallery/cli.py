"""Command-line interface for browsing the offer catalog."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import GallerySettings
from .logging import configure_logging
from .session import GallerySession
from .viewmodels import ErrorPanelViewModel

load_dotenv()

console = Console()
app = typer.Typer(help="Browse and serve the offer gallery.")


def _print_error(panel: ErrorPanelViewModel) -> None:
    console.print(
        Panel(
            f"{escape(panel.message)}\n\n[dim]{escape(panel.guidance)}[/dim]",
            title=f"[red]{panel.title}",
            border_style="red",
        )
    )


def _print_grid(session: GallerySession, show_urls: bool) -> None:
    grid = session.grid()
    table = Table(title=grid.count_message, show_lines=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("ID", style="dim")
    if show_urls:
        table.add_column("Full view")
    for card, offer in zip(grid.cards, session.catalog.filtered_offers):
        row = [str(card.index + 1), escape(card.name), card.offer_id]
        if show_urls:
            row.append(session.settings.view_url(offer.image_id))
        table.add_row(*row)
    console.print(table)


async def _load(settings: GallerySettings, query: Optional[str]) -> GallerySession:
    session = GallerySession(settings)
    await session.load()
    if query:
        session.apply_search(query)
    return session


@app.command("list")
def list_offers(
    query: Optional[str] = typer.Option(
        None,
        "--query",
        "-q",
        help="Only show offers whose name contains this text (case-insensitive).",
    ),
    show_urls: bool = typer.Option(False, "--urls", help="Include full-view image URLs."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for JSON logs."),
) -> None:
    """List offers in the configured folder."""
    configure_logging(log_level)
    settings = GallerySettings()
    session = asyncio.run(_load(settings, query))
    page = session.page()
    if page.error is not None:
        _print_error(page.error)
        raise typer.Exit(code=1)
    _print_grid(session, show_urls)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", min=1, max=65535),
) -> None:
    """Serve the gallery page and its JSON API."""
    import uvicorn

    from .app import create_app

    settings = GallerySettings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
    )


if __name__ == "__main__":
    app()

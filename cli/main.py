"""Novel scraper CLI, entry-point for all operations.

Usage:
    python cli/main.py --help

Commands:
    scrape    → discover and store new chapters of a novel
    sites     → list supported sites
    novels    → list stored novels
    chapters  → list stored chapters of a novel
    db        → database maintenance
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from novelscraper.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import logging

import typer

from novelscraper.config import settings
from novelscraper.db import get_connection, init_db
from novelscraper.db.chapters import list_chapters
from novelscraper.db.novels import delete_all, get_novel_by_url, list_novels
from novelscraper.errors import NovelProcessingError
from novelscraper.processor import process_novel
from novelscraper.scraper.models import NO_CONTENT_FOUND
from novelscraper.scraper.strategies import build_registry

app = typer.Typer(
    name="novelscraper",
    help="Incremental novel chapter scraper.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at debug level."),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Create the novel store schema; safe to rerun."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Novel store ready at {settings.db_path}")


@db_app.command("clear")
def db_clear(
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt."),
) -> None:
    """Delete every stored novel and chapter."""
    if not yes:
        typer.confirm("Remove all stored novels and chapters?", abort=True)
    conn = get_connection()
    init_db(conn)
    try:
        removed = delete_all(conn)
    finally:
        conn.close()
    typer.echo(f"[db clear] Removed {removed} novel(s).")


# ---------------------------------------------------------------------------
# Scraping
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: str = typer.Argument(..., help="Table-of-contents URL of the novel."),
    latest_only: bool = typer.Option(
        False, "--latest-only", help="Only read the starting listing page."
    ),
) -> None:
    """Fetch and store chapters published since the last run."""
    registry = build_registry(settings.strategies_file)
    conn = get_connection()
    init_db(conn)

    typer.echo(f"[scrape] Processing {url!r} …")
    try:
        result = asyncio.run(
            process_novel(conn, url, registry, get_all_chapters=not latest_only)
        )
    except NovelProcessingError as exc:
        typer.echo(f"[scrape] Failed: {exc}")
        raise typer.Exit(1)
    finally:
        conn.close()

    if result is None:
        typer.echo(f"[scrape] Unsupported site: {url!r}")
        raise typer.Exit(1)

    novel = result.novel
    empty = sum(1 for c in result.chapters if c.content == NO_CONTENT_FOUND)
    typer.echo(f"[scrape] Title    : {novel.title or '(none)'}")
    typer.echo(f"[scrape] Author   : {novel.author or '(none)'}")
    typer.echo(f"[scrape] Status   : {novel.status or '(unknown)'}")
    typer.echo(f"[scrape] Pages    : {novel.last_page}")
    typer.echo(f"[scrape] Fetched  : {len(result.chapters)} chapter(s), {empty} without content")
    typer.echo(f"[scrape] Saved    : {result.new_chapter_count} new chapter(s)")


@app.command("sites")
def sites() -> None:
    """List the sites a strategy is registered for."""
    registry = build_registry(settings.strategies_file)
    for authority, strategy in registry.items():
        typer.echo(f"  {authority}  [{strategy.name}]")


# ---------------------------------------------------------------------------
# Stored data
# ---------------------------------------------------------------------------
@app.command("novels")
def novels() -> None:
    """List stored novels."""
    conn = get_connection()
    init_db(conn)
    stored = list_novels(conn)
    conn.close()
    if not stored:
        typer.echo("[novels] No novels stored.")
        return
    for n in stored:
        state = "completed" if n.is_completed else "ongoing"
        typer.echo(f"  {n.title!r}  [{state}]  {n.url}")


@app.command("chapters")
def chapters(
    url: str = typer.Argument(..., help="Table-of-contents URL of the novel."),
) -> None:
    """List stored chapters of a novel in discovery order."""
    conn = get_connection()
    init_db(conn)
    try:
        novel = get_novel_by_url(conn, url)
        if novel is None:
            typer.echo(f"[chapters] Novel not found: {url!r}")
            raise typer.Exit(1)
        stored = list_chapters(conn, novel.id)
    finally:
        conn.close()

    if not stored:
        typer.echo(f"[chapters] No chapters stored for {novel.title!r}.")
        return
    for c in stored:
        marker = "" if c.content != NO_CONTENT_FOUND else "  (no content)"
        typer.echo(f"  {c.number:>5}  {c.title}{marker}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()

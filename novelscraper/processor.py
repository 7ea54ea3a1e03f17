"""One processing run for one novel.

``process_novel`` orchestrates the full pipeline from a table-of-contents URL
to stored chapters:

    resolve strategy → read resume marker → assemble novel → fetch chapters → store
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

from novelscraper.db.chapters import get_last_saved_chapter_url, upsert_chapters
from novelscraper.db.novels import get_novel_by_url, upsert_novel
from novelscraper.errors import (
    FetchError,
    FetchExhaustedError,
    NovelProcessingError,
    PaginationParseError,
    UnsupportedSiteError,
)
from novelscraper.scraper.assembler import assemble_novel
from novelscraper.scraper.chapters import fetch_chapters
from novelscraper.scraper.fetcher import FetchContext
from novelscraper.scraper.models import ChapterRecord, NovelRecord
from novelscraper.scraper.strategies import StrategyRegistry

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    novel: NovelRecord
    novel_id: str
    chapters: list[ChapterRecord] = field(default_factory=list)
    new_chapter_count: int = 0


async def process_novel(
    conn: sqlite3.Connection,
    url: str,
    registry: StrategyRegistry,
    get_all_chapters: bool = True,
    ctx: Optional[FetchContext] = None,
) -> Optional[ProcessResult]:
    """Discover, fetch and store the chapters of the novel at *url* not yet saved.

    A novel seen for the first time is walked from listing page 1.  A known
    novel resumes from the listing page where its last saved chapter was
    found, keeping only chapters after that one.

    Args:
        conn: Open, initialised DB connection.
        url: Table-of-contents URL of the novel.
        registry: Site strategies to resolve *url* against.
        get_all_chapters: When false only the starting listing page is read.
        ctx: Fetch context to reuse; a fresh one is opened when omitted.

    Returns:
        The run's :class:`ProcessResult`, or ``None`` when the site is not
        supported.

    Raises:
        NovelProcessingError: The novel page or its pagination could not be read.
    """
    try:
        strategy = registry.resolve(url)
    except UnsupportedSiteError as exc:
        logger.warning("Skipping %s: %s", url, exc)
        return None

    stored = get_novel_by_url(conn, url)
    resume_marker = get_last_saved_chapter_url(conn, url)
    # Without a marker there is nothing to resume after, so walk everything again.
    if stored is not None and resume_marker and stored.resume_page > 0:
        start_page = stored.resume_page
    else:
        start_page = 1
    if stored is None:
        logger.info("New novel %s; walking table of contents from page 1", url)
    else:
        logger.info(
            "Updating %s from page %d after %s", url, start_page, resume_marker or "(no chapters)"
        )

    owns_ctx = ctx is None
    ctx = ctx or FetchContext()
    try:
        novel = await assemble_novel(
            ctx,
            url,
            strategy,
            resume_marker=resume_marker,
            get_all_chapters=get_all_chapters,
            start_page=start_page,
        )
        chapters = await fetch_chapters(ctx, novel.chapter_urls, strategy)
    except (FetchError, FetchExhaustedError, PaginationParseError) as exc:
        logger.error("Exception when trying to process novel %s: %s", url, exc)
        raise NovelProcessingError(url, exc) from exc
    finally:
        if owns_ctx:
            await ctx.aclose()

    saved = upsert_novel(conn, novel)
    new_count = upsert_chapters(conn, saved.id, chapters)
    logger.info("Saved %d new chapter(s) for %s", new_count, novel.title or url)

    return ProcessResult(
        novel=novel,
        novel_id=saved.id,
        chapters=chapters,
        new_chapter_count=new_count,
    )

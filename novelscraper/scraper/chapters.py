"""Concurrent chapter retrieval.

Chapters are fetched as independent tasks.  Each task holds one slot of the
context's semaphore from just before its request until its extraction is
done, so at most ``ctx.max_concurrency`` chapter pages are in flight.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import List

from novelscraper.scraper.extractor import extract_chapter
from novelscraper.scraper.fetcher import FetchContext, load_document
from novelscraper.scraper.models import ChapterRecord, SiteStrategy

logger = logging.getLogger(__name__)


async def fetch_chapter(ctx: FetchContext, url: str, strategy: SiteStrategy) -> ChapterRecord:
    """Fetch and extract one chapter.  Never raises for fetch or parse errors.

    A failed chapter comes back with an empty title and the sentinel body.
    """
    async with ctx.semaphore:
        started = time.perf_counter()
        try:
            logger.info("Navigating to %s", url)
            doc = await load_document(ctx, url)
            logger.info(
                "Finished navigating to %s. Time taken: %d ms",
                url, (time.perf_counter() - started) * 1000,
            )
            return extract_chapter(doc, strategy, url)
        except Exception as exc:
            logger.error("Error while getting chapter %s: %s", url, exc)
            return ChapterRecord(url=url)


async def fetch_chapters(
    ctx: FetchContext,
    urls: List[str],
    strategy: SiteStrategy,
) -> List[ChapterRecord]:
    """Fetch every URL in *urls*; the result has one record per URL, in input order."""
    if not urls:
        return []

    logger.info("Getting chapters data for %d chapter(s)", len(urls))
    chapters = await asyncio.gather(*(fetch_chapter(ctx, url, strategy) for url in urls))
    missing = sum(1 for chapter in chapters if not chapter.has_content)
    logger.info(
        "Finished getting chapters data (%d without content)", missing,
    )
    return list(chapters)

"""Table-of-contents pagination.

The walk has three phases:

1. Probe: read the last listing page index from the novel page.
2. Walk: load listing pages ``start_page..last_page`` one at a time and keep
   the chapter links that come after the resume marker.
3. Done: return the new chapter URLs, the last listing page URL and the page
   the next run should resume from.

Listing pages are walked strictly in order; each page decides which links
are new from the resume marker and its position relative to ``start_page``.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from novelscraper.errors import FetchError, FetchExhaustedError, PaginationParseError
from novelscraper.scraper.extractor import chapter_links, select_attribute, select_text
from novelscraper.scraper.fetcher import FetchContext, load_document
from novelscraper.scraper.models import Document, SiteStrategy, TocResult
from novelscraper.scraper.urls import absolute_url, alternate_metadata_uri, page_url

logger = logging.getLogger(__name__)


def discover_last_page(doc: Document, strategy: SiteStrategy) -> int:
    """Return the last listing page index advertised on *doc*, offset applied.

    Raises:
        PaginationParseError: The last-page node is missing or not a number.
    """
    sel = strategy.selectors
    logger.info("Getting last table of contents page number at %s", sel.last_page_link)

    if sel.last_page_attribute:
        raw = select_attribute(doc, sel.last_page_link, sel.last_page_attribute)
    else:
        raw = select_text(doc, sel.last_page_link)

    if raw is None:
        raise PaginationParseError(doc.url, sel.last_page_link, None)
    try:
        last_page = int(raw.replace(",", ""))
    except ValueError as exc:
        raise PaginationParseError(doc.url, sel.last_page_link, raw) from exc

    logger.info("Last table of contents page number is %s", raw)
    return last_page + strategy.page_offset


def select_new_chapters(
    hrefs: List[str],
    base_uri: str,
    resume_marker: str,
    is_page_new: bool,
) -> List[str]:
    """Absolute chapter URLs from one listing page that postdate *resume_marker*.

    With no marker every link is kept.  With a marker, links up to and
    including its first occurrence are dropped.  On a page past the start
    page every link except the marker itself is kept.
    """
    marker = absolute_url(base_uri, resume_marker) if resume_marker else ""
    found_marker = not marker
    new_urls: List[str] = []

    for href in hrefs:
        url = absolute_url(base_uri, href)
        if not found_marker and url == marker:
            found_marker = True
        elif found_marker or is_page_new:
            new_urls.append(url)

    return new_urls


async def paginate(
    ctx: FetchContext,
    toc_uri: str,
    strategy: SiteStrategy,
    resume_marker: str = "",
    get_all_chapters: bool = True,
    start_page: int = 1,
    probe_document: Optional[Document] = None,
) -> TocResult:
    """Walk the table of contents at *toc_uri* and collect new chapter URLs.

    Args:
        ctx: Fetch context for this run.
        toc_uri: URL of the chapter index (page templates are appended to it).
        strategy: Rules for the site hosting *toc_uri*.
        resume_marker: URL of the last chapter the caller already has.
        get_all_chapters: When false, stop after the start page.
        start_page: First listing page to walk.
        probe_document: Already-loaded page to read the last page index from.
            When omitted it is loaded from *toc_uri*, or from its parent when
            the site keeps novel metadata on a separate page.

    Raises:
        PaginationParseError: The last page index could not be read.
        FetchError, FetchExhaustedError: The probe page could not be loaded.
    """
    if probe_document is None:
        probe_uri = (
            alternate_metadata_uri(toc_uri)
            if strategy.novel_info_on_different_page
            else toc_uri
        )
        probe_document = await load_document(ctx, probe_uri)

    last_page = discover_last_page(probe_document, strategy)
    chapter_urls: List[str] = []
    # Last page of the unbroken walk that yielded new links; the next run starts there.
    resume_page = start_page
    interrupted = False

    for page in range(start_page, last_page + 1):
        url = page_url(toc_uri, strategy, page)
        is_page_new = page > start_page
        try:
            logger.info("Navigating to %s", url)
            doc = await load_document(ctx, url)
            found = select_new_chapters(
                chapter_links(doc, strategy), toc_uri, resume_marker, is_page_new
            )
            logger.info("Found %d new chapter(s) on page %d", len(found), page)
            chapter_urls.extend(found)
            if found and not interrupted:
                resume_page = page

            if not get_all_chapters and not is_page_new:
                break
        except (FetchError, FetchExhaustedError) as exc:
            logger.error("Error occurred while navigating to %s: %s", url, exc)
            interrupted = True

    return TocResult(
        chapter_urls=chapter_urls,
        last_page=last_page,
        last_page_url=page_url(toc_uri, strategy, last_page),
        resume_page=resume_page,
    )

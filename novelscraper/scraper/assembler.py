"""Novel assembly: pagination plus metadata extraction into one record."""

from __future__ import annotations

import dataclasses
import logging

from novelscraper.scraper.extractor import extract_novel_metadata
from novelscraper.scraper.fetcher import FetchContext, load_document
from novelscraper.scraper.models import NovelRecord, SiteStrategy
from novelscraper.scraper.paginator import paginate
from novelscraper.scraper.urls import absolute_url, alternate_metadata_uri

logger = logging.getLogger(__name__)


async def assemble_novel(
    ctx: FetchContext,
    uri: str,
    strategy: SiteStrategy,
    resume_marker: str = "",
    get_all_chapters: bool = True,
    start_page: int = 1,
) -> NovelRecord:
    """Build the complete :class:`NovelRecord` for the novel at *uri*.

    The novel page is loaded once and used both for metadata and for the
    last-page probe.  Every URL field of the result is absolute.

    Raises:
        FetchError, FetchExhaustedError: The novel page could not be loaded.
        PaginationParseError: The last listing page could not be read.
    """
    logger.info("Getting novel data for %s", uri)

    metadata_uri = (
        alternate_metadata_uri(uri) if strategy.novel_info_on_different_page else uri
    )
    doc = await load_document(ctx, metadata_uri)

    toc = await paginate(
        ctx,
        uri,
        strategy,
        resume_marker=resume_marker,
        get_all_chapters=get_all_chapters,
        start_page=start_page,
        probe_document=doc,
    )
    logger.info(
        "Found %d new chapter(s) across %d listing page(s)", len(toc.chapter_urls), toc.last_page
    )

    draft = extract_novel_metadata(doc, strategy)
    return dataclasses.replace(
        draft,
        url=uri,
        thumbnail_url=absolute_url(uri, draft.thumbnail_url),
        last_table_of_contents_url=toc.last_page_url,
        last_page=toc.last_page,
        resume_page=toc.resume_page,
        first_chapter_url=absolute_url(uri, draft.first_chapter_url),
        latest_chapter_url=absolute_url(uri, draft.latest_chapter_url),
        chapter_urls=list(toc.chapter_urls),
    )

"""Field extraction: pulls single semantic fields out of a :class:`Document`.

Single-field helpers return ``None`` (or ``[]``) when nothing matches; a
missing field is an expected outcome, logged at debug level, never an error.
The aggregate :func:`extract_novel_metadata` absorbs failures field by field.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from novelscraper.scraper.models import (
    NO_CONTENT_FOUND,
    ChapterRecord,
    Document,
    NovelRecord,
    SiteStrategy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A chapter with fewer body paragraphs than this triggers the alternate selector.
MIN_PARAGRAPHS = 5
# A joined body with fewer line breaks than this is replaced by the sentinel.
MIN_LINE_BREAKS = 5


# ---------------------------------------------------------------------------
# Single-field helpers
# ---------------------------------------------------------------------------

def select_text(doc: Document, selector: str) -> Optional[str]:
    """Trimmed text of the first node matching *selector*, or ``None``."""
    if not selector:
        return None
    node = doc.soup.select_one(selector)
    if node is None:
        logger.debug("No node matched %r on %s", selector, doc.url)
        return None
    return node.get_text().strip()


def select_texts(doc: Document, selector: str) -> List[str]:
    """Trimmed text of every node matching *selector*, in document order."""
    if not selector:
        return []
    nodes = doc.soup.select(selector)
    if not nodes:
        logger.debug("No nodes matched %r on %s", selector, doc.url)
    return [node.get_text().strip() for node in nodes]


def select_attribute(doc: Document, selector: str, attribute: str) -> Optional[str]:
    """Value of *attribute* on the first node matching *selector*, or ``None``."""
    if not selector:
        return None
    node = doc.soup.select_one(selector)
    if node is None or node.get(attribute) is None:
        logger.debug("No %r attribute found at %r on %s", attribute, selector, doc.url)
        return None
    value = node.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip()


def select_attributes(doc: Document, selector: str, attribute: str) -> List[str]:
    """Values of *attribute* on every matching node that carries it."""
    if not selector:
        return []
    values: List[str] = []
    for node in doc.soup.select(selector):
        value = node.get(attribute)
        if value is None:
            continue
        if isinstance(value, list):
            value = " ".join(value)
        values.append(value.strip())
    if not values:
        logger.debug("No %r attributes found at %r on %s", attribute, selector, doc.url)
    return values


def chapter_links(doc: Document, strategy: SiteStrategy) -> List[str]:
    """Raw ``href`` values of the chapter list, in on-page order."""
    return [href for href in select_attributes(doc, strategy.selectors.chapter_links, "href") if href]


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

def parse_rating(text: Optional[str]) -> Optional[float]:
    if text is None or not text.strip():
        return None
    return float(text.strip().replace(",", "."))


def is_completed(status: str, completed_token: str) -> bool:
    return bool(completed_token) and completed_token.lower() in (status or "").lower()


def needs_alternate_content(primary_count: int) -> bool:
    return primary_count < MIN_PARAGRAPHS


def prefer_alternate_content(primary_count: int, alternate_count: int) -> bool:
    """Use the alternate body only when the primary is thin and the alternate is larger."""
    return needs_alternate_content(primary_count) and alternate_count > primary_count


def finalize_content(paragraphs: List[str]) -> str:
    """Join paragraphs with newlines, or return the sentinel if the result is too thin."""
    content = "\n".join(paragraphs)
    if not content.strip() or content.count("\n") < MIN_LINE_BREAKS:
        return NO_CONTENT_FOUND
    return content


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def _field(name: str, url: str, extract: Callable[[], T], default: T) -> T:
    try:
        return extract()
    except Exception as exc:
        logger.error("Error extracting %s from %s: %s", name, url, exc)
        return default


def _description(doc: Document, selector: str) -> List[str]:
    paragraphs = select_texts(doc, selector)
    if paragraphs and not any(paragraphs):
        # Some sites keep the synopsis in a social-metadata tag.
        content = select_attribute(doc, selector, "content")
        return [content] if content else []
    return paragraphs


def extract_novel_metadata(doc: Document, strategy: SiteStrategy) -> NovelRecord:
    """Build a :class:`NovelRecord` from a novel page.

    URL fields are returned exactly as they appear in the markup; the
    assembler makes them absolute.  ``chapter_urls`` is left empty.
    """
    sel = strategy.selectors
    url = doc.url

    status = _field("status", url, lambda: select_text(doc, sel.novel_status) or "", "")

    return NovelRecord(
        url=url,
        title=_field("title", url, lambda: select_text(doc, sel.novel_title) or "", ""),
        author=_field("author", url, lambda: select_text(doc, sel.novel_author) or "", ""),
        rating=_field(
            "rating", url, lambda: parse_rating(select_text(doc, sel.novel_rating)), None
        ),
        description=_field("description", url, lambda: _description(doc, sel.novel_description), []),
        genres=_field(
            "genres", url, lambda: [g for g in select_texts(doc, sel.novel_genres) if g], []
        ),
        alternative_names=_field(
            "alternative names",
            url,
            lambda: [n for n in select_texts(doc, sel.novel_alternative_names) if n],
            [],
        ),
        status=status,
        is_completed=is_completed(status, strategy.completed_status),
        thumbnail_url=_field(
            "thumbnail", url, lambda: select_attribute(doc, sel.novel_thumbnail, "src") or "", ""
        ),
        last_table_of_contents_url=_field(
            "last page link", url, lambda: select_attribute(doc, sel.last_page_link, "href") or "", ""
        ),
        first_chapter_url=_field(
            "first chapter", url, lambda: select_attribute(doc, sel.chapter_links, "href") or "", ""
        ),
        latest_chapter_url=_field(
            "latest chapter", url, lambda: select_attribute(doc, sel.latest_chapter_link, "href") or "", ""
        ),
        latest_chapter_title=_field(
            "latest chapter title", url, lambda: select_text(doc, sel.latest_chapter_link) or "", ""
        ),
    )


def extract_chapter(doc: Document, strategy: SiteStrategy, url: str) -> ChapterRecord:
    """Pull the title and body of one chapter page."""
    sel = strategy.selectors

    title = select_text(doc, sel.chapter_title) or ""
    logger.debug("Chapter title: %s", title)

    paragraphs = select_texts(doc, sel.chapter_content)
    if needs_alternate_content(len(paragraphs)):
        logger.warning(
            "Only %d paragraphs at %s; trying alternative selector", len(paragraphs), url
        )
        alternate = select_texts(doc, sel.alternative_chapter_content)
        logger.info("Alternate paragraphs count: %d", len(alternate))
        if prefer_alternate_content(len(paragraphs), len(alternate)):
            logger.info("Using alternate paragraphs for %s", url)
            paragraphs = alternate

    content = finalize_content(paragraphs)
    if content == NO_CONTENT_FOUND:
        logger.debug("No content found for %s", url)

    return ChapterRecord(url=url, title=title, content=content)

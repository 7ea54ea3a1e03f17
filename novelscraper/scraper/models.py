"""Data models for the scraper pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup

NO_CONTENT_FOUND = "No content found"

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class Selectors:
    """CSS selectors describing where each field lives in a site's markup.

    An empty string means the site does not publish that field.
    """

    novel_title: str
    novel_author: str = ""
    novel_rating: str = ""
    novel_description: str = ""
    novel_genres: str = ""
    novel_alternative_names: str = ""
    novel_status: str = ""
    novel_thumbnail: str = ""
    latest_chapter_link: str = ""
    chapter_links: str = ""
    chapter_title: str = ""
    chapter_content: str = ""
    alternative_chapter_content: str = ""
    last_page_link: str = ""
    last_page_attribute: str = ""


@dataclass(frozen=True)
class SiteStrategy:
    """Extraction rules and pagination parameters for one source host."""

    name: str
    selectors: Selectors
    pagination_template: str = "?page={page}"
    page_offset: int = 0
    completed_status: str = "completed"
    novel_info_on_different_page: bool = False


@dataclass
class Document:
    """A fetched page parsed into a queryable tree."""

    url: str
    status_code: int
    soup: BeautifulSoup

    @classmethod
    def parse(cls, url: str, html: str, status_code: int = 200) -> "Document":
        # html.parser is lenient; malformed markup still yields a tree.
        return cls(url=url, status_code=status_code, soup=BeautifulSoup(html, "html.parser"))


@dataclass(frozen=True)
class NovelRecord:
    """Metadata for one novel plus the chapter URLs discovered on this run."""

    url: str
    title: str = ""
    author: str = ""
    rating: Optional[float] = None
    description: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    alternative_names: List[str] = field(default_factory=list)
    status: str = ""
    is_completed: bool = False
    thumbnail_url: str = ""
    last_table_of_contents_url: str = ""
    last_page: int = 0
    resume_page: int = 0
    first_chapter_url: str = ""
    latest_chapter_url: str = ""
    latest_chapter_title: str = ""
    chapter_urls: List[str] = field(default_factory=list)


@dataclass
class ChapterRecord:
    url: str
    title: str = ""
    content: str = NO_CONTENT_FOUND
    retrieved_at: datetime = field(default_factory=datetime.now)

    @property
    def number(self) -> int:
        """First run of digits in the title, or 0 when the title has none."""
        match = _DIGITS.search(self.title or "")
        return int(match.group(0)) if match else 0

    @property
    def has_content(self) -> bool:
        return self.content != NO_CONTENT_FOUND


@dataclass
class TocResult:
    """Outcome of a table-of-contents walk."""

    chapter_urls: List[str]
    last_page: int
    last_page_url: str
    resume_page: int = 1

"""Scraper package: strategies, document loading, extraction and pagination."""

from novelscraper.scraper.assembler import assemble_novel
from novelscraper.scraper.chapters import fetch_chapters
from novelscraper.scraper.fetcher import FetchContext, load_document
from novelscraper.scraper.models import (
    NO_CONTENT_FOUND,
    ChapterRecord,
    Document,
    NovelRecord,
    Selectors,
    SiteStrategy,
)
from novelscraper.scraper.paginator import paginate
from novelscraper.scraper.strategies import StrategyRegistry, build_registry

__all__ = [
    "assemble_novel",
    "fetch_chapters",
    "paginate",
    "load_document",
    "FetchContext",
    "StrategyRegistry",
    "build_registry",
    "Selectors",
    "SiteStrategy",
    "Document",
    "NovelRecord",
    "ChapterRecord",
    "NO_CONTENT_FOUND",
]

"""Site strategies and the authority → strategy registry.

A strategy is pure data (see :class:`~novelscraper.scraper.models.SiteStrategy`).
The registry is populated once at startup and only read afterwards.
Lookup is an exact match on ``scheme://host[:port]``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple
from urllib.parse import urlsplit

from novelscraper.errors import DuplicateStrategyError, UnsupportedSiteError
from novelscraper.scraper.models import Selectors, SiteStrategy

logger = logging.getLogger(__name__)


def authority_of(uri: str) -> str:
    """Return ``scheme://host[:port]`` for *uri*, without user info."""
    parts = urlsplit(uri.strip())
    host = (parts.hostname or "").lower()
    authority = f"{parts.scheme.lower()}://{host}"
    if parts.port is not None:
        authority += f":{parts.port}"
    return authority


class StrategyRegistry:
    """Capability lookup table keyed by site authority."""

    def __init__(self) -> None:
        self._strategies: Dict[str, SiteStrategy] = {}

    def register(self, authority: str, strategy: SiteStrategy) -> None:
        key = authority_of(authority)
        if key in self._strategies:
            raise DuplicateStrategyError(key)
        self._strategies[key] = strategy

    def resolve(self, uri: str) -> SiteStrategy:
        """Return the strategy registered for the authority of *uri*.

        Raises:
            UnsupportedSiteError: No strategy is registered for that authority.
        """
        key = authority_of(uri)
        strategy = self._strategies.get(key)
        if strategy is None:
            raise UnsupportedSiteError(key)
        return strategy

    def __contains__(self, uri: str) -> bool:
        return authority_of(uri) in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)

    def items(self) -> Iterator[Tuple[str, SiteStrategy]]:
        return iter(sorted(self._strategies.items()))


# ---------------------------------------------------------------------------
# Built-in strategies
# ---------------------------------------------------------------------------

NOVELFULL = SiteStrategy(
    name="novelfull",
    selectors=Selectors(
        novel_title="div.col-info-desc h3.title",
        novel_author="div.info a[href*='/author/']",
        novel_rating="span[itemprop='ratingValue']",
        novel_description="div.desc-text p",
        novel_genres="div.info a[href*='/genre/']",
        novel_alternative_names="",
        novel_status="div.info a[href*='/status/']",
        novel_thumbnail="div.book img",
        latest_chapter_link="ul.l-chapters li a",
        chapter_links="ul.list-chapter li a",
        chapter_title="a.chapter-title",
        chapter_content="div#chapter-content p",
        alternative_chapter_content="div#chapter-content div",
        last_page_link="ul.pagination li.last a",
        last_page_attribute="data-page",
    ),
    pagination_template="?page={page}",
    # data-page is zero based
    page_offset=1,
    completed_status="completed",
)

WEBNOVELPUB = SiteStrategy(
    name="webnovelpub",
    selectors=Selectors(
        novel_title="h1.novel-title",
        novel_author="div.author span[itemprop='author']",
        novel_rating="div.rating-star strong",
        novel_description="meta[itemprop='description']",
        novel_genres="div.categories ul li a",
        novel_alternative_names="div.main-head h2.alternative-title",
        novel_status="div.header-stats span:nth-of-type(4) strong",
        novel_thumbnail="figure.cover img",
        latest_chapter_link="div.body a.chapter-latest-container",
        chapter_links="ul.chapter-list li a",
        chapter_title="span.chapter-title",
        chapter_content="div#chapter-container p",
        alternative_chapter_content="div#chapter-container div",
        last_page_link="ul.pagination li:nth-last-child(2) a",
        last_page_attribute="",
    ),
    pagination_template="/page-{page}",
    page_offset=0,
    completed_status="completed",
    novel_info_on_different_page=True,
)

BUILTIN_STRATEGIES: Dict[str, SiteStrategy] = {
    "https://novelfull.com": NOVELFULL,
    "https://www.webnovelpub.com": WEBNOVELPUB,
}


# ---------------------------------------------------------------------------
# Strategy file loading
# ---------------------------------------------------------------------------

def _strategy_from_dict(authority: str, raw: Dict[str, Any]) -> SiteStrategy:
    selectors = raw.get("selectors")
    if not isinstance(selectors, dict) or "novel_title" not in selectors:
        raise ValueError(f"Strategy for {authority!r} needs a 'selectors' map with 'novel_title'")
    return SiteStrategy(
        name=str(raw.get("name") or urlsplit(authority).hostname or authority),
        selectors=Selectors(**selectors),
        pagination_template=str(raw.get("pagination_template", "?page={page}")),
        page_offset=int(raw.get("page_offset", 0)),
        completed_status=str(raw.get("completed_status", "completed")).lower(),
        novel_info_on_different_page=bool(raw.get("novel_info_on_different_page", False)),
    )


def load_strategies(path: Path) -> Dict[str, SiteStrategy]:
    """Read ``{authority: {...}}`` strategy definitions from a JSON file.

    Raises:
        ValueError: If the file is not a JSON object or an entry is malformed.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object keyed by site authority")
    return {authority: _strategy_from_dict(authority, raw) for authority, raw in data.items()}


def build_registry(strategies_file: Optional[Path] = None) -> StrategyRegistry:
    """Register the built-in strategies, then any from *strategies_file*."""
    registry = StrategyRegistry()
    for authority, strategy in BUILTIN_STRATEGIES.items():
        registry.register(authority, strategy)

    if strategies_file is not None:
        for authority, strategy in load_strategies(strategies_file).items():
            registry.register(authority, strategy)
        logger.info("Loaded site strategies from %s", strategies_file)

    return registry

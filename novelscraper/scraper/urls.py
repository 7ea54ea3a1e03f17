"""URL helpers shared by the paginator and the assembler."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from novelscraper.scraper.models import SiteStrategy
from novelscraper.scraper.strategies import authority_of


def absolute_url(base_uri: str, href: str) -> str:
    """Resolve *href* against the authority of *base_uri*.

    Relative links are taken from the site root, matching how listing pages
    link their chapters.  Already-absolute links are returned unchanged.
    """
    href = (href or "").strip()
    if not href:
        return ""
    return urljoin(authority_of(base_uri) + "/", href)


def page_url(toc_uri: str, strategy: SiteStrategy, page: int) -> str:
    """Listing page *page* of the table of contents at *toc_uri*."""
    suffix = strategy.pagination_template.format(page=page)
    if suffix.startswith("/"):
        return toc_uri.rstrip("/") + suffix
    return toc_uri + suffix


def alternate_metadata_uri(uri: str) -> str:
    """Drop the last path segment of *uri* (``/novel/x/chapters`` → ``/novel/x/``)."""
    path = urlsplit(uri).path
    trimmed = path[:-1] if path.endswith("/") else path
    parent = trimmed[: trimmed.rfind("/") + 1] or "/"
    return authority_of(uri) + parent

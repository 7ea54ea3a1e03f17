"""Exception hierarchy for the scraping pipeline.

Field-level "not found" results are never exceptions; extractors return
``None`` or an empty list instead.  Everything here is either recoverable by
the caller (``UnsupportedSiteError``) or escalates a failed fetch/parse.
"""

from __future__ import annotations

from typing import Optional


class NovelScraperError(Exception):
    """Base class for all project errors."""


class DuplicateStrategyError(NovelScraperError):
    def __init__(self, authority: str) -> None:
        super().__init__(f"A strategy is already registered for {authority!r}")
        self.authority = authority


class UnsupportedSiteError(NovelScraperError):
    def __init__(self, authority: str) -> None:
        super().__init__(f"No scraper strategy found for {authority!r}")
        self.authority = authority


class FetchError(NovelScraperError):
    """A request failed with a non-retryable status, or at the transport level.

    ``status`` is ``None`` when no HTTP response was received at all.
    """

    def __init__(self, uri: str, status: Optional[int], reason: str = "") -> None:
        detail = f"HTTP {status}" if status is not None else (reason or "transport error")
        super().__init__(f"Failed to load {uri}: {detail}")
        self.uri = uri
        self.status = status
        self.reason = reason


class FetchExhaustedError(NovelScraperError):
    def __init__(self, uri: str, attempts: int) -> None:
        super().__init__(
            f"Failed to load HTML document from {uri} after {attempts} attempts."
        )
        self.uri = uri
        self.attempts = attempts


class PaginationParseError(NovelScraperError):
    """The last listing page number could not be found or parsed."""

    def __init__(self, uri: str, selector: str, raw_value: Optional[str]) -> None:
        super().__init__(
            f"Could not parse last table of contents page from {uri} "
            f"(selector={selector!r}, value={raw_value!r})"
        )
        self.uri = uri
        self.selector = selector
        self.raw_value = raw_value


class NovelProcessingError(NovelScraperError):
    """Single aggregated error for a novel whose processing failed outright."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"Processing failed for {url}: {cause}")
        self.url = url
        self.cause = cause

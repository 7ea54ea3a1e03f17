"""Incremental novel scraper: paginated chapter discovery and concurrent extraction."""

__version__ = "0.1.0"

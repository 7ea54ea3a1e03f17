"""Command-line interface for the novel scraper."""

"""Tests for the site strategy registry and strategy file loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from novelscraper.errors import DuplicateStrategyError, UnsupportedSiteError
from novelscraper.scraper.models import Selectors, SiteStrategy
from novelscraper.scraper.strategies import (
    NOVELFULL,
    StrategyRegistry,
    authority_of,
    build_registry,
    load_strategies,
)


def _strategy(name: str = "example") -> SiteStrategy:
    return SiteStrategy(name=name, selectors=Selectors(novel_title="h1"))


class TestAuthorityOf:
    def test_drops_path_and_query(self) -> None:
        assert authority_of("https://novelfull.com/some-novel.html?page=3") == "https://novelfull.com"

    def test_keeps_port(self) -> None:
        assert authority_of("http://localhost:8080/novel/x") == "http://localhost:8080"

    def test_lowercases_scheme_and_host(self) -> None:
        assert authority_of("HTTPS://NovelFull.com/x") == "https://novelfull.com"


class TestStrategyRegistry:
    def test_resolve_returns_registered_strategy(self) -> None:
        registry = StrategyRegistry()
        strategy = _strategy()
        registry.register("https://example.com", strategy)

        assert registry.resolve("https://example.com/novel/abc.html") is strategy

    def test_resolve_is_idempotent(self) -> None:
        registry = StrategyRegistry()
        registry.register("https://example.com", _strategy())

        first = registry.resolve("https://example.com/a")
        second = registry.resolve("https://example.com/b")
        assert first is second

    def test_duplicate_registration_raises(self) -> None:
        registry = StrategyRegistry()
        registry.register("https://example.com", _strategy())

        with pytest.raises(DuplicateStrategyError):
            registry.register("https://example.com/", _strategy("other"))

    def test_unknown_authority_raises(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = StrategyRegistry()
        registry.register("https://example.com", _strategy())

        with pytest.raises(UnsupportedSiteError) as excinfo:
            registry.resolve("https://other.com/novel")
        assert excinfo.value.authority == "https://other.com"
        # Reporting the miss is left to the caller.
        assert caplog.records == []

    def test_lookup_is_exact_not_suffix(self) -> None:
        registry = StrategyRegistry()
        registry.register("https://example.com", _strategy())

        with pytest.raises(UnsupportedSiteError):
            registry.resolve("https://www.example.com/novel")
        with pytest.raises(UnsupportedSiteError):
            registry.resolve("http://example.com/novel")

    def test_port_is_part_of_authority(self) -> None:
        registry = StrategyRegistry()
        registry.register("http://localhost:8080", _strategy())

        assert "http://localhost:8080/x" in registry
        assert "http://localhost/x" not in registry


class TestBuildRegistry:
    def test_builtins_registered(self) -> None:
        registry = build_registry()
        assert registry.resolve("https://novelfull.com/supremacy-games.html") is NOVELFULL
        assert "https://www.webnovelpub.com/novel/x/chapters" in registry

    def test_loads_strategy_file(self, tmp_path: Path) -> None:
        path = tmp_path / "strategies.json"
        path.write_text(
            json.dumps(
                {
                    "https://novels.example.org": {
                        "name": "example",
                        "page_offset": 2,
                        "completed_status": "Finished",
                        "selectors": {
                            "novel_title": "h1.title",
                            "chapter_links": "ul.toc a",
                            "last_page_link": "a.last",
                        },
                    }
                }
            ),
            encoding="utf-8",
        )

        registry = build_registry(path)
        strategy = registry.resolve("https://novels.example.org/book/1")
        assert strategy.name == "example"
        assert strategy.page_offset == 2
        assert strategy.completed_status == "finished"
        assert strategy.selectors.chapter_links == "ul.toc a"
        assert len(registry) == 3

    def test_strategy_file_duplicate_of_builtin_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "strategies.json"
        path.write_text(
            json.dumps({"https://novelfull.com": {"selectors": {"novel_title": "h3"}}}),
            encoding="utf-8",
        )
        with pytest.raises(DuplicateStrategyError):
            build_registry(path)

    def test_entry_without_selectors_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "strategies.json"
        path.write_text(json.dumps({"https://a.example": {"name": "a"}}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_strategies(path)

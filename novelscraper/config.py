"""Runtime settings for the novel scraper.

Each field reads one environment variable and falls back to a default.  A
``.env`` next to the project root is loaded first; variables already set in
the environment take precedence over it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env", override=False)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _optional_path(name: str) -> Optional[Path]:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else None


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("NOVELSCRAPER_WORKSPACE", Path.home() / ".novelscraper")
        ).expanduser()
    )

    @property
    def db_path(self) -> Path:
        return self.workspace_dir / "novels.db"

    @property
    def schema_path(self) -> Path:
        """DDL shipped inside ``novelscraper/db``."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    request_timeout: float = field(default_factory=lambda: _env_float("REQUEST_TIMEOUT", 30.0))
    # Chapter pages in flight at once.
    max_concurrent_fetches: int = field(
        default_factory=lambda: _env_int("MAX_CONCURRENT_FETCHES", 7)
    )
    # Total attempts for a page answering 503, and the pause between them.
    fetch_max_attempts: int = field(default_factory=lambda: _env_int("FETCH_MAX_ATTEMPTS", 3))
    fetch_retry_delay: float = field(default_factory=lambda: _env_float("FETCH_RETRY_DELAY", 5.0))
    user_agent: str = field(
        default_factory=lambda: os.environ.get("SCRAPER_USER_AGENT", _DEFAULT_USER_AGENT)
    )

    # ------------------------------------------------------------------
    # Site strategies
    # ------------------------------------------------------------------
    # JSON file with extra strategies; only the built-ins are used when unset.
    strategies_file: Optional[Path] = field(
        default_factory=lambda: _optional_path("STRATEGIES_FILE")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper())

    def ensure_workspace(self) -> None:
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()

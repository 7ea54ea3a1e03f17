"""Schema creation and versioned upgrades for the novel store.

``init_db`` may run on every start: it applies ``schema.sql`` and then
whatever entries of ``MIGRATIONS`` the ``schema_version`` table has not seen.
"""

from __future__ import annotations

import sqlite3

from novelscraper.config import settings

_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER PRIMARY KEY,
    applied_at  INTEGER DEFAULT (strftime('%s', 'now'))
)
"""

# (version, statement) pairs in ascending version order.
MIGRATIONS: list[tuple[int, str]] = [
    # Listing page the next run starts from; 0 means "walk from page 1".
    (1, "ALTER TABLE novels ADD COLUMN resume_page INTEGER NOT NULL DEFAULT 0"),
]


def init_db(conn: sqlite3.Connection) -> None:
    """Create the novels and chapters tables, then bring them up to date."""
    script = settings.schema_path.read_text(encoding="utf-8")
    # executescript commits any pending transaction before running.
    conn.executescript(script)
    with conn:
        conn.execute(_VERSION_TABLE)
    migrate(conn)


def current_version(conn: sqlite3.Connection) -> int:
    """Highest migration recorded in ``schema_version``, 0 on a fresh store."""
    (version,) = conn.execute("SELECT COALESCE(MAX(version), 0) FROM schema_version").fetchone()
    return version


def migrate(conn: sqlite3.Connection) -> int:
    """Run pending migrations, each in its own transaction.  Returns how many ran."""
    applied = current_version(conn)
    pending = [(version, sql) for version, sql in MIGRATIONS if version > applied]
    for version, sql in pending:
        with conn:
            conn.execute(sql)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
    return len(pending)

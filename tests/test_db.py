"""Tests for the database layer.

All tests use an in-memory SQLite database so they are:
- Fast (no disk I/O)
- Isolated (each fixture gets a fresh DB)
- Side-effect free (nothing written to ~/.novelscraper)
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from novelscraper.db import migrations
from novelscraper.db.chapters import get_last_saved_chapter_url, list_chapters, upsert_chapters
from novelscraper.db.connection import get_connection
from novelscraper.db.migrations import current_version, init_db, migrate
from novelscraper.db.models import StoredNovel
from novelscraper.db.novels import delete_all, get_novel_by_url, list_novels, upsert_novel
from novelscraper.scraper.models import NO_CONTENT_FOUND, ChapterRecord, NovelRecord

_URL = "https://novelfull.com/abc.html"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()


def _novel(**overrides) -> NovelRecord:
    values = dict(
        url=_URL,
        title="Abc",
        author="Jane",
        rating=8.5,
        description=["One.", "Two."],
        genres=["Action"],
        status="Ongoing",
        last_page=3,
        last_table_of_contents_url=f"{_URL}?page=3",
    )
    values.update(overrides)
    return NovelRecord(**values)


def _chapters(*numbers: int) -> list[ChapterRecord]:
    return [
        ChapterRecord(
            url=f"https://novelfull.com/abc/chapter-{n}.html",
            title=f"Chapter {n}",
            content="\n".join(f"line {i}" for i in range(6)),
        )
        for n in numbers
    ]


# ---------------------------------------------------------------------------
# connection / init
# ---------------------------------------------------------------------------

class TestConnection:
    def test_foreign_keys_enabled(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("PRAGMA foreign_keys").fetchone()
        assert row[0] == 1

    def test_wal_mode(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("PRAGMA journal_mode").fetchone()
        # In-memory DBs always return 'memory', on-disk returns 'wal'
        assert row[0] in ("wal", "memory")


class TestInitDb:
    def test_tables_exist(self, conn: sqlite3.Connection) -> None:
        tables = {
            r[0]
            for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        }
        assert {"novels", "chapters", "schema_version"} <= tables

    def test_init_db_applies_every_migration(self, conn: sqlite3.Connection) -> None:
        assert current_version(conn) == len(migrations.MIGRATIONS)
        columns = {r["name"] for r in conn.execute("PRAGMA table_info(novels)").fetchall()}
        assert "resume_page" in columns

    def test_init_db_is_idempotent(self, conn: sqlite3.Connection) -> None:
        # Calling init_db a second time must not raise or reapply migrations
        init_db(conn)
        assert migrate(conn) == 0

    def test_migrate_applies_pending_once(
        self, conn: sqlite3.Connection, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            migrations,
            "MIGRATIONS",
            [*migrations.MIGRATIONS, (2, "ALTER TABLE novels ADD COLUMN language TEXT NOT NULL DEFAULT ''")],
        )
        assert migrate(conn) == 1
        assert migrate(conn) == 0

        assert current_version(conn) == 2
        columns = {r["name"] for r in conn.execute("PRAGMA table_info(novels)").fetchall()}
        assert "language" in columns


# ---------------------------------------------------------------------------
# Novels
# ---------------------------------------------------------------------------

class TestNovels:
    def test_insert_returns_stored_novel(self, conn: sqlite3.Connection) -> None:
        stored = upsert_novel(conn, _novel())
        assert isinstance(stored, StoredNovel)
        assert stored.id  # non-empty UUID
        assert stored.title == "Abc"
        assert stored.rating == 8.5
        assert stored.description == ["One.", "Two."]
        assert stored.genres == ["Action"]
        assert stored.is_completed is False
        assert stored.last_page == 3
        assert stored.resume_page == 0

    def test_update_keeps_id_and_refreshes_fields(self, conn: sqlite3.Connection) -> None:
        first = upsert_novel(conn, _novel())
        second = upsert_novel(conn, _novel(status="Completed", is_completed=True, last_page=4))

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.status == "Completed"
        assert second.is_completed is True
        assert second.last_page == 4
        assert len(list_novels(conn)) == 1

    def test_resume_page_round_trips(self, conn: sqlite3.Connection) -> None:
        upsert_novel(conn, _novel(resume_page=2))
        assert get_novel_by_url(conn, _URL).resume_page == 2

        upsert_novel(conn, _novel(resume_page=3))
        assert get_novel_by_url(conn, _URL).resume_page == 3

    def test_missing_rating_is_stored_as_null(self, conn: sqlite3.Connection) -> None:
        stored = upsert_novel(conn, _novel(rating=None))
        assert stored.rating is None

    def test_get_novel_not_found(self, conn: sqlite3.Connection) -> None:
        assert get_novel_by_url(conn, "https://novelfull.com/missing.html") is None

    def test_list_novels_empty(self, conn: sqlite3.Connection) -> None:
        assert list_novels(conn) == []

    def test_delete_all_cascades_to_chapters(self, conn: sqlite3.Connection) -> None:
        novel = upsert_novel(conn, _novel())
        upsert_chapters(conn, novel.id, _chapters(1, 2))

        assert delete_all(conn) == 1
        assert list_novels(conn) == []
        assert conn.execute("SELECT COUNT(*) FROM chapters").fetchone()[0] == 0


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

class TestChapters:
    def test_chapters_listed_in_discovery_order(self, conn: sqlite3.Connection) -> None:
        novel = upsert_novel(conn, _novel())
        assert upsert_chapters(conn, novel.id, _chapters(3, 1, 2)) == 3

        stored = list_chapters(conn, novel.id)
        assert [c.number for c in stored] == [3, 1, 2]
        assert [c.position for c in stored] == [1, 2, 3]

    def test_new_chapters_are_appended(self, conn: sqlite3.Connection) -> None:
        novel = upsert_novel(conn, _novel())
        upsert_chapters(conn, novel.id, _chapters(1, 2))
        assert upsert_chapters(conn, novel.id, _chapters(3)) == 1

        stored = list_chapters(conn, novel.id)
        assert [c.number for c in stored] == [1, 2, 3]
        assert stored[-1].position == 3

    def test_existing_chapter_is_updated_in_place(self, conn: sqlite3.Connection) -> None:
        novel = upsert_novel(conn, _novel())
        upsert_chapters(conn, novel.id, _chapters(1, 2))
        failed = ChapterRecord(url=_chapters(1)[0].url)

        assert upsert_chapters(conn, novel.id, [failed]) == 0

        stored = list_chapters(conn, novel.id)
        assert len(stored) == 2
        assert stored[0].position == 1
        assert stored[0].content == NO_CONTENT_FOUND
        assert stored[0].title == ""

    def test_last_saved_chapter_url(self, conn: sqlite3.Connection) -> None:
        novel = upsert_novel(conn, _novel())
        upsert_chapters(conn, novel.id, _chapters(1, 2, 3))

        assert get_last_saved_chapter_url(conn, _URL) == "https://novelfull.com/abc/chapter-3.html"

    def test_last_saved_chapter_url_unknown_novel(self, conn: sqlite3.Connection) -> None:
        assert get_last_saved_chapter_url(conn, _URL) == ""

    def test_last_saved_chapter_url_without_chapters(self, conn: sqlite3.Connection) -> None:
        upsert_novel(conn, _novel())
        assert get_last_saved_chapter_url(conn, _URL) == ""

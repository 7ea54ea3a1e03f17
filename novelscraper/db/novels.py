"""CRUD operations for the ``novels`` table."""

from __future__ import annotations

import json
import sqlite3
import uuid
from time import time
from typing import Optional

from novelscraper.db.models import StoredNovel
from novelscraper.scraper.models import NovelRecord


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_novel(row: sqlite3.Row) -> StoredNovel:
    return StoredNovel(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        author=row["author"],
        rating=row["rating"],
        description=json.loads(row["description"] or "[]"),
        genres=json.loads(row["genres"] or "[]"),
        alternative_names=json.loads(row["alternative_names"] or "[]"),
        status=row["status"],
        is_completed=bool(row["is_completed"]),
        thumbnail_url=row["thumbnail_url"],
        last_table_of_contents_url=row["last_table_of_contents_url"],
        last_page=row["last_page"],
        resume_page=row["resume_page"],
        first_chapter_url=row["first_chapter_url"],
        latest_chapter_url=row["latest_chapter_url"],
        latest_chapter_title=row["latest_chapter_title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def upsert_novel(conn: sqlite3.Connection, record: NovelRecord) -> StoredNovel:
    """Insert the novel keyed by ``record.url``, or refresh its metadata.

    The novel id and ``created_at`` are kept on update.
    """
    now = int(time())
    values = {
        "title": record.title,
        "author": record.author,
        "rating": record.rating,
        "description": json.dumps(record.description),
        "genres": json.dumps(record.genres),
        "alternative_names": json.dumps(record.alternative_names),
        "status": record.status,
        "is_completed": int(record.is_completed),
        "thumbnail_url": record.thumbnail_url,
        "last_table_of_contents_url": record.last_table_of_contents_url,
        "last_page": record.last_page,
        "resume_page": record.resume_page,
        "first_chapter_url": record.first_chapter_url,
        "latest_chapter_url": record.latest_chapter_url,
        "latest_chapter_title": record.latest_chapter_title,
    }

    existing = get_novel_by_url(conn, record.url)
    with conn:
        if existing is None:
            columns = ["id", "url", *values, "created_at", "updated_at"]
            params = [str(uuid.uuid4()), record.url, *values.values(), now, now]
            placeholders = ", ".join("?" for _ in columns)
            conn.execute(
                f"INSERT INTO novels ({', '.join(columns)}) VALUES ({placeholders})",  # noqa: S608
                params,
            )
        else:
            set_clause = ", ".join(f"{col} = ?" for col in values)
            conn.execute(
                f"UPDATE novels SET {set_clause}, updated_at = ? WHERE id = ?",  # noqa: S608
                [*values.values(), now, existing.id],
            )

    return get_novel_by_url(conn, record.url)  # type: ignore[return-value]


def get_novel_by_url(conn: sqlite3.Connection, url: str) -> Optional[StoredNovel]:
    """Fetch a novel by its source URL.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM novels WHERE url = ?", (url,)).fetchone()
    return _row_to_novel(row) if row else None


def list_novels(conn: sqlite3.Connection) -> list[StoredNovel]:
    """Return all novels, most recently updated first."""
    rows = conn.execute(
        "SELECT * FROM novels ORDER BY updated_at DESC, title"
    ).fetchall()
    return [_row_to_novel(r) for r in rows]


def delete_all(conn: sqlite3.Connection) -> int:
    """Remove every novel (chapters follow via CASCADE).  Returns rows deleted."""
    with conn:
        cursor = conn.execute("DELETE FROM novels")
    return cursor.rowcount

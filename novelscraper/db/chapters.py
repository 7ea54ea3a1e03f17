"""Storage for chapter rows and the resume marker."""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Iterable

from novelscraper.db.models import StoredChapter
from novelscraper.scraper.models import ChapterRecord


def _row_to_chapter(row: sqlite3.Row) -> StoredChapter:
    return StoredChapter(
        id=row["id"],
        novel_id=row["novel_id"],
        url=row["url"],
        title=row["title"],
        content=row["content"],
        number=row["number"],
        position=row["position"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def upsert_chapters(
    conn: sqlite3.Connection,
    novel_id: str,
    chapters: Iterable[ChapterRecord],
) -> int:
    """Store *chapters* for a novel, in order.  Returns the number of new rows.

    A chapter whose URL is already stored for this novel is updated in place
    and keeps its position; new chapters are appended after the last one.
    """
    inserted = 0
    with conn:
        row = conn.execute(
            "SELECT COALESCE(MAX(position), 0) FROM chapters WHERE novel_id = ?",
            (novel_id,),
        ).fetchone()
        position = row[0]

        for chapter in chapters:
            modified = int(chapter.retrieved_at.timestamp())
            cursor = conn.execute(
                """
                UPDATE chapters SET title = ?, content = ?, number = ?, updated_at = ?
                WHERE novel_id = ? AND url = ?
                """,
                (chapter.title, chapter.content, chapter.number, modified, novel_id, chapter.url),
            )
            if cursor.rowcount:
                continue

            position += 1
            conn.execute(
                """
                INSERT INTO chapters
                    (id, novel_id, url, title, content, number, position, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(uuid.uuid4()),
                    novel_id,
                    chapter.url,
                    chapter.title,
                    chapter.content,
                    chapter.number,
                    position,
                    int(time()),
                    modified,
                ),
            )
            inserted += 1

    return inserted


def list_chapters(conn: sqlite3.Connection, novel_id: str) -> list[StoredChapter]:
    """Return a novel's chapters in the order they were discovered."""
    rows = conn.execute(
        "SELECT * FROM chapters WHERE novel_id = ? ORDER BY position",
        (novel_id,),
    ).fetchall()
    return [_row_to_chapter(r) for r in rows]


def get_last_saved_chapter_url(conn: sqlite3.Connection, novel_url: str) -> str:
    """URL of the most recently appended chapter of a novel, or ``""``."""
    row = conn.execute(
        """
        SELECT c.url FROM chapters c
        JOIN novels n ON n.id = c.novel_id
        WHERE n.url = ?
        ORDER BY c.position DESC
        LIMIT 1
        """,
        (novel_url,),
    ).fetchone()
    return row["url"] if row else ""

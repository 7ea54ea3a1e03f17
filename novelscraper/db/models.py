"""Dataclass models representing DB rows.

These are plain Python objects, not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StoredNovel:
    id: str
    url: str
    title: str
    author: str
    rating: float | None
    description: list[str]
    genres: list[str]
    alternative_names: list[str]
    status: str
    is_completed: bool
    thumbnail_url: str
    last_table_of_contents_url: str
    last_page: int
    resume_page: int
    first_chapter_url: str
    latest_chapter_url: str
    latest_chapter_title: str
    created_at: int
    updated_at: int


@dataclass
class StoredChapter:
    id: str
    novel_id: str
    url: str
    title: str
    content: str
    number: int
    position: int
    created_at: int
    updated_at: int


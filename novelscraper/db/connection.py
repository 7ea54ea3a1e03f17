"""Opening the novel store.

Every caller goes through :func:`get_connection` so the pragmas below are
applied uniformly::

    conn = get_connection()
    init_db(conn)
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from novelscraper.config import settings

_MEMORY = ":memory:"

# Applied to each new connection, in order.
_PRAGMAS = (
    "PRAGMA foreign_keys = ON",
    "PRAGMA journal_mode = WAL",
    "PRAGMA busy_timeout = 5000",
)


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Connect to the novel store.

    Args:
        db_path: Database file, or ``":memory:"``.  ``settings.db_path`` when
            omitted; its workspace directory is created on demand.

    Returns:
        A connection whose rows are :class:`sqlite3.Row`, with foreign keys
        enforced so deleting a novel removes its chapters.
    """
    target = str(db_path or settings.db_path)
    if target != _MEMORY:
        settings.ensure_workspace()

    conn = sqlite3.connect(target, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    for pragma in _PRAGMAS:
        conn.execute(pragma)
    return conn

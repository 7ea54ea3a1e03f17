"""Database layer package.

Public re-exports so callers can write::

    from novelscraper.db import get_connection, init_db
"""

from novelscraper.db.connection import get_connection
from novelscraper.db.migrations import init_db

__all__ = ["get_connection", "init_db"]

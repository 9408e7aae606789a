"""Database layer package.

Public re-exports so callers can write::

    from docbot.db import get_connection, init_db
    from docbot.db import snapshots
"""

from docbot.db.connection import get_connection
from docbot.db.migrations import init_db
from docbot.db import snapshots

__all__ = ["get_connection", "init_db", "snapshots"]

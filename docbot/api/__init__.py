"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from docbot.api import app

    uvicorn docbot.api:app --reload
"""

from docbot.api.app import app

__all__ = ["app"]

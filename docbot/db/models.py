"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field

from docbot.scraper.models import PageRecord

STAGING = "staging"
PRODUCTION = "production"


@dataclass
class Snapshot:
    """Every page captured for one source at one point in time."""

    source_id: str
    root_url: str
    pages: list[PageRecord] = field(default_factory=list)
    captured_at: int = 0

    def content_json(self) -> str:
        """Serialise the page list to a JSON string for storage."""
        return json.dumps([page.to_dict() for page in self.pages])

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Snapshot":
        return cls(
            source_id=row["source_id"],
            root_url=row["root_url"],
            pages=[PageRecord.from_dict(p) for p in json.loads(row["content"] or "[]")],
            captured_at=row["captured_at"],
        )

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "url": self.root_url,
            "pages": [page.to_dict() for page in self.pages],
            "captured_at": self.captured_at,
        }

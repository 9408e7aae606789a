"""Shared fixtures.

All tests use a throw-away on-disk SQLite database under ``tmp_path`` and a
retry policy whose ``sleep`` only records the requested delays, so nothing
in the suite waits for real or touches ``~/.docbot_data``.
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from docbot.config import Source
from docbot.db.connection import get_connection
from docbot.db.migrations import init_db
from docbot.scraper.retry import RetryPolicy

ROOT = "https://docs.example.com/guide"

FILLER = (
    "This paragraph describes how the team plans, builds and ships work. "
    "It is long enough to pass the minimum content threshold on its own."
)


def make_html(title: str = "Page", links: tuple[str, ...] = (), body: str = FILLER) -> str:
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    return (
        f"<html><head><title>{title}</title></head>"
        f"<body><main><p>{body}</p>{anchors}</main></body></html>"
    )


@pytest.fixture()
def conn(tmp_path) -> Generator[sqlite3.Connection, None, None]:
    """File-backed connection with the schema initialised."""
    connection = get_connection(db_path=tmp_path / "test.db")
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture()
def source() -> Source:
    return Source(id="docs", root_url=ROOT, max_pages=100, max_links_per_page=5, batch_size=2)


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def fast_policy(sleeps: list[float]) -> RetryPolicy:
    """Retry policy with fixed politeness delay and no real sleeping."""
    return RetryPolicy(
        max_attempts=3,
        base_delay=1.5,
        min_politeness=1.0,
        max_politeness=2.0,
        sleep=sleeps.append,
        jitter=lambda lo, hi: lo,
    )

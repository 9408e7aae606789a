"""Batched persistence of crawled pages into a source's staging snapshot."""

from __future__ import annotations

import logging
import sqlite3
import time
from typing import Callable

from docbot.config import Source
from docbot.db.models import STAGING, Snapshot
from docbot.db.snapshots import delete_snapshot, get_snapshot, upsert_snapshot
from docbot.errors import PersistenceError
from docbot.scraper.models import PageRecord

logger = logging.getLogger(__name__)


class BatchedWriter:
    """Buffer :class:`PageRecord` objects and flush them to staging in batches.

    A flush reads the staging snapshot, appends the buffered pages and
    upserts the merged result, so at most ``source.batch_size`` pages live
    only in memory at any time.

    Usage::

        writer = BatchedWriter(conn, source)
        writer.start()
        for page in pages:
            writer.append(page)
        writer.finish()

    Raises:
        PersistenceError: From any method that touches the store.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        source: Source,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.conn = conn
        self.source = source
        self._clock = clock
        self.pages_written = 0
        self._buffer: list[PageRecord] = []

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def start(self) -> None:
        """Replace any leftover staging row with an empty snapshot."""
        self._buffer.clear()
        self.pages_written = 0
        delete_snapshot(self.conn, self.source.id, STAGING)
        upsert_snapshot(
            self.conn,
            Snapshot(source_id=self.source.id, root_url=self.source.root_url),
            STAGING,
        )

    def append(self, page: PageRecord) -> None:
        self._buffer.append(page)
        if len(self._buffer) >= self.source.batch_size:
            self.flush()

    def flush(self, *, captured_at: int | None = None) -> None:
        """Merge buffered pages into the staging snapshot and persist it."""
        if not self._buffer and captured_at is None:
            return
        try:
            staged = get_snapshot(self.conn, self.source.id, STAGING)
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Could not read staging snapshot for {self.source.id!r}: {exc}"
            ) from exc
        if staged is None:
            staged = Snapshot(source_id=self.source.id, root_url=self.source.root_url)

        staged.pages.extend(self._buffer)
        staged.captured_at = captured_at or int(self._clock())
        upsert_snapshot(self.conn, staged, STAGING)

        self.pages_written += len(self._buffer)
        logger.debug(
            "Flushed %d page(s) for %s (%d staged)",
            len(self._buffer), self.source.id, len(staged.pages),
        )
        self._buffer.clear()

    def finish(self) -> int:
        """Flush what is left and stamp the staging snapshot with the completion time.

        Returns the total number of pages written.
        """
        self.flush(captured_at=int(self._clock()))
        return self.pages_written

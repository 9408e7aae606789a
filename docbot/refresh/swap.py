"""Crawl every source into staging, then swap staging into production.

Readers see either the complete old snapshot set or the complete new one:

1. each source is crawled into its own staging row (batched writes),
2. only when *all* crawls succeeded, :func:`promote_staging` copies every
   staging row over production and deletes staging in a single transaction,
3. on any failure the staging rows are discarded and production is left as
   it was.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Sequence

from docbot.config import Source
from docbot.crawler.crawler import CrawlStats, crawl_source
from docbot.crawler.writer import BatchedWriter
from docbot.db.snapshots import discard_staging, promote_staging
from docbot.errors import EmptyCrawlError

logger = logging.getLogger(__name__)

CrawlFn = Callable[[Source, BatchedWriter], CrawlStats]


class SwapCoordinator:
    """Runs a staged refresh of a set of sources against one connection."""

    def __init__(self, conn: sqlite3.Connection, *, crawl: CrawlFn = crawl_source) -> None:
        self.conn = conn
        self._crawl = crawl

    def _stage(self, source: Source) -> int:
        writer = BatchedWriter(self.conn, source)
        writer.start()
        stats = self._crawl(source, writer)
        written = writer.finish()
        if written == 0:
            raise EmptyCrawlError(source.id, source.root_url, stats.failed)
        return written

    def commit(self, sources: Sequence[Source]) -> dict[str, int]:
        """Refresh *sources* atomically.

        Returns:
            Page count per promoted source id.

        Raises:
            PersistenceError: The store failed while staging or promoting.
            EmptyCrawlError: A source yielded no pages.
        """
        source_ids = [s.id for s in sources]
        counts: dict[str, int] = {}
        try:
            for source in sources:
                counts[source.id] = self._stage(source)
            promote_staging(self.conn, source_ids)
        except Exception:
            logger.error("Refresh failed; discarding staging for %s", ", ".join(source_ids))
            try:
                discard_staging(self.conn, source_ids)
            except Exception:
                logger.exception("Could not discard staging snapshots")
            raise

        logger.info(
            "Promoted %s",
            ", ".join(f"{sid} ({n} pages)" for sid, n in counts.items()),
        )
        return counts

"""Breadth-first crawl of one source.

``crawl_source`` walks a single root URL:

    pop URL → fetch → extract → (save + enqueue links | skip | fail)

Page-level problems (fetch failures, unparseable markup, thin pages) are
logged and counted; they never stop the crawl.  Only store failures raised
by the writer escape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import httpx

from docbot.config import Source
from docbot.crawler.frontier import Frontier
from docbot.crawler.writer import BatchedWriter
from docbot.errors import FetchError
from docbot.scraper.extractor import extract_page
from docbot.scraper.fetcher import build_client, fetch_url
from docbot.scraper.models import ExtractResult, RawPage

logger = logging.getLogger(__name__)

FetchFn = Callable[..., RawPage]
ExtractFn = Callable[[RawPage, str], ExtractResult]


@dataclass
class CrawlStats:
    """Counters for one finished crawl."""

    source_id: str
    saved: int = 0
    skipped: int = 0
    failed: int = 0
    attempted_urls: list[str] = field(default_factory=list)

    @property
    def fetched(self) -> int:
        return len(self.attempted_urls) - self.failed


def crawl_source(
    source: Source,
    writer: BatchedWriter,
    *,
    fetch: FetchFn = fetch_url,
    extract: ExtractFn = extract_page,
    client: Optional[httpx.Client] = None,
) -> CrawlStats:
    """Crawl *source* breadth-first and hand every kept page to *writer*.

    The crawl stops when the frontier is empty or ``source.max_pages`` pages
    have been saved.  Each saved page contributes at most
    ``source.max_links_per_page`` new URLs to the frontier.

    Args:
        source: The crawl target.
        writer: Started :class:`BatchedWriter`; the caller calls ``finish()``.
        fetch: ``fetch(url, client=...)`` returning a :class:`RawPage` or
            raising :class:`FetchError`.
        extract: ``extract(raw, root_url)`` returning an :class:`ExtractResult`.
        client: Shared HTTP client.  One is opened for the crawl when omitted.

    Returns:
        A :class:`CrawlStats` summary.

    Raises:
        PersistenceError: If the writer cannot persist a batch.
    """
    if client is None:
        with build_client() as own_client:
            return crawl_source(
                source, writer, fetch=fetch, extract=extract, client=own_client
            )

    logger.info("Starting to crawl %s (max %d pages)", source.root_url, source.max_pages)
    stats = CrawlStats(source_id=source.id)
    frontier = Frontier(source.root_url)

    while frontier and stats.saved < source.max_pages:
        url = frontier.next_url()
        if url is None or frontier.is_visited(url):
            continue
        frontier.mark_visited(url)
        stats.attempted_urls.append(url)

        try:
            raw = fetch(url, client=client)
        except FetchError as exc:
            stats.failed += 1
            logger.warning("Skipping %s after %d attempt(s): %s", url, exc.attempts, exc)
            continue

        try:
            result = extract(raw, source.root_url)
        except Exception as exc:
            stats.failed += 1
            logger.warning("Skipping %s: could not parse response: %s", url, exc)
            continue

        if result.page is None:
            stats.skipped += 1
            logger.debug("Skipping %s: not enough content", url)
            continue

        writer.append(result.page)
        stats.saved += 1
        frontier.enqueue(result.links, source.max_links_per_page)

    logger.info(
        "Finished crawling %s: %d saved, %d skipped, %d failed",
        source.root_url, stats.saved, stats.skipped, stats.failed,
    )
    return stats

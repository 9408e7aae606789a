"""Exception taxonomy for the crawl-and-refresh pipeline.

Page-level failures (:class:`FetchError`) are handled inside the crawler and
never escape it.  Everything else is refresh-level: it aborts the current
refresh, which leaves production snapshots untouched.
"""

from __future__ import annotations


class DocbotError(Exception):
    """Base class for all docbot errors."""


class FetchError(DocbotError):
    """A URL could not be fetched after the retry policy gave up."""

    def __init__(self, url: str, message: str, *, transient: bool, attempts: int) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.transient = transient
        self.attempts = attempts


class PersistenceError(DocbotError):
    """The snapshot store failed while staging or promoting."""


class EmptyCrawlError(DocbotError):
    """A source crawl finished without storing a single page."""

    def __init__(self, source_id: str, root_url: str, failed: int) -> None:
        super().__init__(
            f"Crawl of {source_id!r} ({root_url}) produced no pages "
            f"({failed} fetch failure(s))"
        )
        self.source_id = source_id
        self.root_url = root_url

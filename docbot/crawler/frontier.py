"""Per-crawl URL bookkeeping: a visited set plus a FIFO queue."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional


class Frontier:
    """Pending/visited state for one breadth-first crawl.

    The visited set only ever grows.  A URL is queued at most once and never
    after it has been visited.
    """

    def __init__(self, root_url: str) -> None:
        self._queue: deque[str] = deque([root_url])
        self._queued: set[str] = {root_url}
        self._visited: set[str] = set()

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    def next_url(self) -> Optional[str]:
        """Pop the oldest pending URL, or ``None`` when the queue is empty."""
        if not self._queue:
            return None
        url = self._queue.popleft()
        self._queued.discard(url)
        return url

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def mark_visited(self, url: str) -> None:
        self._visited.add(url)

    def enqueue(self, links: Iterable[str], limit: int) -> int:
        """Queue up to *limit* new links in the given order.

        Links already visited or already pending are skipped and do not count
        towards *limit*.  Returns the number of links queued.
        """
        added = 0
        for link in links:
            if added >= limit:
                break
            if link in self._visited or link in self._queued:
                continue
            self._queue.append(link)
            self._queued.add(link)
            added += 1
        return added

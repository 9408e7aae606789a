"""Interval-driven refresh trigger."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from docbot.refresh.orchestrator import RefreshOrchestrator

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Call ``orchestrator.trigger()`` every *interval* seconds on a daemon thread.

    An interval of zero or less disables the scheduler: :meth:`start` is a
    no-op.  Rejected triggers (refresh already running) are simply skipped.
    """

    def __init__(self, orchestrator: RefreshOrchestrator, interval: float) -> None:
        self.orchestrator = orchestrator
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.interval <= 0 or self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="refresh-scheduler", daemon=True
        )
        self._thread.start()
        logger.info("Refresh scheduler started (every %.0fs)", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            result = self.orchestrator.trigger()
            logger.debug("Scheduled refresh: %s", result.message)

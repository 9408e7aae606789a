"""Process-wide refresh state machine.

At most one refresh runs at a time.  :meth:`RefreshOrchestrator.trigger`
checks and sets ``is_refreshing`` under a lock, so two concurrent triggers
can never both proceed; the loser gets an ``accepted=False`` result and
nothing else changes.  Accepted refreshes run on a single background worker
and the trigger returns immediately.  Callers observe completion through
:meth:`RefreshOrchestrator.status`.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Optional, Sequence

from docbot.config import Source
from docbot.db import get_connection, init_db
from docbot.refresh.swap import SwapCoordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshStatus:
    is_refreshing: bool = False
    last_attempt_at: Optional[float] = None
    started_at: Optional[float] = None
    last_error: Optional[str] = None
    last_success_at: Optional[float] = None
    last_duration: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TriggerResult:
    accepted: bool
    message: str


class RefreshOrchestrator:
    """Owns the single :class:`RefreshStatus` and the refresh worker.

    Args:
        run_refresh: Callable performing one full refresh.  Raising marks the
            attempt as failed.
        executor: Worker used for background runs.  A single-thread pool is
            created when omitted.
        clock: Time source, injectable for tests.
    """

    def __init__(
        self,
        run_refresh: Callable[[], Any],
        *,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._run_refresh = run_refresh
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="refresh"
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._status = RefreshStatus()
        self._future: Optional[Future] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def status(self) -> RefreshStatus:
        with self._lock:
            return self._status

    def trigger(self, *, background: bool = True) -> TriggerResult:
        """Start a refresh unless one is already running.

        With ``background=False`` the refresh runs in the calling thread and
        the result is returned once it has finished.
        """
        with self._lock:
            if self._status.is_refreshing:
                logger.info("Refresh already in progress, skipping")
                return TriggerResult(accepted=False, message="Refresh already in progress")
            now = self._clock()
            self._status = replace(
                self._status,
                is_refreshing=True,
                last_attempt_at=now,
                started_at=now,
                last_error=None,
            )

        if not background:
            self._run()
            return TriggerResult(accepted=True, message="Refresh finished")

        try:
            self._future = self._executor.submit(self._run)
        except RuntimeError as exc:
            # Executor already shut down.
            self._finish(error=f"{type(exc).__name__}: {exc}")
            return TriggerResult(accepted=False, message=f"Refresh could not start: {exc}")
        return TriggerResult(accepted=True, message="Refresh started in background")

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the current background refresh (if any) has finished."""
        future = self._future
        if future is not None:
            future.result(timeout=timeout)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self) -> None:
        logger.info("Starting refresh")
        error: Optional[str] = None
        try:
            self._run_refresh()
        except Exception as exc:
            logger.exception("Refresh failed")
            error = f"{type(exc).__name__}: {exc}"
        else:
            logger.info("Refresh completed successfully")
        finally:
            self._finish(error=error)

    def _finish(self, *, error: Optional[str]) -> None:
        with self._lock:
            now = self._clock()
            started = self._status.started_at
            self._status = replace(
                self._status,
                is_refreshing=False,
                last_error=error,
                last_success_at=now if error is None else self._status.last_success_at,
                last_duration=(now - started) if started is not None else None,
            )


def build_refresh(
    sources: Sequence[Source],
    conn_factory: Callable[[], sqlite3.Connection] = get_connection,
) -> Callable[[], dict[str, int]]:
    """Return the default ``run_refresh`` callable for an orchestrator.

    Each run opens its own connection so it never shares a cursor with the
    request-handling path.
    """
    def run_refresh() -> dict[str, int]:
        conn = conn_factory()
        try:
            init_db(conn)
            return SwapCoordinator(conn).commit(sources)
        finally:
            conn.close()

    return run_refresh

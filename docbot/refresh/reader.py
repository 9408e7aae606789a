"""Read path for production snapshots with a staleness check.

Every read looks at the age of the production snapshot set.  When it is
missing or older than the configured threshold, the reader either triggers a
background refresh or only logs a warning, depending on
:attr:`StalenessPolicy.action`.  The check never blocks the read.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from docbot.config import Settings, Source, settings
from docbot.db.models import Snapshot
from docbot.db.snapshots import get_snapshot
from docbot.refresh.orchestrator import RefreshOrchestrator

logger = logging.getLogger(__name__)

REFRESH = "refresh"
WARN = "warn"


@dataclass(frozen=True)
class StalenessPolicy:
    action: str = REFRESH
    max_age: float = 3600.0

    def __post_init__(self) -> None:
        if self.action not in (REFRESH, WARN):
            raise ValueError(f"Unknown stale action {self.action!r}; use 'refresh' or 'warn'")

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> "StalenessPolicy":
        action = cfg.stale_action.strip().lower()
        max_age = cfg.refresh_stale_after if action == REFRESH else cfg.warn_stale_after
        return cls(action=action, max_age=max_age)


@dataclass
class SnapshotSet:
    """Production snapshots of every configured source."""

    snapshots: dict[str, Optional[Snapshot]] = field(default_factory=dict)
    last_updated: Optional[int] = None

    @property
    def complete(self) -> bool:
        return all(s is not None for s in self.snapshots.values())


class SnapshotReader:
    def __init__(
        self,
        conn: sqlite3.Connection,
        orchestrator: RefreshOrchestrator,
        *,
        sources: Sequence[Source],
        policy: Optional[StalenessPolicy] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.conn = conn
        self.orchestrator = orchestrator
        self.sources = tuple(sources)
        self.policy = policy or StalenessPolicy.from_settings()
        self._clock = clock

    def get_snapshot(self, source_id: str) -> Optional[Snapshot]:
        """Return the production snapshot of *source_id*, or ``None``."""
        result = self._load()
        self._react(result)
        if source_id in result.snapshots:
            return result.snapshots[source_id]
        return get_snapshot(self.conn, source_id)

    def get_snapshots(self) -> SnapshotSet:
        """Return every source's production snapshot plus ``last_updated``.

        ``last_updated`` is the oldest capture time among present snapshots.
        """
        result = self._load()
        self._react(result)
        return result

    def check_staleness(self) -> bool:
        """Apply the staleness policy.  Returns ``True`` if the data was stale."""
        return self._react(self._load())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self) -> SnapshotSet:
        snapshots = {s.id: get_snapshot(self.conn, s.id) for s in self.sources}
        times = [s.captured_at for s in snapshots.values() if s is not None]
        return SnapshotSet(snapshots=snapshots, last_updated=min(times) if times else None)

    def _is_stale(self, result: SnapshotSet) -> bool:
        if result.last_updated is None or not result.complete:
            return True
        return self._clock() - result.last_updated > self.policy.max_age

    def _react(self, result: SnapshotSet) -> bool:
        if not self._is_stale(result):
            return False
        if self.policy.action == REFRESH:
            if not self.orchestrator.status().is_refreshing:
                logger.info("Snapshot data is stale or missing, triggering background refresh")
                self.orchestrator.trigger()
        else:
            logger.warning(
                "Snapshot data is stale or missing (last updated: %s)",
                result.last_updated,
            )
        return True

"""Refresh package — staged swap, orchestrator, read path and scheduler."""

from docbot.refresh.orchestrator import (
    RefreshOrchestrator,
    RefreshStatus,
    TriggerResult,
    build_refresh,
)
from docbot.refresh.reader import SnapshotReader, SnapshotSet, StalenessPolicy
from docbot.refresh.scheduler import RefreshScheduler
from docbot.refresh.swap import SwapCoordinator

__all__ = [
    "RefreshOrchestrator",
    "RefreshStatus",
    "TriggerResult",
    "build_refresh",
    "SnapshotReader",
    "SnapshotSet",
    "StalenessPolicy",
    "RefreshScheduler",
    "SwapCoordinator",
]

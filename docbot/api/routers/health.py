"""Health endpoint.

Routes
------
GET /health    Database, snapshot availability and refresh status

Reports degraded data rather than failing: a missing snapshot shows up as
``unavailable``, never as a 5xx.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from docbot.db.snapshots import get_snapshot
from docbot.api.routers.refresh import RefreshStatusOut, status_out

router = APIRouter()


class HealthOut(BaseModel):
    status: str
    database: str
    sources: dict[str, str]
    last_updated: Optional[int]
    refresh: RefreshStatusOut
    timestamp: str


def _database_state(conn: sqlite3.Connection) -> str:
    try:
        conn.execute("SELECT 1").fetchone()
    except sqlite3.Error:
        return "disconnected"
    return "connected"


@router.get("", response_model=HealthOut)
def health(request: Request) -> HealthOut:
    state = request.app.state
    database = _database_state(state.db)

    sources: dict[str, str] = {}
    captured: list[int] = []
    for source in state.sources:
        snapshot = get_snapshot(state.db, source.id) if database == "connected" else None
        sources[source.id] = "available" if snapshot else "unavailable"
        if snapshot:
            captured.append(snapshot.captured_at)

    return HealthOut(
        status="healthy" if database == "connected" else "degraded",
        database=database,
        sources=sources,
        last_updated=min(captured) if captured else None,
        refresh=status_out(state.orchestrator.status()),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )

"""Production snapshot read endpoints.

Routes
------
GET /snapshots                 Every source's snapshot summary + last_updated
GET /snapshots/{source_id}     One source's full snapshot (404 if absent)

Reads go through :class:`~docbot.refresh.reader.SnapshotReader`, so a stale
or missing snapshot set triggers a background refresh (or a warning) without
delaying the response.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from docbot.db.models import Snapshot

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class PageOut(BaseModel):
    url: str
    title: str
    text: str


class SnapshotOut(BaseModel):
    source_id: str
    url: str
    captured_at: int
    pages: list[PageOut]


class SnapshotSummary(BaseModel):
    source_id: str
    url: str
    available: bool
    page_count: int = 0
    captured_at: Optional[int] = None


class SnapshotListOut(BaseModel):
    last_updated: Optional[int]
    sources: list[SnapshotSummary]


def _snapshot_out(snapshot: Snapshot) -> SnapshotOut:
    return SnapshotOut(**snapshot.to_dict())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=SnapshotListOut)
def list_snapshots_endpoint(request: Request) -> SnapshotListOut:
    reader = request.app.state.reader
    result = reader.get_snapshots()
    summaries = []
    for source in reader.sources:
        snapshot = result.snapshots.get(source.id)
        summaries.append(
            SnapshotSummary(
                source_id=source.id,
                url=source.root_url,
                available=snapshot is not None,
                page_count=len(snapshot.pages) if snapshot else 0,
                captured_at=snapshot.captured_at if snapshot else None,
            )
        )
    return SnapshotListOut(last_updated=result.last_updated, sources=summaries)


@router.get("/{source_id}", response_model=SnapshotOut)
def get_snapshot_endpoint(source_id: str, request: Request) -> SnapshotOut:
    reader = request.app.state.reader
    if source_id not in {s.id for s in reader.sources}:
        raise HTTPException(status_code=404, detail=f"Unknown source '{source_id}'.")
    snapshot = reader.get_snapshot(source_id)
    if snapshot is None:
        raise HTTPException(
            status_code=404,
            detail=f"No snapshot for '{source_id}' yet; a refresh may be in progress.",
        )
    return _snapshot_out(snapshot)

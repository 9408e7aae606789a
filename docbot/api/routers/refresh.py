"""Manual refresh endpoints.

Routes
------
POST /refresh           Start a background refresh (202; rejected if one is running)
GET  /refresh/status    Current refresh state
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from docbot.refresh.orchestrator import RefreshStatus

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class RefreshStatusOut(BaseModel):
    is_refreshing: bool
    last_attempt_at: Optional[float] = None
    started_at: Optional[float] = None
    last_error: Optional[str] = None
    last_success_at: Optional[float] = None
    last_duration: Optional[float] = None


class TriggerOut(BaseModel):
    accepted: bool
    message: str
    refresh: RefreshStatusOut


def status_out(status: RefreshStatus) -> RefreshStatusOut:
    return RefreshStatusOut(**status.to_dict())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=TriggerOut, status_code=202)
def trigger_refresh(request: Request) -> TriggerOut:
    """Start a refresh in the background and return immediately.

    A second trigger while a refresh is running is reported with
    ``accepted: false``; it is not queued.
    """
    orchestrator = request.app.state.orchestrator
    result = orchestrator.trigger()
    return TriggerOut(
        accepted=result.accepted,
        message=result.message,
        refresh=status_out(orchestrator.status()),
    )


@router.get("/status", response_model=RefreshStatusOut)
def refresh_status(request: Request) -> RefreshStatusOut:
    return status_out(request.app.state.orchestrator.status())

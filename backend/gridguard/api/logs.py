"""REST API for the event journal.

POST /logs         : append a fault / warning / info entry
GET  /logs         : entries, optional inclusive ?start / ?end (ISO-8601)
GET  /logs/summary : per-zone daily counts for the last ?days days
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from gridguard.api.deps import get_log_store, get_ws_manager
from gridguard.core.errors import ValidationError
from gridguard.core.timeutil import now_iso, parse_iso, to_iso
from gridguard.core.websocket import ConnectionManager
from gridguard.models.log_entry import LogCreate, LogCreateResponse, LogEntry, LogSummary
from gridguard.services.log_store import LogStore

router = APIRouter(prefix="/logs", tags=["logs"])


@router.post("", response_model=LogCreateResponse)
async def create_log(
    body: LogCreate,
    store: LogStore = Depends(get_log_store),
    ws: ConnectionManager = Depends(get_ws_manager),
):
    if not body.zone:
        raise ValidationError("zone required")
    if body.time:
        try:
            time = to_iso(parse_iso(body.time))
        except ValueError:
            raise ValidationError(f"time must be an ISO-8601 timestamp, got {body.time!r}")
    else:
        time = now_iso()

    entry = store.append(LogEntry(
        zone=body.zone,
        substation=body.substation or None,
        status=body.status or "fault",
        message=body.message or "",
        time=time,
    ))
    await ws.publish_log(entry)
    return LogCreateResponse(success=True, entry=entry)


@router.get("", response_model=list[LogEntry])
async def list_logs(
    start: Optional[str] = Query(None, description="Inclusive lower bound, ISO-8601"),
    end: Optional[str] = Query(None, description="Inclusive upper bound, ISO-8601"),
    store: LogStore = Depends(get_log_store),
) -> list[LogEntry]:
    return store.query(start=start, end=end)


@router.get("/summary", response_model=LogSummary)
async def logs_summary(
    days: int = Query(30, ge=1, le=3650),
    store: LogStore = Depends(get_log_store),
) -> LogSummary:
    return store.summarize(days)

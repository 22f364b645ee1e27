"""Telemetry ingestion (public).

POST /telemetry : store the zone's latest snapshot, run auto-protection
GET  /telemetry : every zone's latest snapshot
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from gridguard.api.deps import get_engine, get_ws_manager
from gridguard.core.errors import ValidationError
from gridguard.core.websocket import ConnectionManager
from gridguard.models.telemetry import TelemetryAck, extract_zone_id
from gridguard.services.protection_engine import ProtectionEngine

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.post("", response_model=TelemetryAck)
async def post_telemetry(
    payload: dict[str, Any] = Body(...),
    engine: ProtectionEngine = Depends(get_engine),
    ws: ConnectionManager = Depends(get_ws_manager),
):
    zone_id = extract_zone_id(payload)
    if zone_id is None:
        raise ValidationError("zoneId required")
    result = engine.ingest(zone_id, payload)
    if result.action is not None:
        await ws.publish_log(result.action)
    return TelemetryAck(zone_id=result.zone_id)


@router.get("")
async def get_telemetry(engine: ProtectionEngine = Depends(get_engine)) -> dict[str, dict[str, Any]]:
    return engine.snapshots()

"""Auto-protection control.

GET  /protect        : public, full zone -> record mapping
POST /protect        : key, enable/disable auto-isolation (disable clears isolation)
POST /simulate-break : key, inject a line break through the normal decision path
POST /command        : key, journal an operator command for a zone
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from gridguard.api.deps import get_engine, get_protection_store, get_ws_manager
from gridguard.core.security import require_api_key
from gridguard.core.websocket import ConnectionManager
from gridguard.models.protection import (
    CommandRequest,
    CommandResponse,
    ProtectRequest,
    ProtectResponse,
    ProtectionRecord,
    SimulateBreakRequest,
)
from gridguard.services.protection_engine import ProtectionEngine
from gridguard.services.protection_store import ProtectionStore

router = APIRouter(tags=["protect"])


@router.get("/protect", response_model=dict[str, ProtectionRecord])
async def get_protection(store: ProtectionStore = Depends(get_protection_store)):
    return store.get_all()


@router.post("/protect", response_model=ProtectResponse, dependencies=[Depends(require_api_key)])
async def set_protection(
    body: ProtectRequest,
    engine: ProtectionEngine = Depends(get_engine),
):
    state = engine.set_protection(body.zone_id, body.enabled)
    return ProtectResponse(success=True, zone_id=body.zone_id, state=state)


@router.post("/simulate-break", response_model=ProtectResponse, dependencies=[Depends(require_api_key)])
async def simulate_break(
    body: SimulateBreakRequest,
    engine: ProtectionEngine = Depends(get_engine),
    ws: ConnectionManager = Depends(get_ws_manager),
):
    result = engine.simulate_break(body.zone_id, body.substation)
    if result.action is not None:
        await ws.publish_log(result.action)
    return ProtectResponse(success=True, zone_id=result.zone_id, state=result.state)


@router.post("/command", response_model=CommandResponse, dependencies=[Depends(require_api_key)])
async def send_command(
    body: CommandRequest,
    engine: ProtectionEngine = Depends(get_engine),
    ws: ConnectionManager = Depends(get_ws_manager),
):
    entry = engine.record_command(body.zone_id, body.action)
    await ws.publish_log(entry)
    return CommandResponse(success=True, zone_id=body.zone_id, action=body.action)

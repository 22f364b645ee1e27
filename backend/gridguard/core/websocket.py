"""
Live event feed.

WS /ws/events : on connect: {"type": "snapshot", "data": <protection mapping>}
                 then one {"type": "log", "data": <entry>} per journaled event
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from gridguard.models.log_entry import LogEntry

logger = logging.getLogger("gridguard.websocket")

router = APIRouter()


# ---------------------------------------------------------------------------
# Connection Manager
# ---------------------------------------------------------------------------

class ConnectionManager:
    """Event-feed subscribers. Messages are {"type": ..., "data": ...} JSON frames."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket, snapshot: dict) -> None:
        await ws.accept()
        await ws.send_json({"type": "snapshot", "data": snapshot})
        self.connections.append(ws)
        logger.info("Event feed subscriber joined (%d total)", len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.connections:
            self.connections.remove(ws)
            logger.info("Event feed subscriber left (%d remaining)", len(self.connections))

    async def broadcast(self, kind: str, data: dict) -> int:
        """Send one frame to every subscriber; returns how many received it."""
        if not self.connections:
            return 0
        frame = json.dumps({"type": kind, "data": data})
        delivered = 0
        for ws in list(self.connections):
            try:
                await ws.send_text(frame)
                delivered += 1
            except Exception as exc:
                logger.debug("Dropping event feed subscriber: %s", exc)
                self.disconnect(ws)
        return delivered

    async def publish_log(self, entry: LogEntry) -> int:
        return await self.broadcast("log", entry.model_dump())


# ---------------------------------------------------------------------------
# WebSocket Endpoint
# ---------------------------------------------------------------------------

@router.websocket("/ws/events")
async def ws_events(websocket: WebSocket) -> None:
    manager: ConnectionManager = websocket.app.state.ws_manager
    store = websocket.app.state.protection_store
    snapshot = {zone_id: rec.to_json() for zone_id, rec in store.get_all().items()}
    try:
        await manager.connect(websocket, snapshot)
        while True:
            if await websocket.receive_text() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.debug("Event feed error: %s", exc)
    finally:
        manager.disconnect(websocket)

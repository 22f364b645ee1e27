"""Request-scoped access to the service objects hung on app.state."""
from fastapi import HTTPException, Request

from gridguard.core.websocket import ConnectionManager
from gridguard.services.log_store import LogStore
from gridguard.services.protection_engine import ProtectionEngine
from gridguard.services.protection_store import ProtectionStore


def _state(request: Request, name: str):
    obj = getattr(request.app.state, name, None)
    if obj is None:
        raise HTTPException(503, f"{name} not initialized")
    return obj


def get_engine(request: Request) -> ProtectionEngine:
    return _state(request, "engine")


def get_log_store(request: Request) -> LogStore:
    return _state(request, "log_store")


def get_protection_store(request: Request) -> ProtectionStore:
    return _state(request, "protection_store")


def get_ws_manager(request: Request) -> ConnectionManager:
    return _state(request, "ws_manager")

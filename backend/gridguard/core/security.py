"""Shared-secret gate for control endpoints (protect / simulate-break / command).

Key sources, first hit wins:
  1. PROTECT_API_KEY
  2. PROTECT_KEY_FILE  -> {"key": "..."}
  3. PROTECT_KEY_AUTOGENERATE=true -> random key written to PROTECT_KEY_FILE

No key at all is a misconfiguration: control requests get 503, never open access.
"""
from __future__ import annotations

import hmac
import logging
import secrets

from fastapi import Header, Request

from gridguard.config import Settings
from gridguard.core.errors import AuthError, ConfigError, PersistenceError
from gridguard.services.json_store import read_document, write_document

logger = logging.getLogger("gridguard.security")


def resolve_api_key(settings: Settings) -> str | None:
    if settings.PROTECT_API_KEY:
        return settings.PROTECT_API_KEY

    key_path = settings.data_path(settings.PROTECT_KEY_FILE)
    doc = read_document(key_path, {})
    if isinstance(doc, dict) and isinstance(doc.get("key"), str) and doc["key"]:
        logger.info("Protect API key loaded from %s", key_path)
        return doc["key"]

    if settings.PROTECT_KEY_AUTOGENERATE:
        key = secrets.token_hex(20)
        try:
            write_document(key_path, {"key": key})
            logger.info("Protect API key generated and saved to %s", key_path)
        except PersistenceError as exc:
            logger.error("Generated protect key could not be saved: %s", exc)
        return key

    logger.warning("No protect API key configured; control endpoints will answer 503")
    return None


def _presented_key(x_api_key: str | None, authorization: str | None) -> str | None:
    if x_api_key:
        return x_api_key
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):]
    return None


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(None),
    authorization: str | None = Header(None),
) -> None:
    """FastAPI dependency: raises ConfigError (503) or AuthError (403)."""
    expected = getattr(request.app.state, "api_key", None)
    if not expected:
        raise ConfigError("server misconfigured: no protect API key")
    presented = _presented_key(x_api_key, authorization)
    if not presented or not hmac.compare_digest(presented.encode(), expected.encode()):
        raise AuthError("invalid API key")

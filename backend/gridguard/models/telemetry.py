from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TelemetryAck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Telemetry stored"
    zone_id: str = Field(alias="zoneId")


def normalize_zone_id(raw: Any) -> str | None:
    """Non-empty strings pass through, integers become their string form."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, str) and raw.strip():
        return raw
    return None


def extract_zone_id(payload: dict) -> str | None:
    """zoneId, falling back to id."""
    raw = payload.get("zoneId")
    if raw is None or raw == "":
        raw = payload.get("id")
    return normalize_zone_id(raw)

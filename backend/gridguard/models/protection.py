"""Per-zone auto-protection record.

enabled=True  -> operator opted in to auto-isolation
isolated=True -> an isolation was taken and not yet cleared (only a disable clears it)
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gridguard.models.telemetry import normalize_zone_id


class ProtectionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    isolated: bool = False
    last_action_at: str | None = Field(default=None, alias="lastActionAt")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class ZoneRequest(BaseModel):
    """Control request body keyed by zoneId (integers accepted, as on /telemetry)."""

    zone_id: str | None = Field(default=None, alias="zoneId")

    @field_validator("zone_id", mode="before")
    @classmethod
    def coerce_zone_id(cls, v: Any) -> Any:
        if v is None or isinstance(v, (int, str)):
            return normalize_zone_id(v)
        return v


class ProtectRequest(ZoneRequest):
    enabled: bool = False


class ProtectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    zone_id: str = Field(alias="zoneId")
    state: ProtectionRecord


class SimulateBreakRequest(ZoneRequest):
    substation: str | None = None


class CommandRequest(ZoneRequest):
    action: str | None = None


class CommandResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    zone_id: str = Field(alias="zoneId")
    action: str | None = None

"""Event journal entry: one fault / warning / operator event for a zone."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone: str
    substation: str | None = None
    status: str = "fault"        # fault, warning, ok, command ... (free-form)
    message: str = ""
    time: str                    # ISO-8601 UTC, Z suffix


class LogCreate(BaseModel):
    zone: str | None = None
    substation: str | None = None
    status: str | None = None
    message: str | None = None
    time: str | None = None


class LogCreateResponse(BaseModel):
    success: bool
    entry: LogEntry


class ZoneSummary(BaseModel):
    zone: str
    counts: list[int]
    total: int


class LogSummary(BaseModel):
    days: list[str]
    zones: list[ZoneSummary]

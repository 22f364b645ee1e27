"""UTC timestamp helpers. All stored times are ISO-8601 UTC with a Z suffix."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """2026-10-18T09:15:02.123Z"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Naive values are taken as UTC. Raises ValueError on anything unparseable.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"not an ISO timestamp: {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        # 0001-01-01T00:00:00+01:00 parses but has no UTC representation
        raise ValueError(f"timestamp out of range: {value!r}")


def now_iso() -> str:
    return to_iso(utcnow())

"""ProtectionEngine: telemetry ingestion and auto-isolation decisions.

ingest -> overwrite the zone's live snapshot
       -> get-or-create the zone's protection record
       -> is_fault(payload) AND enabled AND NOT isolated  =>  isolate + journal

simulate_break feeds a synthetic broken-line payload through the same path.
set_protection is the only way to clear an isolation (disable clears it).

One RLock covers the snapshot map and every check-then-set on a record, so
two concurrent fault reports for a zone produce exactly one isolation.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from gridguard.core.errors import ValidationError
from gridguard.core.timeutil import to_iso, utcnow
from gridguard.models.log_entry import LogEntry
from gridguard.models.protection import ProtectionRecord
from gridguard.services.log_store import LogStore
from gridguard.services.protection_store import ProtectionStore

logger = logging.getLogger("gridguard.protection_engine")

MSG_AUTO_ISOLATION = "Auto-isolation triggered due to line break detection"
MSG_SIMULATED_ISOLATION = "Auto-isolation performed (simulation)"


def is_fault(payload: dict) -> bool:
    """Line-break predicate. Looks at this payload only, never at history."""
    if payload.get("breakDetected") is True:
        return True
    if payload.get("status") == "broken":
        return True
    current = payload.get("current")
    if isinstance(current, (int, float)) and not isinstance(current, bool) and current == 0:
        return True
    return False


@dataclass
class IngestResult:
    zone_id: str
    state: ProtectionRecord
    action: LogEntry | None = None  # journal entry when this event caused an isolation
    stored: bool = True


class ProtectionEngine:

    def __init__(
        self,
        protection: ProtectionStore,
        logs: LogStore,
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.protection = protection
        self.logs = logs
        self._clock = clock
        self._lock = threading.RLock()
        self._snapshots: dict[str, dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------
    def ingest(self, zone_id: str | None, payload: dict) -> IngestResult:
        return self._ingest(zone_id, payload, MSG_AUTO_ISOLATION)

    def simulate_break(self, zone_id: str | None, substation: str | None = None) -> IngestResult:
        """Inject a synthetic line break for *zone_id* through the normal ingest path."""
        payload = {
            "zoneId": zone_id,
            "substation": substation,
            "breakDetected": True,
            "status": "broken",
            "time": to_iso(self._clock()),
        }
        logger.info("Simulated break: zone=%s substation=%s", zone_id, substation)
        return self._ingest(zone_id, payload, MSG_SIMULATED_ISOLATION)

    def _ingest(self, zone_id: str | None, payload: dict, isolation_message: str) -> IngestResult:
        if not zone_id:
            raise ValidationError("zoneId required")

        with self._lock:
            now = self._clock()
            self._snapshots[zone_id] = {**payload, "receivedAt": to_iso(now)}

            record, _ = self.protection.get_or_create(zone_id)
            action = None
            if is_fault(payload) and record.enabled and not record.isolated:
                stamp = to_iso(now)
                record.isolated = True
                record.last_action_at = stamp
                action = LogEntry(
                    zone=zone_id,
                    substation=payload.get("substation"),
                    status="fault",
                    message=isolation_message,
                    time=stamp,
                )
                self.logs.append(action)
                self.protection.set(zone_id, record)
                logger.warning("AUTO-ISOLATION: zone=%s substation=%s (%s)",
                               zone_id, action.substation, isolation_message)

        logger.debug("Telemetry received: zone=%s fields=%d", zone_id, len(payload))
        return IngestResult(zone_id=zone_id, state=record, action=action)

    def snapshots(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {zone_id: dict(snap) for zone_id, snap in self._snapshots.items()}

    # ------------------------------------------------------------------
    # Operator control
    # ------------------------------------------------------------------
    def set_protection(self, zone_id: str | None, enabled: bool) -> ProtectionRecord:
        if not zone_id:
            raise ValidationError("zoneId required")

        with self._lock:
            record, _ = self.protection.get_or_create(zone_id)
            record.enabled = bool(enabled)
            if not record.enabled:
                record.isolated = False
                record.last_action_at = to_iso(self._clock())
            self.protection.set(zone_id, record)

        logger.info("Protection %s for zone %s", "ENABLED" if record.enabled else "DISABLED", zone_id)
        return record

    def record_command(self, zone_id: str | None, action: str | None) -> LogEntry:
        """Journal an operator command for a zone. No protection state changes."""
        if not zone_id:
            raise ValidationError("zoneId required")
        entry = LogEntry(
            zone=zone_id,
            status="command",
            message=f"Operator command: {action or 'unspecified'}",
            time=to_iso(self._clock()),
        )
        self.logs.append(entry)
        logger.info("Command for %s: %s", zone_id, action)
        return entry

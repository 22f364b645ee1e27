"""ProtectionStore: per-zone auto-protect records, persisted as one JSON mapping.

{ "zone1": {"enabled": true, "isolated": false, "lastActionAt": "..."}, ... }

Loaded once at construction. Every mutation rewrites the whole document
before returning. A failed write is logged and the in-memory change stays.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from gridguard.core.errors import PersistenceError
from gridguard.models.protection import ProtectionRecord
from gridguard.services.json_store import read_document, write_document

logger = logging.getLogger("gridguard.protection_store")


class ProtectionStore:

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._records: dict[str, ProtectionRecord] = {}
        self._load()

    # ------------------------------------------------------------------
    def _load(self) -> None:
        raw = read_document(self.path, {})
        if not isinstance(raw, dict):
            logger.warning("%s is not a JSON object, starting empty", self.path)
            return
        for zone_id, data in raw.items():
            try:
                self._records[str(zone_id)] = ProtectionRecord.model_validate(data)
            except PydanticValidationError as exc:
                logger.warning("Skipping malformed protection record %r: %s", zone_id, exc)
        logger.info("ProtectionStore loaded %d zones from %s", len(self._records), self.path)

    def _persist(self) -> None:
        data = {zone_id: rec.to_json() for zone_id, rec in self._records.items()}
        try:
            write_document(self.path, data)
        except PersistenceError as exc:
            logger.error("Failed to persist protection state: %s", exc)

    # ------------------------------------------------------------------
    def get(self, zone_id: str) -> ProtectionRecord | None:
        with self._lock:
            rec = self._records.get(zone_id)
            return rec.model_copy() if rec is not None else None

    def get_all(self) -> dict[str, ProtectionRecord]:
        with self._lock:
            return {zone_id: rec.model_copy() for zone_id, rec in self._records.items()}

    def set(self, zone_id: str, record: ProtectionRecord) -> None:
        """Full replace of one zone's record, persisted immediately."""
        with self._lock:
            self._records[zone_id] = record.model_copy()
            self._persist()

    def get_or_create(self, zone_id: str) -> tuple[ProtectionRecord, bool]:
        """Return (record, created). A new default record is persisted right away."""
        with self._lock:
            rec = self._records.get(zone_id)
            if rec is not None:
                return rec.model_copy(), False
            rec = ProtectionRecord()
            self._records[zone_id] = rec
            self._persist()
            logger.info("Protection record created for zone %s", zone_id)
            return rec.model_copy(), True

"""LogStore: append-only, time-bounded event journal persisted as one JSON array.

Every mutation: drop entries older than the retention window (wall-clock now),
then rewrite the whole document (fsync'd) before returning. The same trim runs
after load. Insertion order is preserved; entries are never edited.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from gridguard.core.errors import PersistenceError, ValidationError
from gridguard.core.timeutil import parse_iso, utcnow
from gridguard.models.log_entry import LogEntry, LogSummary, ZoneSummary
from gridguard.services.json_store import read_document, write_document

logger = logging.getLogger("gridguard.log_store")

DEFAULT_RETENTION_DAYS = 30


def _parse_bound(name: str, value: str | datetime | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return parse_iso(value.isoformat())
    try:
        return parse_iso(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp, got {value!r}")


class LogStore:

    def __init__(
        self,
        path: Path,
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.path = Path(path)
        self.retention_days = retention_days
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: list[LogEntry] = []
        self._load()

    # ------------------------------------------------------------------
    def _load(self) -> None:
        raw = read_document(self.path, [])
        if not isinstance(raw, list):
            logger.warning("%s is not a JSON array, starting empty", self.path)
            return
        for item in raw:
            try:
                self._entries.append(LogEntry.model_validate(item))
            except PydanticValidationError as exc:
                logger.warning("Skipping malformed log entry %r: %s", item, exc)
        self._trim()
        logger.info("LogStore loaded %d entries from %s", len(self._entries), self.path)

    def _trim(self) -> None:
        cutoff = self._clock() - timedelta(days=self.retention_days)
        kept: list[LogEntry] = []
        for entry in self._entries:
            try:
                if parse_iso(entry.time) >= cutoff:
                    kept.append(entry)
            except ValueError:
                logger.warning("Dropping log entry with unparseable time %r", entry.time)
        dropped = len(self._entries) - len(kept)
        if dropped:
            logger.debug("Retention trim dropped %d entries", dropped)
        self._entries = kept

    def _persist(self) -> None:
        try:
            write_document(self.path, [e.model_dump() for e in self._entries])
        except PersistenceError as exc:
            logger.error("Failed to persist logs: %s", exc)

    # ------------------------------------------------------------------
    def append(self, entry: LogEntry) -> LogEntry:
        with self._lock:
            self._entries.append(entry)
            self._trim()
            self._persist()
        return entry

    def query(
        self,
        start: str | datetime | None = None,
        end: str | datetime | None = None,
    ) -> list[LogEntry]:
        """Entries with start <= time <= end (either bound optional), in insertion order."""
        s = _parse_bound("start", start)
        e = _parse_bound("end", end)
        with self._lock:
            entries = list(self._entries)
        if s is None and e is None:
            return entries
        out: list[LogEntry] = []
        for entry in entries:
            t = parse_iso(entry.time)
            if s is not None and t < s:
                continue
            if e is not None and t > e:
                continue
            out.append(entry)
        return out

    def summarize(self, days: int = DEFAULT_RETENTION_DAYS) -> LogSummary:
        """Per-zone daily counts over the last *days* UTC dates ending today."""
        if days < 1:
            raise ValidationError("days must be >= 1")
        now = self._clock()
        day_list = [(now - timedelta(days=i)).date().isoformat() for i in range(days - 1, -1, -1)]
        index = {d: i for i, d in enumerate(day_list)}

        with self._lock:
            entries = list(self._entries)

        counts: dict[str, list[int]] = {}
        for entry in entries:
            day = parse_iso(entry.time).date().isoformat()
            pos = index.get(day)
            if pos is None:
                continue
            counts.setdefault(entry.zone, [0] * days)[pos] += 1

        return LogSummary(
            days=day_list,
            zones=[ZoneSummary(zone=z, counts=c, total=sum(c)) for z, c in counts.items()],
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

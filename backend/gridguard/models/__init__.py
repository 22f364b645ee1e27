from gridguard.models.protection import (
    ProtectionRecord,
    ProtectRequest,
    ProtectResponse,
    SimulateBreakRequest,
    CommandRequest,
    CommandResponse,
)
from gridguard.models.log_entry import (
    LogEntry,
    LogCreate,
    LogCreateResponse,
    LogSummary,
    ZoneSummary,
)
from gridguard.models.telemetry import TelemetryAck, extract_zone_id, normalize_zone_id

__all__ = [
    "ProtectionRecord",
    "ProtectRequest",
    "ProtectResponse",
    "SimulateBreakRequest",
    "CommandRequest",
    "CommandResponse",
    "LogEntry",
    "LogCreate",
    "LogCreateResponse",
    "LogSummary",
    "ZoneSummary",
    "TelemetryAck",
    "extract_zone_id",
    "normalize_zone_id",
]

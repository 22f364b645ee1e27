"""GridGuard: zone telemetry ingestion and automatic protective isolation."""

__version__ = "0.1.0"

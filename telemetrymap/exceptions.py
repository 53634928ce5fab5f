"""Exception hierarchy for telemetrymap."""

from __future__ import annotations


class TelemetryMapError(Exception):
    """Base exception for all telemetrymap errors."""


class ConfigError(TelemetryMapError):
    """Invalid or unreadable display configuration."""


class SurfaceError(TelemetryMapError):
    """A rendering surface rejected or failed to apply a command."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        handle: str = "",
    ) -> None:
        self.operation = operation
        self.handle = handle
        super().__init__(message)

"""Custom exceptions for PomPulse."""

from pompulse.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_NOTIFICATION,
    ERROR_PERSISTENCE,
)


class PomPulseError(Exception):
    """Base exception for all PomPulse errors."""

    exit_code = ERROR_GENERAL

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class PersistenceError(PomPulseError):
    """Raised when the settings file cannot be read, parsed or written."""

    exit_code = ERROR_PERSISTENCE


class PlaybackError(PomPulseError):
    """Raised when a cue cannot be played (no device, missing file, denied)."""

    exit_code = ERROR_NOTIFICATION


class PermissionDeniedError(PomPulseError):
    """Raised when the platform refuses notification permission."""

    exit_code = ERROR_NOTIFICATION

"""
Error taxonomy for the entrance logger.

ValidationError never reaches the network; NetworkError and RemoteError both
send a visit record to the offline queue; GeolocationError aborts the action.
"""
from __future__ import annotations

import enum

from .const import GEOLOCATION_MESSAGES


class EntranceLoggerError(Exception):
    """Base class for all entrance logger errors."""


class ConfigError(EntranceLoggerError):
    """Configuration is missing or invalid."""


class AuthenticationError(EntranceLoggerError):
    """Operation attempted without an authenticated session."""


class ValidationError(EntranceLoggerError):
    """Input has a bad shape or is out of range."""


class NetworkError(EntranceLoggerError):
    """The request could not complete."""


class RemoteError(EntranceLoggerError):
    """The remote store answered with a non-2xx status or an ok:false body."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body}")


class GeolocationErrorKind(str, enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class GeolocationError(EntranceLoggerError):
    """The device could not provide a position."""

    def __init__(self, kind: GeolocationErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(detail or self.message)

    @property
    def message(self) -> str:
        """User-facing message for this failure kind."""
        return GEOLOCATION_MESSAGES[self.kind.value]

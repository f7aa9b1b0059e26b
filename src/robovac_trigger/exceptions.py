"""Custom exception hierarchy for robovac_trigger."""

from __future__ import annotations


class RobovacError(Exception):
    """Base exception for all robovac_trigger errors."""


class RobovacConfigError(RobovacError):
    """Configuration file missing, unreadable or malformed."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class RobovacConfigValidationError(RobovacConfigError):
    """Configuration parsed but cannot drive a run.

    Covers an unresolvable bucket, an invalid action, a malformed
    duration literal and a missing webhook URL.
    """


class RobovacConnectionError(RobovacError):
    """Could not set up the InfluxDB client."""

    def __init__(self, message: str, *, address: str = "") -> None:
        self.address = address
        super().__init__(message)


class RobovacQueryError(RobovacError):
    """Query failed or returned something that is not a single number."""

    def __init__(self, message: str, *, time_range: str = "") -> None:
        self.time_range = time_range
        super().__init__(message)


class RobovacWebhookError(RobovacError):
    """Transport-level failure while calling a vacuum webhook."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)

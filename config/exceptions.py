"""Custom exception hierarchy for Bandwidth Tracker.

None of these are fatal to the sampling loop. They exist so each failure
class can be caught and logged at the seam where it is recoverable.
"""

from typing import Optional


class BandwidthTrackerError(Exception):
    """Base exception for all Bandwidth Tracker errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class CounterSourceError(BandwidthTrackerError):
    """The interface byte counters could not be read this tick.

    Raised when:
    - The OS query itself fails
    - None of the monitored interfaces exist

    Examples:
        >>> raise CounterSourceError("No monitored interfaces found", {"interfaces": ["en0"]})
    """

    pass


class StorageError(BandwidthTrackerError):
    """Data persistence errors.

    Raised when there are issues with:
    - Writing the state file or its temp file
    - File permissions

    Examples:
        >>> raise StorageError("Failed to save state", {"path": "/path/to/file"})
    """

    pass


class ConfigurationError(BandwidthTrackerError):
    """Settings and configuration errors.

    Examples:
        >>> raise ConfigurationError("Unknown display mode", {"value": "bogus"})
    """

    pass

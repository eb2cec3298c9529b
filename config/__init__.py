"""Configuration module for Bandwidth Tracker.

Provides centralized constants, logging, and the exception hierarchy.
"""
from config.constants import (
    INTERVALS,
    NETWORK,
    STORAGE,
    THRESHOLDS,
    Intervals,
    NetworkConfig,
    StorageConfig,
    Thresholds,
)
from config.exceptions import (
    BandwidthTrackerError,
    ConfigurationError,
    CounterSourceError,
    StorageError,
)
from config.logging_config import LogContext, get_logger, log_exception, setup_logging

__all__ = [
    # Constants
    "INTERVALS",
    "THRESHOLDS",
    "STORAGE",
    "NETWORK",
    "Intervals",
    "Thresholds",
    "StorageConfig",
    "NetworkConfig",
    # Exceptions
    "BandwidthTrackerError",
    "CounterSourceError",
    "StorageError",
    "ConfigurationError",
    # Logging
    "setup_logging",
    "get_logger",
    "log_exception",
    "LogContext",
]

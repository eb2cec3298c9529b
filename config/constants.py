"""Centralized constants and configuration for Bandwidth Tracker.

All magic numbers for the sampling loop, history retention, persistence
and logging live here, so the engine components never hard-code them.

Usage:
    from config.constants import INTERVALS, THRESHOLDS, STORAGE

    tick = INTERVALS.TICK_SECONDS
    cap = THRESHOLDS.HISTORY_RETENTION_POINTS
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Intervals:
    """Time intervals for the sampling engine (in seconds)."""
    # Main loop: session time advances on every tick
    TICK_SECONDS: float = 1.0

    # Counter source is queried at this coarser cadence
    SAMPLE_SECONDS: float = 4.0

    # Minimum spacing between retained history points
    HISTORY_INTERVAL_SECONDS: float = 60.0

    # Gap handling (suspend, process downtime, clock jumps)
    GAP_THRESHOLD_SECONDS: float = 120.0
    GAP_BRIDGE_OFFSET_SECONDS: float = 60.0

    # Debounced persistence
    SAVE_INTERVAL_SECONDS: float = 60.0

    # Headless runner: how long the main thread pumps its run loop per pass
    RUN_LOOP_SECONDS: float = 1.0


@dataclass(frozen=True)
class Thresholds:
    """Size limits for retained data."""
    # 1440 points = 24h at 1-minute resolution
    HISTORY_RETENTION_POINTS: int = 1440


@dataclass(frozen=True)
class StorageConfig:
    """Storage and file-related configuration."""
    DATA_DIR_NAME: str = ".bandwidth-tracker"
    STATE_FILE: str = "network_stats.json"
    SETTINGS_FILE: str = "settings.json"
    LOG_FILE: str = "bandwidth_tracker.log"

    # Persisted record format version
    SCHEMA_VERSION: int = 1

    # Log rotation
    LOG_MAX_BYTES: int = 2_000_000  # 2MB
    LOG_BACKUP_COUNT: int = 3

    # Single-instance lock
    LOCK_NAME: str = "bandwidth-tracker"


@dataclass(frozen=True)
class NetworkConfig:
    """Counter source configuration."""
    # Interfaces skipped when no explicit interface list is configured
    LOOPBACK_PREFIXES: Tuple[str, ...] = ("lo",)


# Global instances - import these
INTERVALS = Intervals()
THRESHOLDS = Thresholds()
STORAGE = StorageConfig()
NETWORK = NetworkConfig()

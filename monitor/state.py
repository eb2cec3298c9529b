"""The sampler's aggregate state and its persisted record format.

SampleState is mutable and owned by exactly one MonitorController.
Everything handed to observers is a frozen StatsSnapshot instead.

The persisted record is a single JSON object with a schema_version and
one key per field. Every field has a default, so a record written by an
older build that lacks a field still loads.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from config import STORAGE, THRESHOLDS
from monitor.history import HistoryBuffer, HistoryPoint


@dataclass(frozen=True)
class StatsSnapshot:
    """Read-only copy of SampleState for presentation consumers."""

    upload_rate: float
    download_rate: float
    total_uploaded: int
    total_downloaded: int
    last_known_upload_counter: int
    last_known_download_counter: int
    is_monitoring: bool
    session_duration: float
    last_active_timestamp: Optional[float]
    started_at: float
    history: Tuple[HistoryPoint, ...]


def _non_negative_int(data: dict, key: str) -> int:
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{key} must be non-negative, got {value}")
    return value


def _finite_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"{key} is out of range") from e
    if not math.isfinite(number):
        raise ValueError(f"{key} must be finite, got {value}")
    return number


def _non_negative_float(data: dict, key: str) -> float:
    value = _finite_number(key, data.get(key, 0.0))
    if value < 0:
        raise ValueError(f"{key} must be non-negative, got {value}")
    return value


def _optional_timestamp(data: dict, key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    return _finite_number(key, value)


@dataclass
class SampleState:
    """Rates, totals, baselines and history of one tracking session.

    Attributes:
        upload_rate: Latest upload throughput in bytes/s.
        download_rate: Latest download throughput in bytes/s.
        total_uploaded: Bytes uploaded since the last reset.
        total_downloaded: Bytes downloaded since the last reset.
        last_known_upload_counter: Last raw OS sent counter (not a total).
        last_known_download_counter: Last raw OS received counter (not a total).
        is_monitoring: Whether the sampling loop is logically active.
        session_duration: Seconds spent actively monitoring.
        last_active_timestamp: Epoch seconds of the last sample or stop.
        started_at: Epoch seconds when this state was created or reset.
        history: Downsampled cumulative totals.
    """

    upload_rate: float = 0.0
    download_rate: float = 0.0
    total_uploaded: int = 0
    total_downloaded: int = 0
    last_known_upload_counter: int = 0
    last_known_download_counter: int = 0
    is_monitoring: bool = False
    session_duration: float = 0.0
    last_active_timestamp: Optional[float] = None
    started_at: float = field(default_factory=time.time)
    history: HistoryBuffer = field(default_factory=HistoryBuffer)

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            upload_rate=self.upload_rate,
            download_rate=self.download_rate,
            total_uploaded=self.total_uploaded,
            total_downloaded=self.total_downloaded,
            last_known_upload_counter=self.last_known_upload_counter,
            last_known_download_counter=self.last_known_download_counter,
            is_monitoring=self.is_monitoring,
            session_duration=self.session_duration,
            last_active_timestamp=self.last_active_timestamp,
            started_at=self.started_at,
            history=self.history.points(),
        )

    def to_dict(self) -> dict:
        return {
            "schema_version": STORAGE.SCHEMA_VERSION,
            "upload_rate": self.upload_rate,
            "download_rate": self.download_rate,
            "total_uploaded": self.total_uploaded,
            "total_downloaded": self.total_downloaded,
            "last_known_upload_counter": self.last_known_upload_counter,
            "last_known_download_counter": self.last_known_download_counter,
            "is_monitoring": self.is_monitoring,
            "session_duration": self.session_duration,
            "last_active_timestamp": self.last_active_timestamp,
            "started_at": self.started_at,
            "history": [point.to_dict() for point in self.history],
        }

    @classmethod
    def from_dict(cls, data: Any, capacity: int = THRESHOLDS.HISTORY_RETENTION_POINTS) -> 'SampleState':
        """Build a state from a persisted record.

        Missing fields take their defaults; unknown keys are ignored.

        Raises:
            ValueError: If the record is not an object or a field has the
                wrong type, a negative count or a non-finite number.
        """
        if not isinstance(data, dict):
            raise ValueError(f"State record must be an object, got {type(data).__name__}")

        raw_history = data.get("history", [])
        if not isinstance(raw_history, list):
            raise ValueError("history must be a list")
        points = [HistoryPoint.from_dict(item) for item in raw_history]
        # Stable sort keeps insertion order for equal timestamps
        points.sort(key=lambda point: point.timestamp)

        is_monitoring = data.get("is_monitoring", False)
        if not isinstance(is_monitoring, bool):
            raise ValueError(f"is_monitoring must be a boolean, got {is_monitoring!r}")

        started_at = _optional_timestamp(data, "started_at")

        return cls(
            upload_rate=_non_negative_float(data, "upload_rate"),
            download_rate=_non_negative_float(data, "download_rate"),
            total_uploaded=_non_negative_int(data, "total_uploaded"),
            total_downloaded=_non_negative_int(data, "total_downloaded"),
            last_known_upload_counter=_non_negative_int(data, "last_known_upload_counter"),
            last_known_download_counter=_non_negative_int(data, "last_known_download_counter"),
            is_monitoring=is_monitoring,
            session_duration=_non_negative_float(data, "session_duration"),
            last_active_timestamp=_optional_timestamp(data, "last_active_timestamp"),
            started_at=started_at if started_at is not None else time.time(),
            history=HistoryBuffer(capacity=capacity, points=points),
        )


__all__ = ["SampleState", "StatsSnapshot"]

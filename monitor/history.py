"""Downsampled, capacity-bounded history of cumulative totals.

Samples arrive every few seconds, but the history keeps at most one
point per minute and at most a day's worth of points, so memory use is
independent of the sampling cadence.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from config import INTERVALS, THRESHOLDS, get_logger

logger = get_logger(__name__)


def _new_point_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class HistoryPoint:
    """Cumulative totals at one instant. Immutable once created.

    Attributes:
        timestamp: Epoch seconds.
        cumulative_upload: Total uploaded bytes at that instant.
        cumulative_download: Total downloaded bytes at that instant.
        id: Unique identifier, used by chart consumers as a stable key.
    """

    timestamp: float
    cumulative_upload: int
    cumulative_download: int
    id: str = field(default_factory=_new_point_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "cumulative_upload": self.cumulative_upload,
            "cumulative_download": self.cumulative_download,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'HistoryPoint':
        """Build a point from a persisted record.

        Raises:
            ValueError: If a field is missing, has the wrong type, or is
                negative or non-finite.
        """
        if not isinstance(data, dict):
            raise ValueError(f"History point must be an object, got {type(data).__name__}")
        try:
            timestamp = data["timestamp"]
            upload = data["cumulative_upload"]
            download = data["cumulative_download"]
        except KeyError as e:
            raise ValueError(f"History point is missing {e}") from e
        for value in (upload, download):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Cumulative totals must be non-negative integers: {data}")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"History timestamp must be a number: {data}")
        try:
            timestamp = float(timestamp)
        except OverflowError as e:
            raise ValueError(f"History timestamp is out of range: {data}") from e
        if not math.isfinite(timestamp):
            raise ValueError(f"History timestamp must be finite: {data}")
        return cls(
            timestamp=timestamp,
            cumulative_upload=upload,
            cumulative_download=download,
            id=str(data.get("id") or _new_point_id()),
        )


class HistoryBuffer:
    """Append-only, insertion-ordered sequence of HistoryPoints.

    Points are never modified or re-ordered; eviction of the oldest
    entries is the only way one leaves the buffer.

    Attributes:
        capacity: Maximum number of retained points.
        min_interval: Minimum seconds between points added by record().
    """

    def __init__(
        self,
        capacity: int = THRESHOLDS.HISTORY_RETENTION_POINTS,
        min_interval: float = INTERVALS.HISTORY_INTERVAL_SECONDS,
        points: Iterable[HistoryPoint] = (),
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.min_interval = min_interval
        self._points: List[HistoryPoint] = []
        for point in points:
            self.append(point)
        self.evict_overflow()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[HistoryPoint]:
        return iter(tuple(self._points))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HistoryBuffer):
            return NotImplemented
        return self.capacity == other.capacity and self._points == other._points

    def __repr__(self) -> str:
        return f"HistoryBuffer(len={len(self._points)}, capacity={self.capacity})"

    @property
    def last(self) -> Optional[HistoryPoint]:
        return self._points[-1] if self._points else None

    def points(self) -> Tuple[HistoryPoint, ...]:
        return tuple(self._points)

    def should_record(self, timestamp: float) -> bool:
        """Whether a point at timestamp satisfies the append interval."""
        last = self.last
        return last is None or timestamp - last.timestamp >= self.min_interval

    def record(self, timestamp: float, upload: int, download: int) -> Optional[HistoryPoint]:
        """Offer the current totals; keeps them only if the interval has passed.

        Returns:
            The new point, or None if it was too soon since the last one.
        """
        if not self.should_record(timestamp):
            return None
        point = HistoryPoint(
            timestamp=timestamp,
            cumulative_upload=upload,
            cumulative_download=download,
        )
        self.append(point)
        self.evict_overflow()
        return point

    def append(self, point: HistoryPoint) -> bool:
        """Append a point without the interval check.

        Points older than the current last point are refused so the
        buffer stays ordered by timestamp.

        Returns:
            True if appended.
        """
        last = self.last
        if last is not None and point.timestamp < last.timestamp:
            logger.debug(
                f"Refusing out-of-order history point {point.timestamp} < {last.timestamp}"
            )
            return False
        self._points.append(point)
        return True

    def evict_overflow(self, cap: Optional[int] = None) -> int:
        """Drop the oldest points beyond cap in a single pass.

        Returns:
            Number of points removed.
        """
        cap = self.capacity if cap is None else cap
        overflow = len(self._points) - cap
        if overflow <= 0:
            return 0
        del self._points[:overflow]
        return overflow


__all__ = ["HistoryPoint", "HistoryBuffer"]

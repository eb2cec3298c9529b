"""Bridging of history across periods when nothing was sampled.

After a suspend or process downtime there are no samples for the gap.
Two flat points, one shortly after the last activity and one at resume
time, keep the chart from drawing a slope that would imply throughput
during the gap.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from config import INTERVALS, get_logger
from monitor.history import HistoryPoint

logger = get_logger(__name__)


class GapReconciler:
    """Produces synthetic history points for elapsed-time discontinuities.

    Attributes:
        threshold: Gaps at or below this many seconds are scheduling jitter.
        bridge_offset: Seconds after the last activity for the first bridge point.
    """

    def __init__(
        self,
        threshold: float = INTERVALS.GAP_THRESHOLD_SECONDS,
        bridge_offset: float = INTERVALS.GAP_BRIDGE_OFFSET_SECONDS,
    ) -> None:
        self.threshold = threshold
        self.bridge_offset = bridge_offset

    def is_gap(self, last_active_timestamp: Optional[float], now: float) -> bool:
        if last_active_timestamp is None:
            return False
        return now - last_active_timestamp > self.threshold

    def reconcile(
        self,
        last_active_timestamp: Optional[float],
        now: float,
        last_point: Optional[HistoryPoint],
        totals: Optional[Tuple[int, int]] = None,
    ) -> List[HistoryPoint]:
        """Synthesize bridging points for a gap, if there is one.

        Args:
            last_active_timestamp: When the monitor was last active.
            now: Resume time.
            last_point: Most recent history point, if any.
            totals: Last known (upload, download) totals. Defaults to the
                values of last_point.

        Returns:
            Zero or two points, flat at the last known totals.
        """
        if last_point is None or not self.is_gap(last_active_timestamp, now):
            return []

        upload, download = totals if totals is not None else (
            last_point.cumulative_upload,
            last_point.cumulative_download,
        )
        logger.info(f"Bridging {now - last_active_timestamp:.0f}s gap in history")
        return [
            HistoryPoint(
                timestamp=last_active_timestamp + self.bridge_offset,
                cumulative_upload=upload,
                cumulative_download=download,
            ),
            HistoryPoint(
                timestamp=now,
                cumulative_upload=upload,
                cumulative_download=download,
            ),
        ]


__all__ = ["GapReconciler"]

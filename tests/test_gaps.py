"""Tests for monitor/gaps.py"""

from monitor.gaps import GapReconciler
from monitor.history import HistoryPoint

LAST_ACTIVE = 1_700_000_000.0


def _last_point() -> HistoryPoint:
    return HistoryPoint(
        timestamp=LAST_ACTIVE - 30, cumulative_upload=1000, cumulative_download=2000
    )


class TestGapReconciler:
    """Tests for the GapReconciler class."""

    def test_gap_over_threshold_produces_two_flat_points(self):
        reconciler = GapReconciler()

        points = reconciler.reconcile(LAST_ACTIVE, LAST_ACTIVE + 121, _last_point())

        assert len(points) == 2
        assert points[0].timestamp == LAST_ACTIVE + 60
        assert points[1].timestamp == LAST_ACTIVE + 121
        for point in points:
            assert point.cumulative_upload == 1000
            assert point.cumulative_download == 2000

    def test_short_gap_produces_nothing(self):
        reconciler = GapReconciler()
        assert reconciler.reconcile(LAST_ACTIVE, LAST_ACTIVE + 30, _last_point()) == []

    def test_gap_exactly_at_threshold_is_jitter(self):
        reconciler = GapReconciler()
        assert reconciler.reconcile(LAST_ACTIVE, LAST_ACTIVE + 120, _last_point()) == []

    def test_no_prior_history_produces_nothing(self):
        reconciler = GapReconciler()
        assert reconciler.reconcile(LAST_ACTIVE, LAST_ACTIVE + 86400, None) == []

    def test_no_last_active_produces_nothing(self):
        reconciler = GapReconciler()
        assert reconciler.reconcile(None, LAST_ACTIVE, _last_point()) == []

    def test_explicit_totals_win_over_last_point(self):
        reconciler = GapReconciler()

        points = reconciler.reconcile(
            LAST_ACTIVE, LAST_ACTIVE + 500, _last_point(), totals=(1500, 2600)
        )

        assert [(p.cumulative_upload, p.cumulative_download) for p in points] == [
            (1500, 2600),
            (1500, 2600),
        ]

    def test_custom_threshold(self):
        reconciler = GapReconciler(threshold=10.0, bridge_offset=5.0)

        points = reconciler.reconcile(LAST_ACTIVE, LAST_ACTIVE + 11, _last_point())

        assert [p.timestamp for p in points] == [LAST_ACTIVE + 5, LAST_ACTIVE + 11]

"""Integration tests for Bandwidth Tracker.

These tests run real stores, settings and event buses across several
controller lifetimes. Only the clock and the OS counters are faked.

Run with: pytest -m integration
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

import bandwidth_tracker
from app.controller import MonitorController, MonitorState
from app.dependencies import AppDependencies
from app.events import EventBus, EventType
from config.logging_config import ROOT_LOGGER_NAME
from config.singleton import SingletonLock
from monitor.state import SampleState
from storage.settings import DisplayMode, SettingsManager
from storage.state_store import StateStore
from tests.mocks import FakeClock, FakeCounterSource

# Ticks are driven by hand
NEVER = 3600.0


def _controller(data_dir: Path, clock: FakeClock, source: FakeCounterSource) -> MonitorController:
    deps = AppDependencies(
        counter_source=source,
        store=StateStore(data_dir=data_dir, clock=clock),
        settings=SettingsManager(data_dir),
        event_bus=EventBus(async_mode=False),
    )
    return MonitorController(deps, clock=clock, tick_interval=NEVER)


def _run(controller: MonitorController, clock: FakeClock, source: FakeCounterSource,
         seconds: int, rate: int) -> None:
    """Tick once per second, with counters growing by rate bytes/s."""
    for _ in range(seconds):
        clock.advance(1)
        sample = source.read()
        source.set_counters(sample.bytes_sent + rate, sample.bytes_recv + 2 * rate)
        controller.tick()


@pytest.mark.integration
class TestRestartCycle:
    """State survives process restarts and downtime."""

    def test_totals_survive_restart(self, temp_data_dir):
        clock = FakeClock()
        source = FakeCounterSource(sent=10_000, recv=20_000)

        first = _controller(temp_data_dir, clock, source)
        first.start()
        _run(first, clock, source, seconds=121, rate=100)
        before = first.snapshot()
        first.shutdown()

        # Ten seconds of downtime with traffic still flowing
        clock.advance(10)
        source.set_counters(source.read().bytes_sent + 1000, source.read().bytes_recv + 2000)

        second = _controller(temp_data_dir, clock, source)
        restored = second.snapshot()
        assert restored.total_uploaded == before.total_uploaded
        assert restored.history == before.history
        assert restored.is_monitoring is False

        second.start()
        assert second.state is MonitorState.RUNNING
        clock.advance(1)
        second.tick()

        after = second.snapshot()
        assert after.total_uploaded == before.total_uploaded + 1000
        assert after.upload_rate == pytest.approx(1000 / 11)
        second.shutdown()

    def test_long_downtime_is_bridged_after_restart(self, temp_data_dir):
        clock = FakeClock()
        source = FakeCounterSource(sent=10_000, recv=20_000)

        first = _controller(temp_data_dir, clock, source)
        first.start()
        _run(first, clock, source, seconds=70, rate=10)
        first.shutdown()
        stopped_at = clock()
        points_before = len(first.snapshot().history)

        clock.advance(3600)
        second = _controller(temp_data_dir, clock, source)
        second.start()

        history = second.snapshot().history
        assert len(history) == points_before + 2
        assert [p.timestamp for p in history[-2:]] == [stopped_at + 60, clock()]
        assert history[-1].cumulative_upload == history[-2].cumulative_upload
        second.shutdown()

    def test_reboot_counters_do_not_corrupt_totals(self, temp_data_dir):
        clock = FakeClock()
        source = FakeCounterSource(sent=5_000_000, recv=9_000_000)

        first = _controller(temp_data_dir, clock, source)
        first.start()
        _run(first, clock, source, seconds=20, rate=50)
        total = first.snapshot().total_uploaded
        first.shutdown()

        # Host rebooted: counters start over
        clock.advance(300)
        source.set_counters(100, 200)
        second = _controller(temp_data_dir, clock, source)
        second.start()
        clock.advance(1)
        second.tick()

        assert second.snapshot().total_uploaded == total
        _run(second, clock, source, seconds=8, rate=50)
        assert second.snapshot().total_uploaded == total + 8 * 50
        second.shutdown()

    def test_state_file_is_versioned_json(self, temp_data_dir):
        clock = FakeClock()
        source = FakeCounterSource(sent=1, recv=1)
        controller = _controller(temp_data_dir, clock, source)
        controller.start()
        controller.shutdown()

        data = json.loads((temp_data_dir / "network_stats.json").read_text())
        assert data["schema_version"] == 1
        assert set(data) >= {"total_uploaded", "history", "last_active_timestamp"}


@pytest.mark.integration
class TestRunner:
    """The bandwidth-tracker entry point."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger(ROOT_LOGGER_NAME)
        saved = list(root.handlers)
        level = root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved
        root.setLevel(level)

    def test_main_starts_and_flushes(self, temp_data_dir):
        with patch("bandwidth_tracker._run_loop") as run_loop, \
                patch("bandwidth_tracker.signal.signal"), \
                patch("bandwidth_tracker.PowerEventObserver.install", return_value=False), \
                patch("bandwidth_tracker.atexit.register"):
            assert bandwidth_tracker.main(["--data-dir", str(temp_data_dir)]) == 0

        run_loop.assert_called_once()
        data = json.loads((temp_data_dir / "network_stats.json").read_text())
        assert data["is_monitoring"] is False
        # Lock released on exit
        lock = SingletonLock(lock_dir=temp_data_dir)
        assert lock.acquire()
        lock.release()

    def test_second_instance_exits(self, temp_data_dir):
        lock = SingletonLock(lock_dir=temp_data_dir)
        assert lock.acquire()
        try:
            with patch("bandwidth_tracker._run_loop") as run_loop, \
                    patch("bandwidth_tracker.signal.signal"):
                assert bandwidth_tracker.main(["--data-dir", str(temp_data_dir)]) == 1
            run_loop.assert_not_called()
        finally:
            lock.release()

    def test_subscribes_status_logger(self, temp_data_dir):
        with patch("bandwidth_tracker._run_loop"), \
                patch("bandwidth_tracker.signal.signal"), \
                patch("bandwidth_tracker.PowerEventObserver.install", return_value=False), \
                patch("bandwidth_tracker.atexit.register"), \
                patch("bandwidth_tracker.MonitorController") as controller_class:
            bandwidth_tracker.main(["--data-dir", str(temp_data_dir), "--debug"])

        deps = controller_class.call_args.args[0]
        assert deps.event_bus.get_subscriber_count(EventType.STATS_UPDATED) == 1
        controller_class.return_value.start.assert_called_once_with()
        controller_class.return_value.shutdown.assert_called_once_with()
        deps.event_bus.shutdown()

    @pytest.mark.parametrize(
        "mode,expected",
        [
            (DisplayMode.TOTAL, "Download Speed: 1.2 KB/s, Upload Speed: 300.0 B/s"),
            (DisplayMode.SPEED, "Total Download: 12.0 MB, Total Upload: 3.0 MB"),
        ],
    )
    def test_status_details_show_the_other_pair(self, mode, expected):
        snapshot = SampleState(
            upload_rate=300.0,
            download_rate=1228.8,
            total_uploaded=3 * 1024 ** 2,
            total_downloaded=12 * 1024 ** 2,
            started_at=1.0,
        ).snapshot()
        assert bandwidth_tracker._status_details(snapshot, mode) == expected

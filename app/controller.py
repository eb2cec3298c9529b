"""Sampling controller for Bandwidth Tracker.

Owns the SampleState and is the only thing that mutates it. A single
PeriodicTimer drives tick(), which advances session time, samples the
counters at a coarser cadence, feeds the rate engine and history, and
triggers debounced persistence.

Usage:
    from app.controller import MonitorController
    from app.dependencies import create_dependencies

    controller = MonitorController(create_dependencies())
    controller.start()
    ...
    controller.shutdown()
"""
import threading
import time
from enum import Enum
from typing import Callable, Optional

from app.dependencies import AppDependencies
from app.events import EventBus, EventType
from app.timer import PeriodicTimer
from config import INTERVALS, get_logger
from config.exceptions import CounterSourceError, StorageError
from monitor.gaps import GapReconciler
from monitor.rates import CounterSample, compute_rate, has_baseline
from monitor.state import SampleState, StatsSnapshot
from monitor.utils import format_title

logger = get_logger(__name__)


class MonitorState(Enum):
    """Controller lifecycle states."""
    STOPPED = "stopped"
    RUNNING = "running"


class MonitorController:
    """Orchestrates sampling, rate computation, history and persistence.

    Public operations may be called from any thread. Two locks are used:
    `_ops_lock` serializes the public operations, `_lock` guards the
    state itself and is the only one tick() takes, so stopping the timer
    never waits on a tick that is waiting on us.

    Attributes:
        deps: The dependency container with all components.
        event_bus: Where snapshots and lifecycle events are published.
    """

    def __init__(
        self,
        deps: AppDependencies,
        clock: Callable[[], float] = time.time,
        tick_interval: float = INTERVALS.TICK_SECONDS,
        sample_interval: float = INTERVALS.SAMPLE_SECONDS,
        gap_reconciler: Optional[GapReconciler] = None,
    ):
        """Initialize the controller and load persisted state.

        Args:
            deps: AppDependencies container with all required components.
            clock: Wall-clock source in epoch seconds.
            tick_interval: Seconds between ticks.
            sample_interval: Minimum seconds between counter reads.
            gap_reconciler: Override the default 120s/60s reconciler.
        """
        self.deps = deps
        self.event_bus = deps.event_bus or EventBus(async_mode=False)
        self._clock = clock
        self._sample_interval = sample_interval
        self._gaps = gap_reconciler or GapReconciler()

        self._lock = threading.RLock()
        self._ops_lock = threading.RLock()
        self._timer = PeriodicTimer(self.tick, tick_interval, name="SamplerTick")
        self._state = MonitorState.STOPPED

        self._stats = self._load_state()
        # The saved flag and rates described the previous process, not this one
        self._stats.is_monitoring = False
        self._stats.upload_rate = 0.0
        self._stats.download_rate = 0.0

        self._last_tick_time: Optional[float] = None
        self._last_sample_time: Optional[float] = None
        self._baseline_time: Optional[float] = None
        self._resume_on_wake = False
        self._discard_baseline = False

        logger.info("MonitorController initialized")

    def _load_state(self) -> SampleState:
        state = self.deps.store.load()
        if state is None:
            return SampleState(started_at=self._clock())
        logger.info(
            f"Restored totals up={state.total_uploaded} down={state.total_downloaded}, "
            f"{len(state.history)} history points"
        )
        return state

    # === Read-only access ===

    @property
    def state(self) -> MonitorState:
        return self._state

    def snapshot(self) -> StatsSnapshot:
        """Get a consistent, immutable copy of the current state."""
        with self._lock:
            return self._stats.snapshot()

    def display_title(self) -> str:
        """Menu bar text for the current state and display mode setting."""
        return format_title(self.snapshot(), self.deps.settings.get_display_mode())

    # === Lifecycle ===

    def start(self) -> None:
        """Start or resume sampling (STOPPED -> RUNNING).

        Bridges any gap since the last activity before the first tick.
        """
        with self._ops_lock:
            with self._lock:
                if self._state is MonitorState.RUNNING:
                    return
                now = self._clock()
                bridged = self._bridge_gap(self._stats.last_active_timestamp, now)

                if self._discard_baseline:
                    # Traffic while paused is not counted: resync on first sample
                    self._stats.last_known_upload_counter = 0
                    self._stats.last_known_download_counter = 0
                    self._discard_baseline = False

                last_active = self._stats.last_active_timestamp
                self._baseline_time = last_active if last_active is not None else now
                self._last_tick_time = now
                self._last_sample_time = None
                self._stats.is_monitoring = True
                self._state = MonitorState.RUNNING
                self.deps.store.mark_dirty()
                snapshot = self._stats.snapshot()

            self._timer.start()

        if bridged:
            self.event_bus.publish(EventType.GAP_BRIDGED, {"snapshot": snapshot, "points": bridged})
        self.event_bus.publish(EventType.MONITOR_STARTED, {"snapshot": snapshot})
        logger.info("Monitoring started")

    def pause(self) -> None:
        """Pause sampling at the user's request (RUNNING -> STOPPED)."""
        self._stop("paused", discard_baseline=True)

    def handle_suspend(self) -> None:
        """Host is about to sleep: stop and flush, remember to resume."""
        with self._ops_lock:
            was_running = self._state is MonitorState.RUNNING
            if not was_running:
                with self._lock:
                    self._flush()
            self._resume_on_wake = was_running
            if was_running:
                self._stop("suspended")

    def handle_wake(self) -> None:
        """Host woke up: resume if we were running when it went to sleep."""
        with self._ops_lock:
            resume = self._resume_on_wake
            self._resume_on_wake = False
            if resume:
                self.start()
            else:
                logger.debug("Wake while stopped; nothing to resume")

    def shutdown(self) -> None:
        """Orderly shutdown: stop, flush, and stop the event bus."""
        with self._ops_lock:
            if self._state is MonitorState.RUNNING:
                self._stop("shutdown")
            else:
                with self._lock:
                    self._flush()
            self._timer.stop()
        self.event_bus.shutdown()
        logger.info("MonitorController shut down")

    def reset(self) -> None:
        """Discard all statistics and start a fresh session.

        Valid in any state; always ends RUNNING.
        """
        with self._ops_lock:
            with self._lock:
                self._state = MonitorState.STOPPED
                self._stats = SampleState(started_at=self._clock())
                self._discard_baseline = False
                self._resume_on_wake = False
                self._flush()
                snapshot = self._stats.snapshot()
            self._timer.stop()
            self.event_bus.publish(EventType.STATS_RESET, {"snapshot": snapshot})
            logger.info("Statistics reset")
            self.start()

    def _stop(self, reason: str, discard_baseline: bool = False) -> None:
        with self._ops_lock:
            with self._lock:
                if self._state is not MonitorState.RUNNING:
                    return
                self._state = MonitorState.STOPPED
                self._stats.is_monitoring = False
                self._stats.upload_rate = 0.0
                self._stats.download_rate = 0.0
                self._stats.last_active_timestamp = self._clock()
                self._discard_baseline = discard_baseline
                self._flush()
                snapshot = self._stats.snapshot()
            self._timer.stop()

        self.event_bus.publish(EventType.MONITOR_STOPPED, {"snapshot": snapshot, "reason": reason})
        logger.info(f"Monitoring stopped ({reason})")

    # === Sampling loop ===

    def tick(self) -> None:
        """Run one iteration of the sampling loop."""
        now = self._clock()
        with self._lock:
            if self._state is not MonitorState.RUNNING:
                return
            bridged = self._advance_session(now)
            sample_due = (
                self._last_sample_time is None
                or now < self._last_sample_time
                or now - self._last_sample_time >= self._sample_interval
            )

        # Counter query may block; keep it outside the lock
        counters = self._read_counters() if sample_due else None

        with self._lock:
            if self._state is not MonitorState.RUNNING:
                return
            if sample_due:
                self._last_sample_time = now
            if counters is not None:
                self._apply_sample(counters, now)
            self.deps.store.mark_dirty()
            self._save_if_due()
            snapshot = self._stats.snapshot()

        if bridged:
            self.event_bus.publish(EventType.GAP_BRIDGED, {"snapshot": snapshot, "points": bridged})
        self.event_bus.publish(EventType.STATS_UPDATED, {"snapshot": snapshot})

    def _advance_session(self, now: float) -> int:
        """Add tick time to the session; bridge it instead if the clock jumped.

        Returns:
            Number of synthetic history points added.
        """
        previous = self._last_tick_time
        self._last_tick_time = now
        if previous is None:
            return 0
        elapsed = now - previous
        if self._gaps.is_gap(previous, now):
            # Host slept without telling us; not active time
            logger.info(f"Clock jumped {elapsed:.0f}s between ticks")
            return self._bridge_gap(previous, now)
        if elapsed > 0:
            self._stats.session_duration += elapsed
        return 0

    def _read_counters(self) -> Optional[CounterSample]:
        try:
            return self.deps.counter_source.read()
        except CounterSourceError as e:
            logger.debug(f"No sample this tick: {e}")
            return None

    def _apply_sample(self, counters: CounterSample, now: float) -> None:
        stats = self._stats
        previous = CounterSample(
            bytes_sent=stats.last_known_upload_counter,
            bytes_recv=stats.last_known_download_counter,
        )
        elapsed = now - self._baseline_time if self._baseline_time is not None else 0.0
        if elapsed <= 0 and self._baseline_time is not None:
            # Wall clock stepped back: keep the counter baseline so no bytes
            # are dropped, and measure the next sample from now
            logger.info(f"Clock moved back {-elapsed:.1f}s; keeping counter baseline")
            self._baseline_time = now
            return
        result = compute_rate(previous, counters, elapsed) if elapsed > 0 else None

        if result is None:
            if has_baseline(previous):
                logger.info(
                    f"Counter sample rejected (prev={previous}, curr={counters}, "
                    f"elapsed={elapsed:.1f}s); resynchronizing baseline"
                )
            else:
                logger.debug("Counter baseline established")
        else:
            stats.upload_rate = result.upload_rate
            stats.download_rate = result.download_rate
            stats.total_uploaded += result.upload_delta
            stats.total_downloaded += result.download_delta
            stats.last_active_timestamp = now
            stats.history.record(now, stats.total_uploaded, stats.total_downloaded)

        stats.last_known_upload_counter = counters.bytes_sent
        stats.last_known_download_counter = counters.bytes_recv
        self._baseline_time = now

    def _bridge_gap(self, last_active: Optional[float], now: float) -> int:
        history = self._stats.history
        points = self._gaps.reconcile(
            last_active,
            now,
            history.last,
            totals=(self._stats.total_uploaded, self._stats.total_downloaded),
        )
        added = sum(1 for point in points if history.append(point))
        history.evict_overflow()
        return added

    # === Persistence ===

    def _save_if_due(self) -> None:
        try:
            self.deps.store.save_if_due(self._stats)
        except StorageError as e:
            logger.warning(f"Debounced save failed, will retry: {e}")

    def _flush(self) -> None:
        try:
            self.deps.store.flush(self._stats)
        except StorageError as e:
            logger.warning(f"Forced save failed: {e}")

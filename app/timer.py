"""Periodic timer that drives the sampling loop.

One background thread per timer. Cancellation is explicit: stop() sets
a threading.Event that also serves as the sleep, so the loop wakes
immediately instead of finishing its current interval.

Usage:
    from app.timer import PeriodicTimer

    timer = PeriodicTimer(controller.tick, interval=1.0)
    timer.start()
    ...
    timer.stop()
"""

import threading
from typing import Callable, Optional

from config import get_logger, log_exception

logger = get_logger(__name__)


class PeriodicTimer:
    """Calls a function every `interval` seconds on a daemon thread.

    Exceptions raised by the callback are logged and the loop keeps
    running; the next tick is the retry.

    Example:
        >>> timer = PeriodicTimer(callback, interval=1.0)
        >>> timer.start()
        >>> timer.is_running
        True
        >>> timer.stop()
    """

    def __init__(self, callback: Callable[[], None], interval: float, name: str = "PeriodicTimer"):
        """Initialize the timer.

        Args:
            callback: Function to call on each tick, with no arguments.
            interval: Time between ticks in seconds.
            name: Thread name, shown in logs and debuggers.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._callback = callback
        self._interval = interval
        self._name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def _run(self, stop_event: threading.Event) -> None:
        # wait() returns True once stop is requested
        while not stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                log_exception(logger, f"{self._name} callback failed", e)

    def start(self) -> None:
        """Start ticking. No-op if already running."""
        with self._lock:
            if self.is_running:
                return
            # Fresh event per run so a stale thread never sees a cleared flag
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), daemon=True, name=self._name
            )
            self._thread.start()
        logger.debug(f"{self._name} started with interval {self._interval}s")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop ticking and wait for the thread to exit.

        Safe to call from inside the callback; the join is skipped then.
        """
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.debug(f"{self._name} stopped")

#!/usr/bin/env python3
"""
Bandwidth Tracker - background network usage sampler.
Tracks upload/download rates and totals, keeps a 24h history, and
survives restarts and sleep/wake cycles.
"""
import argparse
import atexit
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from app.controller import MonitorController
from app.dependencies import create_dependencies
from app.events import Event, EventType
from app.power import PowerEventObserver
from config import INTERVALS, STORAGE, get_logger, setup_logging
from config.singleton import SingletonLock
from monitor.state import StatsSnapshot
from monitor.utils import format_bytes, format_duration, format_title
from storage.settings import DisplayMode

logger = get_logger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track network bandwidth usage.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path.home() / STORAGE.DATA_DIR_NAME,
        help="Directory for state, settings and logs",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _status_details(snapshot: StatsSnapshot, mode: DisplayMode) -> str:
    """The popover pair: whichever values the menu bar is not showing."""
    down_label, up_label = mode.popover_labels
    if mode is DisplayMode.SPEED:
        down = format_bytes(snapshot.total_downloaded)
        up = format_bytes(snapshot.total_uploaded)
    else:
        down = format_bytes(snapshot.download_rate, speed=True)
        up = format_bytes(snapshot.upload_rate, speed=True)
    return f"{down_label} {down}, {up_label} {up}"


def _run_loop(stop_event: threading.Event, use_cocoa: bool) -> None:
    """Block the main thread until stop_event is set.

    With Cocoa the main run loop must be pumped for NSWorkspace
    notifications to be delivered.
    """
    if use_cocoa:
        from Foundation import NSDate, NSRunLoop

        run_loop = NSRunLoop.currentRunLoop()
        while not stop_event.is_set():
            run_loop.runUntilDate_(NSDate.dateWithTimeIntervalSinceNow_(INTERVALS.RUN_LOOP_SECONDS))
    else:
        while not stop_event.wait(INTERVALS.RUN_LOOP_SECONDS):
            pass


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the tracker."""
    args = _parse_args(argv)

    setup_logging(data_dir=args.data_dir, debug=args.debug, console_output=True)
    logger.info("Bandwidth Tracker starting...")

    lock = SingletonLock(lock_dir=args.data_dir)
    if not lock.acquire():
        pid = lock.get_running_pid()
        logger.error(f"Another instance is already running (PID {pid})")
        return 1
    atexit.register(lock.release)

    deps = create_dependencies(data_dir=args.data_dir)
    controller = MonitorController(deps)
    logger.info(f"State file: {deps.store.get_data_file_path()}")

    def log_status(event: Event) -> None:
        snapshot = event.data["snapshot"]
        mode = deps.settings.get_display_mode()
        logger.debug(
            f"{format_title(snapshot, mode)} [{_status_details(snapshot, mode)}] "
            f"(session {format_duration(snapshot.session_duration)})"
        )

    deps.event_bus.subscribe(EventType.STATS_UPDATED, log_status)

    stop_event = threading.Event()

    def signal_handler(signum, frame):
        """Handle SIGTERM/SIGINT by leaving the run loop; shutdown flushes."""
        logger.info(f"Received signal {signum}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    observer = PowerEventObserver(controller)
    try:
        controller.start()
        use_cocoa = observer.install()
        _run_loop(stop_event, use_cocoa)
    except Exception as e:
        logger.critical(f"Tracker crashed: {e}", exc_info=True)
        raise
    finally:
        # Ensure state is flushed on any exit
        observer.uninstall()
        controller.shutdown()
        lock.release()

    logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())

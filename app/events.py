"""Event bus for publishing sampler state to observers.

Decouples the controller from whatever presents its state: a menu bar
app, a log line, or a test can subscribe without the controller knowing.

Usage:
    from app.events import EventBus, EventType

    bus = EventBus(async_mode=False)
    bus.subscribe(EventType.STATS_UPDATED, lambda e: print(e.data["snapshot"]))
"""
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from config import get_logger

logger = get_logger(__name__)


class EventType(Enum):
    """Types of events that can be published/subscribed."""

    # Published on every tick with the latest snapshot
    STATS_UPDATED = auto()

    # Lifecycle
    MONITOR_STARTED = auto()
    MONITOR_STOPPED = auto()
    STATS_RESET = auto()

    # History bridged across a gap
    GAP_BRIDGED = auto()


@dataclass
class Event:
    """Represents an event with type and data.

    Attributes:
        event_type: The type of event.
        data: Event-specific data; state events carry a "snapshot".
        timestamp: When the event was created.
        source: Optional identifier of the event source.
    """
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    source: Optional[str] = None

    def __str__(self) -> str:
        return f"Event({self.event_type.name}, data={self.data})"


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """Thread-safe publish/subscribe event bus.

    In async mode events are delivered from a background worker thread so
    a slow subscriber never stalls the sampling tick. Sync mode delivers
    inline, which is what tests use.

    Events published before shutdown() are still delivered: the worker
    drains its queue up to the stop marker before exiting. After
    shutdown, publish() delivers inline.
    """

    def __init__(self, async_mode: bool = True):
        self._subscribers: Dict[EventType, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._event_queue: "queue.Queue[Optional[Event]]" = queue.Queue()
        self._worker_thread: Optional[threading.Thread] = None

        if async_mode:
            self._start_worker()

    @property
    def is_async(self) -> bool:
        thread = self._worker_thread
        return thread is not None and thread.is_alive()

    def _start_worker(self) -> None:
        """Start the background event processing thread."""
        self._worker_thread = threading.Thread(
            target=self._process_events,
            daemon=True,
            name="EventBus-Worker"
        )
        self._worker_thread.start()
        logger.debug("EventBus worker thread started")

    def _process_events(self) -> None:
        """Deliver queued events until the stop marker (None) arrives."""
        while True:
            event = self._event_queue.get()
            try:
                if event is None:
                    return
                self._dispatch_event(event)
            finally:
                self._event_queue.task_done()

    def _dispatch_event(self, event: Event) -> None:
        """Dispatch event to all subscribers."""
        with self._lock:
            handlers = self._subscribers.get(event.event_type, []).copy()

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event.event_type.name}: {e}",
                    exc_info=True
                )

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to an event type."""
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(handler)

        logger.debug(f"Subscribed to {event_type.name}")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        """Unsubscribe from an event type.

        Returns:
            True if handler was found and removed, False otherwise.
        """
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                logger.debug(f"Unsubscribed from {event_type.name}")
                return True
        return False

    def publish(self, event_type: EventType, data: Optional[Dict[str, Any]] = None,
                source: Optional[str] = None) -> None:
        """Publish an event.

        Example:
            >>> bus.publish(EventType.STATS_RESET, {"snapshot": snapshot})
        """
        event = Event(
            event_type=event_type,
            data=data or {},
            source=source
        )

        with self._lock:
            # Checked under the lock so nothing is queued behind the stop marker
            queued = self._worker_thread is not None
            if queued:
                self._event_queue.put(event)
        if not queued:
            self._dispatch_event(event)

    def get_subscriber_count(self, event_type: EventType) -> int:
        """Get the number of subscribers for an event type."""
        with self._lock:
            return len(self._subscribers.get(event_type, []))

    def shutdown(self, timeout: float = 1.0) -> None:
        """Deliver pending events, then stop the worker thread."""
        with self._lock:
            thread = self._worker_thread
            self._worker_thread = None
        if thread is None:
            return
        self._event_queue.put(None)
        if thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.debug("EventBus shut down")

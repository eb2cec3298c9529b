"""Application module for Bandwidth Tracker.

Contains the components around the sampling engine:
- EventBus: Snapshot and lifecycle notifications for observers
- MonitorController: Sampling loop and state ownership, with DI
- PeriodicTimer: The single scheduled task driving the loop
- PowerEventObserver: Host sleep/wake notifications
"""

from app.controller import MonitorController, MonitorState
from app.dependencies import AppDependencies, create_dependencies
from app.events import Event, EventBus, EventType
from app.power import PowerEventObserver
from app.timer import PeriodicTimer

__all__ = [
    "AppDependencies",
    "Event",
    "EventBus",
    "EventType",
    "MonitorController",
    "MonitorState",
    "PeriodicTimer",
    "PowerEventObserver",
    "create_dependencies",
]

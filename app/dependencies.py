"""Dependency injection container for Bandwidth Tracker.

Provides a centralized way to create and wire the controller's
collaborators, making them easy to swap for fakes in tests.

Usage:
    from app.dependencies import create_dependencies

    deps = create_dependencies()
    deps.counter_source.read()
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from config import STORAGE, get_logger

if TYPE_CHECKING:
    from app.events import EventBus
    from monitor.counters import CounterSource
    from storage.settings import SettingsManager
    from storage.state_store import StateStore

logger = get_logger(__name__)


@dataclass
class AppDependencies:
    """Container for the controller's collaborators.

    Each field is a component that can be injected.
    """

    counter_source: "CounterSource"
    store: "StateStore"
    settings: "SettingsManager"

    # Event bus (optional, the controller creates a synchronous one if absent)
    event_bus: Optional["EventBus"] = None

    def __post_init__(self):
        logger.debug("AppDependencies container created")


def create_dependencies(
    data_dir: Optional[Path] = None, event_bus: Optional["EventBus"] = None
) -> AppDependencies:
    """Create all application dependencies.

    Args:
        data_dir: Override the default data directory.
        event_bus: Provide an existing event bus, or an async one is created.

    Returns:
        AppDependencies container with all components.
    """
    # Import here to avoid circular imports
    from app.events import EventBus
    from monitor.counters import CounterSource
    from storage.settings import get_settings_manager
    from storage.state_store import StateStore

    logger.info("Creating application dependencies...")

    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME

    settings = get_settings_manager(data_dir)
    store = StateStore(data_dir=data_dir)
    counter_source = CounterSource(settings.get_interfaces())

    if event_bus is None:
        event_bus = EventBus(async_mode=True)

    deps = AppDependencies(
        counter_source=counter_source,
        store=store,
        settings=settings,
        event_bus=event_bus,
    )

    logger.info("All dependencies created successfully")
    return deps

"""Pytest configuration and shared fixtures.

This module provides:
- Pytest markers for test categorization (unit, integration, macos_only)
- Temporary data directory fixtures
- Fake clock/counter source and a ready-wired controller factory
"""
import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator, List

import pytest

from app.controller import MonitorController
from app.dependencies import AppDependencies
from app.events import EventBus
from storage.state_store import StateStore
from tests.mocks import FakeClock, FakeCounterSource, MockSettingsManager

# Ticks are driven by hand; keep the real timer thread from ever firing
NEVER = 3600.0


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, isolated)")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "macos_only: mark test as requiring macOS")


# =============================================================================
# Directory and Path Fixtures
# =============================================================================


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_state_path(temp_data_dir: Path) -> Path:
    """Path where StateStore(temp_data_dir) keeps its record."""
    return temp_data_dir / "network_stats.json"


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_state_data() -> dict[str, Any]:
    """A persisted state record as written by the current schema."""
    return {
        "schema_version": 1,
        "upload_rate": 120.5,
        "download_rate": 2048.0,
        "total_uploaded": 1_000_000,
        "total_downloaded": 5_000_000,
        "last_known_upload_counter": 9_000_000,
        "last_known_download_counter": 40_000_000,
        "is_monitoring": True,
        "session_duration": 3600.0,
        "last_active_timestamp": 1_700_000_000.0,
        "started_at": 1_699_990_000.0,
        "history": [
            {
                "id": "a1",
                "timestamp": 1_699_999_880.0,
                "cumulative_upload": 900_000,
                "cumulative_download": 4_500_000,
            },
            {
                "id": "a2",
                "timestamp": 1_699_999_940.0,
                "cumulative_upload": 1_000_000,
                "cumulative_download": 5_000_000,
            },
        ],
    }


@pytest.fixture
def populated_state_file(temp_state_path: Path, sample_state_data: dict) -> Path:
    """Write the sample record to disk."""
    with open(temp_state_path, "w") as f:
        json.dump(sample_state_data, f)
    return temp_state_path


# =============================================================================
# Fakes
# =============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_source() -> FakeCounterSource:
    return FakeCounterSource()


@pytest.fixture
def state_store(temp_data_dir: Path, fake_clock: FakeClock) -> StateStore:
    return StateStore(data_dir=temp_data_dir, clock=fake_clock)


@pytest.fixture
def make_deps(
    state_store: StateStore, fake_source: FakeCounterSource
) -> Callable[[], AppDependencies]:
    """Factory for dependencies sharing one store and counter source."""

    def _make() -> AppDependencies:
        return AppDependencies(
            counter_source=fake_source,
            store=state_store,
            settings=MockSettingsManager(),
            event_bus=EventBus(async_mode=False),  # Sync mode for testing
        )

    return _make


@pytest.fixture
def make_controller(
    make_deps: Callable[[], AppDependencies], fake_clock: FakeClock
) -> Generator[Callable[..., MonitorController], None, None]:
    """Factory for controllers driven by the fake clock; all are shut down after the test."""
    created: List[MonitorController] = []

    def _make(**kwargs) -> MonitorController:
        kwargs.setdefault("tick_interval", NEVER)
        controller = MonitorController(make_deps(), clock=fake_clock, **kwargs)
        created.append(controller)
        return controller

    yield _make

    for controller in created:
        controller.shutdown()


@pytest.fixture
def controller(make_controller: Callable[..., MonitorController]) -> MonitorController:
    return make_controller()

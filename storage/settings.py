"""User settings for Bandwidth Tracker."""
import json
import threading
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from config import STORAGE, get_logger
from config.exceptions import ConfigurationError

logger = get_logger(__name__)


class DisplayMode(Enum):
    """Which pair of values goes in the menu bar; the other pair goes in the popover."""
    SPEED = "speed"    # Current rates in the menu bar (e.g., "↓ 1.2 KB/s ⋅ ↑ 300 B/s")
    TOTAL = "total"    # Cumulative totals in the menu bar (e.g., "↓ 12 MB ⋅ ↑ 3 MB")

    @property
    def popover_labels(self) -> Tuple[str, str]:
        """(download, upload) labels for the values not shown in the menu bar."""
        if self is DisplayMode.SPEED:
            return ("Total Download:", "Total Upload:")
        return ("Download Speed:", "Upload Speed:")


@dataclass
class AppSettings:
    """Application settings."""
    display_mode: str = DisplayMode.TOTAL.value
    interfaces: List[str] = field(default_factory=list)  # Empty = all non-loopback

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'AppSettings':
        mode = data.get("display_mode", DisplayMode.TOTAL.value)
        if mode not in {m.value for m in DisplayMode}:
            logger.warning(f"Ignoring unknown display mode {mode!r}")
            mode = DisplayMode.TOTAL.value
        interfaces = data.get("interfaces", [])
        if not isinstance(interfaces, list):
            interfaces = []
        return cls(
            display_mode=mode,
            interfaces=[str(name) for name in interfaces],
        )


class SettingsManager:
    """Manages application settings persistence."""

    DEFAULT_SETTINGS_FILE = STORAGE.SETTINGS_FILE

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.settings_file = data_dir / self.DEFAULT_SETTINGS_FILE
        self._lock = threading.Lock()
        self._settings: AppSettings = AppSettings()
        self._load()

    def _load(self) -> None:
        """Load settings from file."""
        if not self.settings_file.exists():
            self._settings = AppSettings()
            return
        try:
            with open(self.settings_file, encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file must contain an object")
            self._settings = AppSettings.from_dict(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load settings, using defaults: {e}")
            self._settings = AppSettings()

    def _save(self) -> None:
        """Save settings to file."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    # === Display Mode ===

    def get_display_mode(self) -> DisplayMode:
        """Get current display mode."""
        return DisplayMode(self._settings.display_mode)

    def set_display_mode(self, mode) -> None:
        """Set display mode from a DisplayMode or its string value.

        Raises:
            ConfigurationError: If the mode is unknown.
        """
        try:
            mode = DisplayMode(getattr(mode, "value", mode))
        except ValueError as e:
            raise ConfigurationError("Unknown display mode", {"value": mode}) from e
        with self._lock:
            self._settings.display_mode = mode.value
            self._save()

    # === Monitored Interfaces ===

    def get_interfaces(self) -> List[str]:
        """Interface names to monitor; empty means all non-loopback."""
        return list(self._settings.interfaces)

    def set_interfaces(self, interfaces: List[str]) -> None:
        with self._lock:
            self._settings.interfaces = [str(name) for name in interfaces]
            self._save()


def get_settings_manager(data_dir: Optional[Path] = None) -> SettingsManager:
    """Create a settings manager for the data directory."""
    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME
    return SettingsManager(data_dir)

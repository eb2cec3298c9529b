"""Data persistence components."""

from .settings import AppSettings, DisplayMode, SettingsManager, get_settings_manager
from .state_store import StateStore

__all__ = [
    "AppSettings",
    "DisplayMode",
    "SettingsManager",
    "StateStore",
    "get_settings_manager",
]

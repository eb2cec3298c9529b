"""Formatting helpers for presenting sampler state.

The engine never formats anything itself; these helpers are for the
presentation layer and the headless runner's status log.

Example:
    >>> from monitor.utils import format_bytes
    >>> format_bytes(1500000)
    '1.4 MB'
    >>> format_bytes(1500000, speed=True)
    '1.4 MB/s'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from monitor.state import StatsSnapshot

# Type alias for numeric values
NumericValue = Union[int, float]

SPEED_MODE = "speed"
TOTAL_MODE = "total"


def format_bytes(bytes_value: NumericValue, speed: bool = False) -> str:
    """Format bytes to human-readable string.

    Uses 1024 as the base for conversion.

    Args:
        bytes_value: The number of bytes to format.
        speed: If True, append '/s' suffix for speed display.

    Returns:
        Human-readable string like "1.4 MB" or "1.4 MB/s".

    Examples:
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(1024)
        '1.0 KB'
        >>> format_bytes(1099511627776)
        '1.0 TB'
    """
    suffix = "/s" if speed else ""
    if bytes_value == 0:
        return f"0 B{suffix}"

    value = float(bytes_value)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(value) < 1024.0:
            return f"{value:.1f} {unit}{suffix}"
        value /= 1024.0
    return f"{value:.1f} PB{suffix}"


def format_duration(seconds: NumericValue) -> str:
    """Format seconds to human-readable duration string.

    Examples:
        >>> format_duration(45)
        '45s'
        >>> format_duration(150)
        '2m 30s'
        >>> format_duration(3665)
        '1h 1m'
        >>> format_duration(90000)
        '1d 1h'
    """
    seconds = int(seconds)

    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes, secs = divmod(seconds, 60)
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"
    elif seconds < 86400:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    else:
        days = seconds // 86400
        hours = (seconds % 86400) // 3600
        return f"{days}d {hours}h" if hours else f"{days}d"


def format_title(snapshot: "StatsSnapshot", mode: object = TOTAL_MODE) -> str:
    """Menu bar text for a snapshot.

    Args:
        snapshot: The state to render.
        mode: "speed" shows current rates, "total" shows cumulative totals.
            A DisplayMode member works too.

    Returns:
        Text like "↓ 12.0 MB ⋅ ↑ 3.0 MB".
    """
    mode = getattr(mode, "value", mode)
    if mode == SPEED_MODE:
        down = format_bytes(snapshot.download_rate, speed=True)
        up = format_bytes(snapshot.upload_rate, speed=True)
    else:
        down = format_bytes(snapshot.total_downloaded)
        up = format_bytes(snapshot.total_uploaded)
    return f"↓ {down} ⋅ ↑ {up}"


__all__ = ["NumericValue", "format_bytes", "format_duration", "format_title"]

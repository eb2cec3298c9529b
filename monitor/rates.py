"""Throughput computation from two raw counter readings.

The rate engine is pure: it never touches totals or baselines. The
controller decides what to do with an accepted or rejected sample.

Example:
    >>> prev = CounterSample(bytes_sent=1000, bytes_recv=2000)
    >>> curr = CounterSample(bytes_sent=1500, bytes_recv=2500)
    >>> compute_rate(prev, curr, 5.0)
    RateResult(upload_delta=500, download_delta=500, upload_rate=100.0, download_rate=100.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CounterSample:
    """Cumulative byte counters summed over the monitored interfaces.

    Attributes:
        bytes_sent: Total bytes sent since the OS counter was last reset.
        bytes_recv: Total bytes received since the OS counter was last reset.
    """

    bytes_sent: int
    bytes_recv: int


@dataclass(frozen=True)
class RateResult:
    """Deltas and throughput for one accepted sample."""

    upload_delta: int
    download_delta: int
    upload_rate: float
    download_rate: float


def has_baseline(previous: CounterSample) -> bool:
    """True when a prior valid reading exists to measure against."""
    return previous.bytes_sent > 0 and previous.bytes_recv > 0


def is_monotonic(previous: CounterSample, current: CounterSample) -> bool:
    """True when neither counter went backwards."""
    return (
        current.bytes_sent >= previous.bytes_sent
        and current.bytes_recv >= previous.bytes_recv
    )


def compute_rate(
    previous: CounterSample, current: CounterSample, elapsed_seconds: float
) -> Optional[RateResult]:
    """Compute deltas and rates between two counter readings.

    A sample is rejected (None) when there is no baseline yet or when a
    counter went backwards, e.g. after interface re-enumeration or a
    reboot. Rejected samples are never clamped.

    Args:
        previous: The baseline reading.
        current: The new reading.
        elapsed_seconds: Wall-clock seconds between the two readings.

    Returns:
        RateResult on acceptance, None on rejection.

    Raises:
        ValueError: If elapsed_seconds is not positive.
    """
    if elapsed_seconds <= 0:
        raise ValueError(f"elapsed_seconds must be > 0, got {elapsed_seconds}")

    if not has_baseline(previous) or not is_monotonic(previous, current):
        return None

    upload_delta = current.bytes_sent - previous.bytes_sent
    download_delta = current.bytes_recv - previous.bytes_recv

    return RateResult(
        upload_delta=upload_delta,
        download_delta=download_delta,
        upload_rate=upload_delta / elapsed_seconds,
        download_rate=download_delta / elapsed_seconds,
    )


__all__ = ["CounterSample", "RateResult", "compute_rate", "has_baseline", "is_monotonic"]

"""Bandwidth sampling engine.

This package turns raw interface byte counters into rates, totals and a
downsampled history.

Modules:
    counters: Interface counter collection (psutil)
    rates: Side-effect-free rate computation with monotonicity guard
    history: Capacity-bounded history of cumulative totals
    gaps: Bridging history across suspend/downtime gaps
    state: SampleState, StatsSnapshot and the persisted record format
    utils: Formatting helpers

Example:
    >>> from monitor import CounterSource, compute_rate
    >>> source = CounterSource()
    >>> first = source.read()
    >>> second = source.read()
    >>> compute_rate(first, second, 4.0)
"""
from .counters import CounterSource
from .gaps import GapReconciler
from .history import HistoryBuffer, HistoryPoint
from .rates import CounterSample, RateResult, compute_rate
from .state import SampleState, StatsSnapshot
from .utils import format_bytes, format_duration, format_title

__all__ = [
    # Counter collection
    "CounterSource",
    "CounterSample",
    # Rate computation
    "RateResult",
    "compute_rate",
    # History
    "HistoryBuffer",
    "HistoryPoint",
    "GapReconciler",
    # State
    "SampleState",
    "StatsSnapshot",
    # Utilities
    "format_bytes",
    "format_duration",
    "format_title",
]

"""Interface byte counter collection using psutil.

Reads per-NIC cumulative counters and sums them over the monitored
interfaces. When no interface list is configured, every interface
except loopback is counted.

Example:
    >>> source = CounterSource(["en0", "en1"])
    >>> sample = source.read()
    >>> print(sample.bytes_sent, sample.bytes_recv)
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import psutil

from config import NETWORK, get_logger
from config.exceptions import CounterSourceError
from monitor.rates import CounterSample

logger = get_logger(__name__)


class CounterSource:
    """Reads cumulative sent/received bytes for a set of interfaces.

    Attributes:
        interfaces: Interface names to sum. Empty means all non-loopback.
    """

    def __init__(self, interfaces: Optional[Iterable[str]] = None) -> None:
        self.interfaces: List[str] = list(interfaces or [])

    def _is_monitored(self, name: str) -> bool:
        if self.interfaces:
            return name in self.interfaces
        return not name.startswith(NETWORK.LOOPBACK_PREFIXES)

    def read(self) -> CounterSample:
        """Query the OS for the current counters.

        Returns:
            CounterSample summed over the monitored interfaces.

        Raises:
            CounterSourceError: If the query fails or no monitored
                interface is present.
        """
        try:
            per_nic = psutil.net_io_counters(pernic=True)
        except (OSError, psutil.Error) as e:
            raise CounterSourceError(f"Failed to read interface counters: {e}") from e

        matched = [name for name in per_nic if self._is_monitored(name)]
        if not matched:
            raise CounterSourceError(
                "No monitored interfaces found",
                {"interfaces": self.interfaces, "available": sorted(per_nic)},
            )

        sent = sum(per_nic[name].bytes_sent for name in matched)
        recv = sum(per_nic[name].bytes_recv for name in matched)
        return CounterSample(bytes_sent=sent, bytes_recv=recv)


__all__ = ["CounterSource"]

from __future__ import annotations

import threading

from fx_platform.services.metrics.interface import MetricsInterface


def _key(name: str, tags: dict[str, str] | None) -> str:
    if not tags:
        return name
    return name + "{" + ",".join(f"{k}={tags[k]}" for k in sorted(tags)) + "}"


class MemoryMetrics(MetricsInterface):
    """In-memory metrics for test assertions.

    Tagged series are stored under ``name{k=v,...}``; the bare ``name`` also
    accumulates the untagged total for counters.
    """

    def __init__(self) -> None:
        self.counters: dict[str, float] = {}
        self.gauges: dict[str, float] = {}
        self.histograms: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, value: float = 1, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self.counters[name] = self.counters.get(name, 0) + value
            if tags:
                key = _key(name, tags)
                self.counters[key] = self.counters.get(key, 0) + value

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self.gauges[_key(name, tags)] = value

    def histogram(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self.histograms.setdefault(_key(name, tags), []).append(value)

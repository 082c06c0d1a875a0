"""Prometheus metrics implementation using prometheus_client."""

from __future__ import annotations

import threading

from fx_platform.services.metrics.interface import MetricsInterface
from fx_platform.services.secrets.interface import SecretsInterface


class PrometheusMetrics(MetricsInterface):
    """Exposes metrics on a Prometheus HTTP endpoint.

    Config (via secrets):
        METRICS_PROMETHEUS_PORT - Port for /metrics (default: 9091). 0 or
                                  empty disables the HTTP server.
        METRICS_PREFIX          - Prefix for every metric name (default: fx_).
    """

    def __init__(self, secrets: SecretsInterface) -> None:
        import prometheus_client as prom

        self._prom = prom
        self._prefix = secrets.get_or_default("METRICS_PREFIX", "fx_")
        self._metrics: dict[str, object] = {}
        self._lock = threading.Lock()

        port_str = secrets.get_or_default("METRICS_PROMETHEUS_PORT", "9091")
        port = int(port_str) if port_str else 0
        if port:
            prom.start_http_server(port)

    def _get(self, kind: type, name: str, tags: dict[str, str] | None):  # noqa: ANN202
        safe = self._prefix + name.replace("-", "_").replace(".", "_")
        label_names = sorted(tags) if tags else []
        key = f"{kind.__name__}:{safe}:{','.join(label_names)}"
        with self._lock:
            metric = self._metrics.get(key)
            if metric is None:
                metric = kind(safe, safe, label_names)
                self._metrics[key] = metric
        if label_names:
            return metric.labels(*[tags[n] for n in label_names])  # type: ignore[index]
        return metric

    def counter(self, name: str, value: float = 1, tags: dict[str, str] | None = None) -> None:
        self._get(self._prom.Counter, name, tags).inc(value)

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._get(self._prom.Gauge, name, tags).set(value)

    def histogram(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._get(self._prom.Histogram, name, tags).observe(value)

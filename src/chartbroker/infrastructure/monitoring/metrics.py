"""Prometheus-backed metrics collector."""

import re
import threading
from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

_INVALID = re.compile(r"[^a-zA-Z0-9_:]")


def metric_name(name: str, namespace: str = "chartbroker") -> str:
    """Dotted names become Prometheus names: ``storage.create_total`` -> ``chartbroker_storage_create_total``."""
    sanitized = _INVALID.sub("_", name)
    return f"{namespace}_{sanitized}" if namespace else sanitized


class MetricsCollector:
    """Creates counters and histograms on first use in a private registry."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "chartbroker") -> None:
        self.registry = registry or CollectorRegistry()
        self.namespace = namespace
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def _counter(self, name: str) -> Counter:
        with self._lock:
            counter = self._counters.get(name)
            if counter is None:
                counter = Counter(metric_name(name, self.namespace), f"Counter {name}", registry=self.registry)
                self._counters[name] = counter
            return counter

    def _histogram(self, name: str) -> Histogram:
        with self._lock:
            histogram = self._histograms.get(name)
            if histogram is None:
                histogram = Histogram(
                    metric_name(name, self.namespace) + "_seconds",
                    f"Duration of {name}",
                    registry=self.registry,
                )
                self._histograms[name] = histogram
            return histogram

    def increment_counter(self, name: str, value: float = 1.0) -> None:
        self._counter(name).inc(value)

    def record_time(self, name: str, seconds: float) -> None:
        self._histogram(name).observe(seconds)

    def counter_value(self, name: str) -> float:
        """Current value of a counter, 0 if it was never incremented."""
        value = self.registry.get_sample_value(metric_name(name, self.namespace))
        if value is None and not name.endswith("_total"):
            value = self.registry.get_sample_value(metric_name(name, self.namespace) + "_total")
        return value or 0.0

    def render(self) -> bytes:
        return generate_latest(self.registry)

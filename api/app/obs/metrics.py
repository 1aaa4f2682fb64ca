from __future__ import annotations
import time
from collections import Counter, defaultdict, deque
from typing import Dict, Any, Deque
from dataclasses import dataclass, field
from threading import RLock

@dataclass
class MetricPoint:
    timestamp: float
    value: float
    labels: Dict[str, str] = field(default_factory=dict)

class MetricsRegistry:
    """In-process counters and duration samples served by ``GET /metrics``."""

    def __init__(self, max_samples: int = 1000):
        self._lock = RLock()
        self._max_samples = max_samples
        self._counters: Dict[str, Counter] = defaultdict(Counter)
        self._histograms: Dict[str, Deque[MetricPoint]] = defaultdict(
            lambda: deque(maxlen=self._max_samples)
        )

    def increment_counter(self, name: str, labels: Dict[str, str] | None = None, value: float = 1.0):
        with self._lock:
            self._counters[name][self._make_key(name, labels)] += value

    def record_histogram(self, name: str, value: float, labels: Dict[str, str] | None = None):
        with self._lock:
            self._histograms[name].append(
                MetricPoint(timestamp=time.time(), value=value, labels=labels or {})
            )

    def counter_value(self, name: str, labels: Dict[str, str] | None = None) -> float:
        with self._lock:
            return self._counters[name][self._make_key(name, labels)]

    def get_metrics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "counters": {name: dict(values) for name, values in self._counters.items()},
                "histograms": self._summarize_histograms(),
                "timestamp": time.time()
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()

    def _make_key(self, name: str, labels: Dict[str, str] | None = None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def _summarize_histograms(self) -> Dict[str, Any]:
        summaries = {}
        for name, points in self._histograms.items():
            if not points:
                continue

            values = sorted(p.value for p in points)
            n = len(values)
            summaries[name] = {
                "count": n,
                "sum": sum(values),
                "min": values[0],
                "max": values[-1],
                "mean": sum(values) / n,
                "p50": values[int(n * 0.5)],
                "p95": values[min(n - 1, int(n * 0.95))],
            }
        return summaries

# Global metrics registry
metrics_registry = MetricsRegistry()

def inc_counter(name: str, labels: Dict[str, str] | None = None, value: float = 1.0):
    """Increment counter."""
    metrics_registry.increment_counter(name, labels, value)

def record_duration(name: str, duration_ms: float, labels: Dict[str, str] | None = None):
    """Record duration in milliseconds."""
    metrics_registry.record_histogram(name, duration_ms, labels)

"""
Observability module - Tracing, metrics, and logging.

Provides:
- OpenTelemetry distributed tracing
- Prometheus metrics for the prediction lifecycle
- In-process JSON metrics
- Structured logging with trace correlation
- Tracing and error-counting decorators
"""

from .otel import setup_tracing, shutdown_tracing
from .metrics import metrics_registry, inc_counter, record_duration
from .prometheus_metrics import prometheus_metrics
from .logging_setup import setup_logging, get_logger
from .decorators import traced, monitor_errors

__all__ = [
    "setup_tracing",
    "shutdown_tracing",
    "metrics_registry",
    "inc_counter",
    "record_duration",
    "prometheus_metrics",
    "setup_logging",
    "get_logger",
    "traced",
    "monitor_errors"
]

from __future__ import annotations
from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST
from app import __version__
from app.config import OTEL_SERVICE_NAME

REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

PREDICTIONS_SUBMITTED = Counter(
    'predictions_submitted_total',
    'Predictions submitted to the remote inference API',
    ['model']
)

PREDICTIONS_COMPLETED = Counter(
    'predictions_completed_total',
    'Predictions that reached an outcome, by outcome',
    ['model', 'outcome']
)

PREDICTION_DURATION = Histogram(
    'prediction_duration_seconds',
    'Time from submission to terminal status',
    ['model', 'outcome'],
    buckets=(1, 5, 10, 30, 60, 120, 300, 600, 1800, 3600)
)

POLL_ATTEMPTS = Counter(
    'prediction_poll_attempts_total',
    'Status requests issued while waiting for predictions'
)

POLL_ERRORS = Counter(
    'prediction_poll_errors_total',
    'Status requests that failed with a transport or protocol error'
)

BATCHES_TOTAL = Counter(
    'inference_batches_total',
    'Run-inference batches, by outcome',
    ['outcome']
)

SERVICE_INFO = Info(
    'service_info',
    'Service information'
)

class PrometheusMetrics:
    """Prometheus collectors for the prediction lifecycle."""

    def __init__(self):
        SERVICE_INFO.info({
            'version': __version__,
            'service': OTEL_SERVICE_NAME,
        })

    def record_request(self, method: str, endpoint: str, status_code: int, duration_seconds: float):
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    def record_submission(self, model: str):
        PREDICTIONS_SUBMITTED.labels(model=model).inc()

    def record_outcome(self, model: str, outcome: str, duration_seconds: float):
        PREDICTIONS_COMPLETED.labels(model=model, outcome=outcome).inc()
        PREDICTION_DURATION.labels(model=model, outcome=outcome).observe(duration_seconds)

    def record_poll(self, failed: bool = False):
        POLL_ATTEMPTS.inc()
        if failed:
            POLL_ERRORS.inc()

    def record_batch(self, outcome: str):
        BATCHES_TOTAL.labels(outcome=outcome).inc()

    def get_prometheus_metrics(self) -> bytes:
        return generate_latest()

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST

# Global Prometheus metrics instance
prometheus_metrics = PrometheusMetrics()

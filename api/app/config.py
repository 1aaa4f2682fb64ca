from __future__ import annotations
import os

def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)

# Replicate API Configuration
REPLICATE_API_BASE: str = os.getenv("REPLICATE_API_BASE", "https://api.replicate.com/v1").rstrip("/")
REPLICATE_WEB_BASE: str = os.getenv("REPLICATE_WEB_BASE", "https://replicate.com").rstrip("/")
REPLICATE_API_TOKEN: str | None = os.getenv("REPLICATE_API_TOKEN")
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

# Polling Configuration
POLL_INTERVAL_SECONDS: float = float(os.getenv("POLL_INTERVAL_SECONDS", "5"))
POLL_ERROR_BACKOFF_SECONDS: float = float(os.getenv("POLL_ERROR_BACKOFF_SECONDS", "10"))
POLL_MAX_ERRORS: int = int(os.getenv("POLL_MAX_ERRORS", "2"))
# Unset means no overall limit
POLL_MAX_WAIT_SECONDS: float | None = _optional_float("POLL_MAX_WAIT_SECONDS")

# Batch Configuration
BATCH_CONCURRENCY: int = max(1, int(os.getenv("BATCH_CONCURRENCY", "1")))

# OpenTelemetry Configuration
OTEL_EXPORTER_OTLP_ENDPOINT: str | None = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "replicate-runner")
TRACING_ENABLED: bool = os.getenv("TRACING_ENABLED", "true").lower() == "true"

# Logging Configuration
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_STRUCTURED: bool = os.getenv("LOG_STRUCTURED", "true").lower() == "true"

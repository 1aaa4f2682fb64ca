"""
Replicate Runner - run predictions on Replicate models from workflow hosts.

Provides:
- Prediction submission and status polling with bounded error tolerance
- Model input schema translation and version listing
- FastAPI surface for workflow hosts
- OpenTelemetry tracing, structured logging and Prometheus metrics
"""

__version__ = "1.0.0"
__description__ = "Runs Replicate predictions and waits for them to finish"

# Export main application
from .main import app

__all__ = ["app"]

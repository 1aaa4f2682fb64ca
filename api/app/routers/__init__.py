"""
API routers module.

Provides:
- Prediction runs
- Model version and input listing
- Health and metrics endpoints
"""

from . import health, metrics, models, predictions

__all__ = [
    "health",
    "metrics",
    "models",
    "predictions"
]

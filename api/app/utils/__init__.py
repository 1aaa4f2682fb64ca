"""
Utility functions and helpers.

Provides:
- Prediction polling policy
"""

from .polling import PollingPolicy, DEFAULT_POLLING_POLICY, default_sleep

__all__ = [
    "PollingPolicy",
    "DEFAULT_POLLING_POLICY",
    "default_sleep"
]

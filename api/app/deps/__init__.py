"""
Dependencies module - FastAPI dependency providers.

Provides:
- The shared Replicate API client
- The active polling policy
"""

from .replicate import get_replicate_client, get_polling_policy

__all__ = [
    "get_replicate_client",
    "get_polling_policy"
]

from __future__ import annotations
from fastapi import Request
from app.services.replicate_client import ReplicateClient
from app.utils.polling import DEFAULT_POLLING_POLICY, PollingPolicy

def get_replicate_client(request: Request) -> ReplicateClient:
    """The client opened in the application lifespan."""
    return request.app.state.replicate_client

def get_polling_policy(request: Request) -> PollingPolicy:
    return getattr(request.app.state, "polling_policy", DEFAULT_POLLING_POLICY)

from __future__ import annotations
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from app import __version__

router = APIRouter(tags=["health"])

@router.get("/health")
async def health(request: Request) -> JSONResponse:
    """Liveness plus whether the remote API client is open."""
    client = getattr(request.app.state, "replicate_client", None)
    client_open = client is not None and not client.is_closed
    return JSONResponse({
        "status": "ok" if client_open else "degraded",
        "version": __version__,
        "replicate_client": "open" if client_open else "closed",
    })

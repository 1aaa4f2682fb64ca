from __future__ import annotations
import os
import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
from app.obs.metrics import metrics_registry
from app.obs.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["metrics"])

@router.get("/metrics")
async def get_metrics() -> JSONResponse:
    """Application counters and latency summaries as JSON."""
    process = psutil.Process(os.getpid())
    return JSONResponse({
        **metrics_registry.get_metrics(),
        "system": {
            "cpu_percent": psutil.cpu_percent(),
            "process_memory_mb": process.memory_info().rss / 1024 / 1024,
        },
    })

@router.get("/metrics/prometheus")
async def get_prometheus_metrics() -> Response:
    """Metrics in Prometheus exposition format."""
    return Response(
        content=prometheus_metrics.get_prometheus_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )

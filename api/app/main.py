from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Callable, Optional
from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from . import __version__
from .config import LOG_LEVEL, LOG_STRUCTURED, TRACING_ENABLED
from .obs.otel import setup_tracing, shutdown_tracing
from .obs.logging_setup import setup_logging, get_logger
from .obs.middleware import MetricsMiddleware
from .middleware.request_id import RequestIDMiddleware
from .services.replicate_client import ReplicateClient
from .utils.polling import DEFAULT_POLLING_POLICY, PollingPolicy
from .routers import health, metrics, models, predictions

logger = get_logger(__name__)

ClientFactory = Callable[[], ReplicateClient]

def create_app(
    client_factory: ClientFactory = ReplicateClient,
    polling_policy: Optional[PollingPolicy] = None,
    enable_tracing: bool = TRACING_ENABLED,
) -> FastAPI:
    """Build the service around a Replicate client created at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(level=LOG_LEVEL, structured=LOG_STRUCTURED)
        if enable_tracing:
            setup_tracing()

        async with client_factory() as client:
            app.state.replicate_client = client
            app.state.polling_policy = polling_policy or DEFAULT_POLLING_POLICY
            logger.info("Replicate runner ready", version=__version__)
            try:
                yield
            finally:
                logger.info("Replicate runner shutting down")

        if enable_tracing:
            shutdown_tracing()

    app = FastAPI(
        title="Replicate Runner",
        version=__version__,
        description="Runs predictions on Replicate models and waits for them to finish",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(MetricsMiddleware)

    if enable_tracing:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="/health,/metrics,/metrics/prometheus")

    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(models.router)
    app.include_router(predictions.router)

    @app.get("/")
    async def root():
        return {
            "service": "Replicate Runner",
            "version": __version__,
            "endpoints": {
                "run": "POST /predictions/run - Run predictions and wait for results",
                "versions": "GET /models/{owner}/{name}/versions - List model versions",
                "properties": "GET /models/{owner}/{name}/versions/{version}/properties - List model inputs",
                "health": "/health",
                "metrics": "/metrics, /metrics/prometheus",
            },
        }

    return app

app = create_app()

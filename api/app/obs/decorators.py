from __future__ import annotations
import time
import functools
import inspect
from typing import Callable, Dict, Optional
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from app.obs.metrics import record_duration, inc_counter
from app.obs.logging_setup import get_logger

logger = get_logger(__name__)

def traced(
    operation_name: Optional[str] = None,
    attributes: Optional[Dict[str, str]] = None,
):
    """Wrap an async function in an OpenTelemetry span.

    Exceptions are recorded on the span and re-raised unchanged. The wall
    time of every call is recorded as ``function_duration_ms``.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                span.set_attribute("function.name", func.__name__)
                span.set_attribute("function.module", func.__module__)
                for key, value in (attributes or {}).items():
                    span.set_attribute(key, value)

                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    logger.error(
                        f"Function {func.__name__} failed",
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise
                finally:
                    duration_ms = (time.time() - start_time) * 1000
                    record_duration(
                        "function_duration_ms",
                        duration_ms,
                        {"function": func.__name__, "module": func.__module__}
                    )

        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"@traced only supports coroutine functions, got {func.__name__}")
        return async_wrapper

    return decorator

def monitor_errors(metric_name: str = "function_errors_total"):
    """Count exceptions raised by an async function, labelled by type."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                inc_counter(metric_name, {
                    "function": func.__name__,
                    "error_type": type(e).__name__
                })
                raise

        return async_wrapper

    return decorator

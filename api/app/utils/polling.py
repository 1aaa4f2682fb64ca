from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type
import httpx
from app.config import (
    POLL_INTERVAL_SECONDS,
    POLL_ERROR_BACKOFF_SECONDS,
    POLL_MAX_ERRORS,
    POLL_MAX_WAIT_SECONDS,
)

SleepFunc = Callable[[float], Awaitable[None]]

@dataclass(frozen=True)
class PollingPolicy:
    """Timing rules for waiting on a remote prediction.

    ``interval`` is slept before every status request, including the first.
    A failed request additionally sleeps ``error_backoff`` before the next
    interval. Up to ``max_errors`` failures are tolerated per job; the next
    one is fatal. ``max_wait`` caps total wall time and is off by default.
    """

    interval: float = POLL_INTERVAL_SECONDS
    error_backoff: float = POLL_ERROR_BACKOFF_SECONDS
    max_errors: int = POLL_MAX_ERRORS
    max_wait: Optional[float] = POLL_MAX_WAIT_SECONDS
    retry_on_exceptions: Tuple[Type[BaseException], ...] = (httpx.HTTPError, ValueError)

    def __post_init__(self):
        if self.interval < 0 or self.error_backoff < 0:
            raise ValueError("polling delays must be non-negative")
        if self.max_errors < 0:
            raise ValueError("max_errors must be non-negative")
        if self.max_wait is not None and self.max_wait <= 0:
            raise ValueError("max_wait must be positive when set")

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on_exceptions)

    def error_budget_exhausted(self, error_count: int) -> bool:
        return error_count > self.max_errors

DEFAULT_POLLING_POLICY = PollingPolicy()

async def default_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)

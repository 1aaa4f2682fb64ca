from __future__ import annotations
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
import httpx
from app.services.errors import (
    PollingTimeoutError,
    PollingTransportError,
    PredictionCanceledError,
    PredictionFailedError,
    SubmissionError,
)
from app.utils.polling import DEFAULT_POLLING_POLICY, PollingPolicy, SleepFunc, default_sleep
from app.obs.decorators import traced
from app.obs.metrics import inc_counter
from app.obs.prometheus_metrics import prometheus_metrics
from app.obs.logging_setup import get_logger

logger = get_logger(__name__)

class PredictionStatus(str, Enum):
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

class PollState(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

@dataclass
class PredictionJob:
    """A submitted prediction and what polling has observed about it so far."""

    status_url: str
    status: str
    payload: Dict[str, Any]
    model: str = ""
    id: Optional[str] = None
    state: PollState = PollState.PENDING
    poll_attempts: int = 0
    error_count: int = 0
    submitted_at: float = field(default_factory=time.monotonic)

    @property
    def is_terminal(self) -> bool:
        return self.state is not PollState.PENDING

@traced("prediction.submit")
async def submit(client, version: str, inputs: Dict[str, Any], model: str = "") -> PredictionJob:
    """Create a remote prediction and return a job ready to be polled.

    Raises ``SubmissionError`` when the call fails or the response carries no
    status URL. Submission is never retried.
    """
    try:
        payload = await client.create_prediction(version, inputs)
    except httpx.HTTPStatusError as e:
        raise SubmissionError(
            f"prediction submission rejected with HTTP {e.response.status_code}",
            payload=_error_body(e.response),
            cause=e,
        ) from e
    except (httpx.HTTPError, ValueError) as e:
        raise SubmissionError("prediction submission failed", cause=e) from e

    urls = payload.get("urls")
    status_url = urls.get("get") if isinstance(urls, Mapping) else None
    if not isinstance(status_url, str) or not status_url:
        logger.error("Submission response has no status URL", model=model, version=version)
        raise SubmissionError("missing status URL", payload=payload)

    job = PredictionJob(
        status_url=status_url,
        status=str(payload.get("status") or PredictionStatus.STARTING.value),
        payload=payload,
        model=model,
        id=payload.get("id"),
    )
    prometheus_metrics.record_submission(model)
    inc_counter("predictions_submitted_total", {"model": model})
    logger.info("Prediction submitted", prediction_id=job.id, model=model, status=job.status)
    return job

@traced("prediction.wait")
async def wait_for_completion(
    client,
    job: PredictionJob,
    policy: PollingPolicy = DEFAULT_POLLING_POLICY,
    sleep: SleepFunc = default_sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Dict[str, Any]:
    """Poll ``job`` until it succeeds and return the final payload.

    Raises ``PredictionFailedError`` or ``PredictionCanceledError`` on those
    terminal statuses, ``PollingTransportError`` once the error budget is
    spent and ``PollingTimeoutError`` if ``policy.max_wait`` elapses.
    """
    if job.is_terminal:
        raise RuntimeError(f"prediction {job.id} already finished as {job.state.value}")

    started = clock()
    while True:
        await sleep(policy.interval)

        waited = clock() - started
        if policy.max_wait is not None and waited >= policy.max_wait:
            job.state = PollState.FAILED
            _record_outcome(job, "timeout")
            raise PollingTimeoutError(
                f"prediction did not finish within {policy.max_wait:g}s",
                payload=job.payload,
                waited_seconds=waited,
            )

        job.poll_attempts += 1
        try:
            payload = await client.get_prediction(job.status_url)
        except Exception as e:
            if not policy.is_retryable(e):
                raise
            job.error_count += 1
            prometheus_metrics.record_poll(failed=True)
            if policy.error_budget_exhausted(job.error_count):
                job.state = PollState.FAILED
                _record_outcome(job, "poll_error")
                logger.error("Giving up on prediction status",
                             prediction_id=job.id,
                             attempts=job.poll_attempts,
                             error=str(e))
                raise PollingTransportError(
                    "error getting data from remote service", e, job.poll_attempts
                ) from e

            logger.warning("Prediction status request failed",
                           prediction_id=job.id,
                           error_count=job.error_count,
                           error=str(e),
                           backoff_seconds=policy.error_backoff)
            await sleep(policy.error_backoff)
            continue

        prometheus_metrics.record_poll()
        job.payload = payload
        job.status = str(payload.get("status") or "")

        if job.status == PredictionStatus.FAILED.value:
            job.state = PollState.FAILED
            _record_outcome(job, "failed")
            logger.warning("Prediction failed", prediction_id=job.id, remote_error=payload.get("error"))
            raise PredictionFailedError(payload)
        if job.status == PredictionStatus.CANCELED.value:
            job.state = PollState.FAILED
            _record_outcome(job, "canceled")
            logger.warning("Prediction canceled", prediction_id=job.id)
            raise PredictionCanceledError(payload)
        if job.status == PredictionStatus.SUCCEEDED.value:
            job.state = PollState.SUCCEEDED
            _record_outcome(job, "succeeded")
            logger.info("Prediction succeeded", prediction_id=job.id, attempts=job.poll_attempts)
            return payload

        logger.debug("Prediction pending", prediction_id=job.id, status=job.status)

def _record_outcome(job: PredictionJob, outcome: str) -> None:
    prometheus_metrics.record_outcome(job.model, outcome, time.monotonic() - job.submitted_at)
    inc_counter("predictions_completed_total", {"model": job.model, "outcome": outcome})

def _error_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return {"body": response.text[:2000]} if response.text else None
    return body if isinstance(body, dict) else {"body": body}

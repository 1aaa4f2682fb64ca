from __future__ import annotations
import httpx
import pytest
from app.services.errors import (
    PollingError,
    PollingTimeoutError,
    PollingTransportError,
    PredictionCanceledError,
    PredictionFailedError,
    SubmissionError,
)
from app.services.prediction_job import PollState, PredictionJob, submit, wait_for_completion
from app.obs.metrics import metrics_registry
from app.utils.polling import PollingPolicy
from tests.conftest import API_BASE, FakeSleep, prediction

STATUS_PATH = "/predictions/p1"

def _job() -> PredictionJob:
    return PredictionJob(
        status_url=f"{API_BASE}{STATUS_PATH}",
        status="starting",
        payload={},
        model="acme/painter",
        id="p1",
    )

@pytest.mark.asyncio
async def test_submit_sends_version_and_input(fake_api, make_client):
    fake_api.add("POST", "/predictions", prediction("p1", "starting"))

    async with make_client() as client:
        job = await submit(client, "v1", {"prompt": "a cat", "width": 512}, model="acme/painter")

    assert fake_api.bodies("POST", "/predictions") == [
        {"version": "v1", "input": {"prompt": "a cat", "width": 512}}
    ]
    request = fake_api.calls("POST", "/predictions")[0]
    assert request.headers["Authorization"] == "Bearer r8_test"
    assert job.status_url == f"{API_BASE}/predictions/p1"
    assert job.status == "starting"
    assert job.id == "p1"
    assert job.state is PollState.PENDING

@pytest.mark.asyncio
async def test_submit_without_status_url_fails(fake_api, make_client):
    response = {"id": "p1", "status": "starting", "urls": {}}
    fake_api.add("POST", "/predictions", response)

    async with make_client() as client:
        with pytest.raises(SubmissionError) as exc_info:
            await submit(client, "v1", {})

    assert exc_info.value.message == "missing status URL"
    assert exc_info.value.payload == response
    assert len(fake_api.calls("POST")) == 1

@pytest.mark.asyncio
@pytest.mark.parametrize("urls", ["oops", ["get"], {"get": 42}, {"get": ""}])
async def test_submit_with_malformed_urls_fails(fake_api, make_client, urls):
    response = {"id": "p1", "status": "starting", "urls": urls}
    fake_api.add("POST", "/predictions", response)

    async with make_client() as client:
        with pytest.raises(SubmissionError) as exc_info:
            await submit(client, "v1", {})

    assert exc_info.value.message == "missing status URL"
    assert exc_info.value.payload == response

@pytest.mark.asyncio
async def test_submit_rejected_is_not_retried(fake_api, make_client):
    fake_api.add("POST", "/predictions", httpx.Response(422, json={"detail": "invalid version"}))

    async with make_client() as client:
        with pytest.raises(SubmissionError) as exc_info:
            await submit(client, "bad", {})

    assert exc_info.value.payload == {"detail": "invalid version"}
    assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)
    assert len(fake_api.calls("POST")) == 1

@pytest.mark.asyncio
async def test_polling_until_succeeded(fake_api, make_client, sleeper, policy):
    final = {"status": "succeeded", "output": 42}
    fake_api.add("GET", STATUS_PATH, {"status": "starting"}, {"status": "processing"}, final)
    job = _job()

    async with make_client() as client:
        payload = await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    assert payload == final
    assert len(fake_api.calls("GET", STATUS_PATH)) == 3
    assert sleeper.calls == [5, 5, 5]
    assert job.state is PollState.SUCCEEDED
    assert job.poll_attempts == 3

@pytest.mark.asyncio
async def test_failed_status_stops_after_one_poll(fake_api, make_client, sleeper, policy):
    failed = {"id": "p1", "status": "failed", "error": "CUDA out of memory", "logs": "..."}
    fake_api.add("GET", STATUS_PATH, failed)
    job = _job()

    async with make_client() as client:
        with pytest.raises(PredictionFailedError) as exc_info:
            await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    assert exc_info.value.payload == failed
    assert len(fake_api.calls("GET", STATUS_PATH)) == 1
    assert sleeper.calls == [5]
    assert job.state is PollState.FAILED

@pytest.mark.asyncio
async def test_canceled_status_is_terminal(fake_api, make_client, sleeper, policy):
    canceled = {"id": "p1", "status": "canceled"}
    fake_api.add("GET", STATUS_PATH, {"status": "processing"}, canceled)

    async with make_client() as client:
        with pytest.raises(PredictionCanceledError) as exc_info:
            await wait_for_completion(client, _job(), policy=policy, sleep=sleeper)

    assert isinstance(exc_info.value, PredictionFailedError)
    assert exc_info.value.payload == canceled
    assert len(fake_api.calls("GET", STATUS_PATH)) == 2

@pytest.mark.asyncio
async def test_third_transport_error_is_fatal(fake_api, make_client, sleeper, policy):
    fake_api.add("GET", STATUS_PATH, httpx.ConnectError("connection refused"))
    job = _job()

    async with make_client() as client:
        with pytest.raises(PollingTransportError) as exc_info:
            await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    error = exc_info.value
    assert isinstance(error, PollingError)
    assert error.message == "error getting data from remote service"
    assert isinstance(error.last_error, httpx.ConnectError)
    assert error.attempts == 3
    assert len(fake_api.calls("GET", STATUS_PATH)) == 3
    # backoff after the first two errors, none after the fatal one
    assert sleeper.calls == [5, 10, 5, 10, 5]
    assert job.state is PollState.FAILED

@pytest.mark.asyncio
async def test_error_count_survives_pending_success(fake_api, make_client, sleeper, policy):
    fake_api.add(
        "GET", STATUS_PATH,
        httpx.ReadTimeout("timed out"),
        {"status": "processing"},
        httpx.Response(503, json={"detail": "unavailable"}),
        httpx.ConnectError("reset"),
    )

    async with make_client() as client:
        with pytest.raises(PollingTransportError) as exc_info:
            await wait_for_completion(client, _job(), policy=policy, sleep=sleeper)

    assert exc_info.value.attempts == 4
    assert sleeper.calls == [5, 10, 5, 5, 10, 5]

@pytest.mark.asyncio
async def test_recovers_from_transient_error(fake_api, make_client, sleeper, policy):
    final = {"status": "succeeded", "output": ["https://replicate.delivery/out.png"]}
    fake_api.add("GET", STATUS_PATH, httpx.ConnectError("blip"), final)
    job = _job()

    async with make_client() as client:
        payload = await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    assert payload == final
    assert sleeper.calls == [5, 10, 5]
    assert job.error_count == 1

@pytest.mark.asyncio
async def test_malformed_status_body_counts_as_error(fake_api, make_client, sleeper, policy):
    fake_api.add(
        "GET", STATUS_PATH,
        httpx.Response(200, content=b"<html>bad gateway</html>"),
        {"status": "succeeded"},
    )

    async with make_client() as client:
        payload = await wait_for_completion(client, _job(), policy=policy, sleep=sleeper)

    assert payload == {"status": "succeeded"}
    assert sleeper.calls == [5, 10, 5]

@pytest.mark.asyncio
async def test_error_outside_retry_list_propagates(fake_api, make_client, sleeper):
    fake_api.add("GET", STATUS_PATH, httpx.ReadTimeout("timed out"), {"status": "succeeded"})
    policy = PollingPolicy(interval=5, error_backoff=10, max_errors=2, retry_on_exceptions=(httpx.ConnectError,))
    job = _job()

    async with make_client() as client:
        with pytest.raises(httpx.ReadTimeout):
            await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    assert job.error_count == 0
    assert len(fake_api.calls("GET", STATUS_PATH)) == 1
    assert sleeper.calls == [5]

@pytest.mark.asyncio
async def test_max_wait_stops_polling(fake_api, make_client):
    fake_api.add("GET", STATUS_PATH, {"status": "processing"})
    sleeper = FakeSleep()
    policy = PollingPolicy(interval=5, error_backoff=10, max_errors=2, max_wait=12)

    async with make_client() as client:
        with pytest.raises(PollingTimeoutError) as exc_info:
            await wait_for_completion(client, _job(), policy=policy, sleep=sleeper, clock=sleeper.clock)

    assert exc_info.value.waited_seconds == 15
    assert exc_info.value.payload == {"status": "processing"}
    assert len(fake_api.calls("GET", STATUS_PATH)) == 2

@pytest.mark.asyncio
async def test_finished_job_is_not_polled_again(fake_api, make_client, sleeper, policy):
    job = _job()
    job.state = PollState.SUCCEEDED

    async with make_client() as client:
        with pytest.raises(RuntimeError):
            await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    assert fake_api.requests == []
    assert sleeper.calls == []

def test_policy_rejects_negative_delays():
    with pytest.raises(ValueError):
        PollingPolicy(interval=-1)
    with pytest.raises(ValueError):
        PollingPolicy(max_wait=0)

@pytest.mark.asyncio
async def test_outcomes_are_counted(fake_api, make_client, sleeper, policy):
    metrics_registry.reset()
    fake_api.add("POST", "/predictions", prediction("p1", "starting"))
    fake_api.add("GET", "/predictions/p1", {"status": "succeeded"})

    async with make_client() as client:
        job = await submit(client, "v1", {}, model="acme/painter")
        await wait_for_completion(client, job, policy=policy, sleep=sleeper)

    assert metrics_registry.counter_value("predictions_submitted_total", {"model": "acme/painter"}) == 1
    assert metrics_registry.counter_value(
        "predictions_completed_total", {"model": "acme/painter", "outcome": "succeeded"}
    ) == 1

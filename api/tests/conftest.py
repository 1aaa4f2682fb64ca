from __future__ import annotations
import asyncio
import json
from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Tuple
import httpx
import pytest
from app.services.replicate_client import ReplicateClient
from app.utils.polling import PollingPolicy

API_BASE = "https://api.replicate.test/v1"

class FakeReplicateAPI:
    """Serves queued responses per (method, path); the last one repeats.

    A queued dict becomes a 200 JSON response, an ``httpx.Response`` is
    returned as is and an exception is raised from the transport.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Deque[Any]] = defaultdict(deque)
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes[(method, "/v1" + path)].extend(responses)

    def calls(self, method: str, path: str | None = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and (path is None or r.url.path == "/v1" + path)
        ]

    def bodies(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.calls(method, path)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})
        item = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

class FakeSleep:
    """Records requested delays and advances a fake clock instead of waiting."""

    def __init__(self, yield_control: bool = False):
        self.calls: List[float] = []
        self.now = 0.0
        self.yield_control = yield_control

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.now += seconds
        if self.yield_control:
            await asyncio.sleep(0)

    def clock(self) -> float:
        return self.now

def prediction(prediction_id: str, status: str, **extra: Any) -> Dict[str, Any]:
    return {
        "id": prediction_id,
        "status": status,
        "urls": {"get": f"{API_BASE}/predictions/{prediction_id}"},
        **extra,
    }

@pytest.fixture
def fake_api() -> FakeReplicateAPI:
    return FakeReplicateAPI()

@pytest.fixture
def make_client(fake_api):
    def factory() -> ReplicateClient:
        return ReplicateClient(
            api_token="r8_test",
            base_url=API_BASE,
            transport=httpx.MockTransport(fake_api),
        )
    return factory

@pytest.fixture
def sleeper() -> FakeSleep:
    return FakeSleep()

@pytest.fixture
def policy() -> PollingPolicy:
    return PollingPolicy(interval=5, error_backoff=10, max_errors=2, max_wait=None)

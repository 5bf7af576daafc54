"""Fixtures shared by every component's tests.

Provides:
  - MockTransport: an httpx transport that returns preconfigured responses
    and records every request it sees
  - `transport` / `client` fixtures wiring it into an httpx.AsyncClient
  - `settings`: WorkerSettings with retries off and a per-test work root
"""

import httpx
import pytest
from asset_compute_shared.settings import WorkerSettings


class MockTransport(httpx.AsyncBaseTransport):
    """Mock HTTP transport that returns preconfigured responses in order.

    Usage:
        transport.responses.append(httpx.Response(200, content=b"..."))
        async with httpx.AsyncClient(transport=transport) as client:
            ...
        assert [r.method for r in transport.requests] == ["GET"]

    If the list is exhausted, returns a 500 error.
    """

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            response.stream = httpx.ByteStream(response.content)
            return response
        return httpx.Response(500, json={"error": "No more mock responses"})

    @property
    def methods(self) -> list[str]:
        return [request.method for request in self.requests]


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
async def client(transport):
    async with httpx.AsyncClient(transport=transport) as http:
        yield http


@pytest.fixture
def settings(tmp_path) -> WorkerSettings:
    return WorkerSettings(disable_retries=True, work_root=tmp_path / "work")

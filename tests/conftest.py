"""
Shared fixtures for the Tavily toolkit tests.
"""

import json

import httpx
import pytest

from tavily_toolkit.settings import Settings


class FakeClock:
    """Manually advanced clock with a matching async sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingTransport(httpx.MockTransport):
    """MockTransport that replays queued responses and records requests."""

    def __init__(self, *responses):
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)
        super().__init__(self._handle)

    def queue(self, *responses) -> None:
        self._responses.extend(responses)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) if r.content else {} for r in self.requests]


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


@pytest.fixture
def settings() -> Settings:
    """Settings with a test key and no .env lookup."""
    return Settings(api_key="tvly-test-key", _env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()

"""
Shared fixtures: an isolated settings environment, an in-memory session
and a recording httpx mock transport.
"""

import json
import os
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from nspass.client.config import ApiConfig
from nspass.client.http import HttpClient
from nspass.client.session import SessionGuard
from nspass.client.storage import InMemorySessionStore
from nspass.settings import clear_settings_cache

BASE_URL = "http://panel.test"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Strip NSPASS_* variables and reset the settings cache around each test."""
    clear_settings_cache()
    for key in list(os.environ):
        if key.startswith("NSPASS_"):
            monkeypatch.delenv(key, raising=False)
    yield
    clear_settings_cache()


def ok_body(data: Any = None, **extra: Any) -> dict[str, Any]:
    """Status-wrapped success body."""
    return {"status": {"success": True}, "data": data, **extra}


class RecordingTransport:
    """Mock backend that records every request it receives."""

    def __init__(self, responder: Callable[[httpx.Request], Any] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder or (lambda request: httpx.Response(200, json=ok_body()))
        self.transport = httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responder(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def respond_with(self, responder: Callable[[httpx.Request], Any]) -> None:
        self._responder = responder

    def bodies(self) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]


@pytest.fixture
def config() -> ApiConfig:
    return ApiConfig(
        base_url=BASE_URL,
        timeout_seconds=1.0,
        auth_endpoints=("/v1/auth/login", "/v1/auth/oauth2"),
    )


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore(
        {
            "auth_token": "tok-123",
            "user": '{"id": 1}',
            "login_method": "password",
            "oauth2_state": "xyz",
            "theme": "dark",
        }
    )


@pytest.fixture
def redirect() -> MagicMock:
    return MagicMock()


@pytest.fixture
def guard(store: InMemorySessionStore, redirect: MagicMock) -> SessionGuard:
    return SessionGuard(store, sign_in_path="/login", redirect=redirect)


@pytest.fixture
def backend() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def client(config: ApiConfig, guard: SessionGuard, backend: RecordingTransport) -> HttpClient:
    return HttpClient(config, guard, transport=backend.transport)

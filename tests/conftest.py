"""
Shared pytest fixtures for brokerportal tests.

Both HTTP clients take an injected session, so the transport is replaced
here instead of patching library internals:

- StubAdapter: a requests adapter mounted on a real requests.Session that
  answers every request with a canned response and records what was sent.
- FakeAsyncSession: an aiohttp.ClientSession look-alike for AsyncHttpClient.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from brokerportal.api.auth_api import AsyncAuthAPI, AuthAPI
from brokerportal.utils.http_client import AsyncHttpClient, HttpClient
from tests.constants import BASE_URL


class StubAdapter(BaseAdapter):
    """Answers every request with the configured status and body."""

    def __init__(self) -> None:
        super().__init__()
        self.status_code = 200
        self.body = b""
        self.error: Optional[Exception] = None
        self.requests: List[requests.PreparedRequest] = []

    def respond(self, status_code: int = 200, body: bytes = b"") -> None:
        self.status_code = status_code
        self.body = body
        self.error = None

    def fail(self, error: Exception) -> None:
        self.error = error

    @property
    def last_request(self) -> requests.PreparedRequest:
        return self.requests[-1]

    def send(self, request, **kwargs):
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        response = requests.Response()
        response.status_code = self.status_code
        response._content = self.body
        response.encoding = "utf-8"
        response.headers = CaseInsensitiveDict({"Content-Type": "application/json; charset=utf-8"})
        response.url = request.url
        response.request = request
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def stub_transport() -> StubAdapter:
    return StubAdapter()


@pytest.fixture
def make_http_client(stub_transport):
    """Factory for HttpClient instances wired to the stub transport."""

    sessions = []

    def factory(**kwargs) -> HttpClient:
        session = requests.Session()
        sessions.append(session)
        session.mount("https://", stub_transport)
        session.mount("http://", stub_transport)
        kwargs.setdefault("base_url", BASE_URL)
        return HttpClient(session=session, **kwargs)

    yield factory
    for session in sessions:
        session.close()


@pytest.fixture
def http_client(make_http_client) -> HttpClient:
    return make_http_client()


@pytest.fixture
def auth_api(http_client) -> AuthAPI:
    return AuthAPI(http_client)


# =============================================================================
# aiohttp stand-ins
# =============================================================================

@dataclass
class RecordedCall:
    method: str
    url: str
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Any = None


class FakeAsyncResponse:
    def __init__(
        self,
        status: int,
        body: bytes,
        error: Optional[BaseException] = None,
        stalled: Optional[asyncio.Event] = None,
    ) -> None:
        self.status = status
        self._body = body
        self._error = error
        self._stalled = stalled

    async def __aenter__(self) -> "FakeAsyncResponse":
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        return None

    async def read(self) -> bytes:
        if self._stalled is not None:
            await self._stalled.wait()
        return self._body


class FakeAsyncSession:
    """Mimics the parts of aiohttp.ClientSession that AsyncHttpClient uses."""

    def __init__(self) -> None:
        self.status = 200
        self.body = b""
        self.error: Optional[BaseException] = None
        self.stalled: Optional[asyncio.Event] = None
        self.calls: List[RecordedCall] = []
        self.closed = False

    def respond(self, status: int = 200, body: bytes = b"") -> None:
        self.status = status
        self.body = body
        self.error = None

    def fail(self, error: BaseException) -> None:
        self.error = error

    def stall(self) -> asyncio.Event:
        """Make the next responses block in read() until the returned event is set."""
        self.stalled = asyncio.Event()
        return self.stalled

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append(
            RecordedCall(method=method, url=url, json=json, headers=dict(headers or {}), timeout=timeout)
        )
        return FakeAsyncResponse(self.status, self.body, self.error, self.stalled)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_async_session() -> FakeAsyncSession:
    return FakeAsyncSession()


@pytest.fixture
def async_http_client(fake_async_session) -> AsyncHttpClient:
    return AsyncHttpClient(base_url=BASE_URL, session=fake_async_session)


@pytest.fixture
def async_auth_api(async_http_client) -> AsyncAuthAPI:
    return AsyncAuthAPI(async_http_client)

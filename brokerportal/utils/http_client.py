"""Shared HTTP helpers for the Broker Portal API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import aiohttp
import requests

from ..version import __version__

DEFAULT_BASE_URL = "https://brokerportal.leverate.com/api/"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"

API_HEADERS_TEMPLATE: Dict[str, str] = {
    "content-type": JSON_CONTENT_TYPE,
    "accept": "application/json",
    "user-agent": f"brokerportal-client/{__version__}",
}

_BODY_EXCERPT = 200


class RequestError(Exception):
    """Base class for every failure raised by the Broker Portal client."""


class TransportError(RequestError):
    """Raised when the request never produced an HTTP response."""


class HttpStatusError(RequestError):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        message = f"HTTP {status_code} from {url}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class AuthenticationError(HttpStatusError):
    """Raised when the API rejects the credentials or bearer token (401/403)."""


class DecodeError(RequestError):
    """Raised when a response body is not the JSON document we expected."""


def build_headers(access_token: Optional[str] = None) -> Dict[str, str]:
    headers = API_HEADERS_TEMPLATE.copy()
    if access_token:
        headers["authorization"] = f"Bearer {access_token}"
    return headers


def normalize_base_url(base_url: str) -> str:
    return base_url.rstrip("/") + "/"


def check_status(status_code: int, url: str, body: str) -> None:
    """Raise the matching HttpStatusError subclass unless the status is 2xx."""

    if 200 <= status_code < 300:
        return
    excerpt = body[:_BODY_EXCERPT]
    if status_code in {401, 403}:
        logging.error("Authentication failed (status %s) for %s.", status_code, url)
        raise AuthenticationError(status_code, url, excerpt)
    logging.error("API request to %s failed with status %s.", url, status_code)
    raise HttpStatusError(status_code, url, excerpt)


def decode_json(raw: bytes, url: str) -> Any:
    if not raw:
        raise DecodeError(f"Empty response body from {url}")
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        logging.error("Response from %s is not valid JSON: %s", url, exc)
        raise DecodeError(f"Invalid JSON from {url}: {exc}") from exc


def validate_timeout(timeout: Optional[float]) -> Optional[float]:
    if timeout is not None and timeout <= 0:
        raise ValueError(f"timeout must be a positive number of seconds, got {timeout!r}")
    return timeout


class HttpClient:
    """Sends Broker Portal API requests over a requests session.

    A session passed in by the caller stays open after close(); one the
    client creates itself is closed with it.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = normalize_base_url(base_url)
        self.timeout = validate_timeout(timeout)
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(build_headers(access_token))

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def send(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Issue a request and return the response once its status is known to be 2xx."""

        url = self.url_for(path)
        try:
            response = self._session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logging.error("HTTP %s to %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        check_status(response.status_code, url, response.text)
        logging.debug("HTTP %s %s -> %s", method, url, response.status_code)
        return response

    def request_json(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        response = self.send(method, path, payload)
        return decode_json(response.content, response.url or self.url_for(path))

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class AsyncHttpClient:
    """Asynchronous counterpart of HttpClient built on aiohttp.

    Same ownership rule as HttpClient: only a session created here is
    closed by close().
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.base_url = normalize_base_url(base_url)
        self.timeout = validate_timeout(timeout)
        self._headers = build_headers(access_token)
        self._session = session
        self._owns_session = False
        self._session_lock: Optional[asyncio.Lock] = None

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    async def send(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> bytes:
        """Issue a request and return the raw body once its status is known to be 2xx."""

        url = self.url_for(path)
        session = await self._get_session()
        request_kwargs: Dict[str, Any] = {"json": payload, "headers": self._headers}
        if self.timeout is not None:
            request_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with session.request(method, url, **request_kwargs) as resp:
                body = await resp.read()
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logging.error("HTTP %s to %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc!r}") from exc

        check_status(status, url, body.decode("utf-8", errors="replace"))
        logging.debug("HTTP %s %s -> %s", method, url, status)
        return body

    async def request_json(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        body = await self.send(method, path, payload)
        return decode_json(body, self.url_for(path))

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session and not self._session.closed:
            return self._session

        if self._session_lock is None:
            self._session_lock = asyncio.Lock()

        async with self._session_lock:
            if self._session and not self._session.closed:
                return self._session
            session_kwargs: Dict[str, Any] = {}
            if self.timeout is not None:
                session_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(**session_kwargs)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if not self._owns_session:
            return
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._owns_session = False

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()

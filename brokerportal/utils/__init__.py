"""Utility helpers for talking HTTP to the Broker Portal API."""

from .http_client import (
    DEFAULT_BASE_URL,
    AsyncHttpClient,
    AuthenticationError,
    DecodeError,
    HttpClient,
    HttpStatusError,
    RequestError,
    TransportError,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "HttpClient",
    "AsyncHttpClient",
    "RequestError",
    "TransportError",
    "HttpStatusError",
    "AuthenticationError",
    "DecodeError",
]

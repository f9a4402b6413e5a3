"""Client for the Broker Portal authentication API."""

from .version import __version__
from .api import AsyncAuthAPI, AuthAPI
from .models import ApiTokenResponse, Credentials, TokenResponse
from .utils.http_client import (
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
    "__version__",
    "DEFAULT_BASE_URL",
    "AuthAPI",
    "AsyncAuthAPI",
    "HttpClient",
    "AsyncHttpClient",
    "Credentials",
    "TokenResponse",
    "ApiTokenResponse",
    "RequestError",
    "TransportError",
    "HttpStatusError",
    "AuthenticationError",
    "DecodeError",
]

"""Client for the Broker Portal auth endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models import ApiTokenResponse, Credentials, TokenResponse
from ..utils.http_client import AsyncHttpClient, DecodeError, HttpClient

LOGIN_PATH = "auth/login"
RENEW_TOKEN_PATH = "auth/renewToken"
LOGOUT_PATH = "auth/logout"
GENERATE_API_TOKEN_PATH = "auth/generateAPIToken"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _resolve_credentials(
    credentials: Optional[Credentials],
    username: Optional[str],
    password: Optional[str],
) -> Credentials:
    if credentials is not None:
        return credentials
    if username is None or password is None:
        raise ValueError("login requires credentials or both username and password")
    return Credentials(username=username, password=password)


def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        # Field locations and messages only; the input may carry a token.
        problems = [
            f"{'.'.join(str(part) for part in error['loc']) or '<body>'}: {error['msg']}"
            for error in exc.errors(include_input=False, include_context=False, include_url=False)
        ]
        logging.error("Unexpected %s response: %s", path, "; ".join(problems))
        raise DecodeError(f"{path} response is missing {model.__name__} fields") from exc


class AuthAPI:
    """Login, token renewal, logout and API-token generation.

    Every call is independent: the returned token is handed back to the
    caller and never stored on the client.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._client = http_client

    def login(
        self,
        credentials: Optional[Credentials] = None,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> TokenResponse:
        credentials = _resolve_credentials(credentials, username, password)
        data = self._client.request_json("POST", LOGIN_PATH, credentials.model_dump())
        result = _parse(TokenResponse, data, LOGIN_PATH)
        logging.info("Logged in as %s", credentials.username)
        return result

    def renew_token(self) -> TokenResponse:
        data = self._client.request_json("GET", RENEW_TOKEN_PATH)
        return _parse(TokenResponse, data, RENEW_TOKEN_PATH)

    def logout(self) -> None:
        self._client.send("GET", LOGOUT_PATH)
        logging.info("Logged out")

    def generate_api_token(self) -> ApiTokenResponse:
        data = self._client.request_json("GET", GENERATE_API_TOKEN_PATH)
        return _parse(ApiTokenResponse, data, GENERATE_API_TOKEN_PATH)


class AsyncAuthAPI:
    """Same operations as AuthAPI, awaited on an AsyncHttpClient."""

    def __init__(self, http_client: AsyncHttpClient) -> None:
        self._client = http_client

    async def login(
        self,
        credentials: Optional[Credentials] = None,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> TokenResponse:
        credentials = _resolve_credentials(credentials, username, password)
        data = await self._client.request_json("POST", LOGIN_PATH, credentials.model_dump())
        result = _parse(TokenResponse, data, LOGIN_PATH)
        logging.info("Logged in as %s", credentials.username)
        return result

    async def renew_token(self) -> TokenResponse:
        data = await self._client.request_json("GET", RENEW_TOKEN_PATH)
        return _parse(TokenResponse, data, RENEW_TOKEN_PATH)

    async def logout(self) -> None:
        await self._client.send("GET", LOGOUT_PATH)
        logging.info("Logged out")

    async def generate_api_token(self) -> ApiTokenResponse:
        data = await self._client.request_json("GET", GENERATE_API_TOKEN_PATH)
        return _parse(ApiTokenResponse, data, GENERATE_API_TOKEN_PATH)

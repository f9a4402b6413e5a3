"""Models for the auth endpoint request and response bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Body of auth/login."""

    username: str
    password: str = Field(repr=False)


class TokenResponse(BaseModel):
    """Body returned by auth/login and auth/renewToken."""

    token: str


class ApiTokenResponse(BaseModel):
    """Body returned by auth/generateAPIToken."""

    model_config = ConfigDict(populate_by_name=True)

    api_token: str = Field(alias="apiToken")

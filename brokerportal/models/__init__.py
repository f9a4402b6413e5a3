"""Data models for the Broker Portal auth API."""

from .auth_models import ApiTokenResponse, Credentials, TokenResponse

__all__ = ["Credentials", "TokenResponse", "ApiTokenResponse"]

"""API layer for the Broker Portal auth endpoints."""

from .auth_api import AsyncAuthAPI, AuthAPI

__all__ = ["AuthAPI", "AsyncAuthAPI"]

"""API package exposing filing summary endpoints for the SEC filing resolver."""

from .app import app, create_app
from .filings_router import get_context, router, self_hosted_from_env

__all__ = [
    "app",
    "create_app",
    "self_hosted_from_env",
    "get_context",
    "router",
]

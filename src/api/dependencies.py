"""FastAPI dependencies for injection."""
from fastapi import Request

from core.config import get_settings
from services.workspace import Workspace


def get_workspace(request: Request) -> Workspace:
    """Return the session workspace created at application startup."""
    return request.app.state.workspace


__all__ = [
    "get_settings",
    "get_workspace",
]

"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Request

from appregistry.registry.service import AppRegistryService


def get_service(request: Request) -> AppRegistryService:
    """Return the AppRegistryService created at application startup."""
    return request.app.state.service

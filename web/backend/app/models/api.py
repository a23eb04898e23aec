"""Pydantic models for API request/response serialization.

These models mirror the app registry dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Registration models
# ---------------------------------------------------------------------------


class AppRegistrationResponse(BaseModel):
    """Mirrors appregistry.registry.models.AppRegistration."""

    name: str
    type: str
    uri: str
    metadata_uri: Optional[str] = None


class PageMetadataResponse(BaseModel):
    """Pagination details of a page of registrations."""

    size: int
    total_elements: int
    total_pages: int
    number: int


class AppRegistrationPageResponse(BaseModel):
    """Mirrors appregistry.registry.models.Page."""

    entries: list[AppRegistrationResponse] = Field(default_factory=list)
    page: PageMetadataResponse


class ConfigurationPropertyResponse(BaseModel):
    """Mirrors appregistry.registry.models.ConfigurationProperty."""

    id: str
    name: str = ""
    type: str = ""
    default_value: Any = None
    description: str = ""
    deprecated: bool = False


class DetailedAppRegistrationResponse(AppRegistrationResponse):
    """Mirrors appregistry.registry.models.DetailedAppRegistration."""

    options: list[ConfigurationPropertyResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str

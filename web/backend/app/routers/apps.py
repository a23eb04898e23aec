"""Apps router -- list, inspect, register, import and remove app registrations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from appregistry.registry.models import (
    AppRegistration,
    ApplicationType,
    DetailedAppRegistration,
    Page,
    PageRequest,
)
from appregistry.registry.service import AppRegistryService
from web.backend.app.dependencies import get_service
from web.backend.app.models.api import (
    AppRegistrationPageResponse,
    AppRegistrationResponse,
    ConfigurationPropertyResponse,
    DetailedAppRegistrationResponse,
    ErrorResponse,
    PageMetadataResponse,
)

router = APIRouter(prefix="/apps", tags=["apps"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _page_request(
    page: int = Query(0, ge=0, description="Page number (0-based)"),
    size: int = Query(20, ge=0, le=2000, description="Page size"),
) -> PageRequest:
    return PageRequest(page=page, size=size)


def _registration_response(registration: AppRegistration) -> AppRegistrationResponse:
    """Convert an AppRegistration dataclass to a Pydantic response model."""
    return AppRegistrationResponse(
        name=registration.name,
        type=registration.type.value,
        uri=registration.uri,
        metadata_uri=registration.metadata_uri,
    )


def _page_response(page: Page) -> AppRegistrationPageResponse:
    return AppRegistrationPageResponse(
        entries=[_registration_response(r) for r in page.content],
        page=PageMetadataResponse(
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            number=page.number,
        ),
    )


def _detailed_response(detailed: DetailedAppRegistration) -> DetailedAppRegistrationResponse:
    reg = detailed.registration
    return DetailedAppRegistrationResponse(
        name=reg.name,
        type=reg.type.value,
        uri=reg.uri,
        metadata_uri=reg.metadata_uri,
        options=[
            ConfigurationPropertyResponse(
                id=o.id,
                name=o.name,
                type=o.type,
                default_value=o.default_value,
                description=o.description,
                deprecated=o.deprecated,
            )
            for o in detailed.options
        ],
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=AppRegistrationPageResponse,
    summary="List registered apps",
)
def list_apps(
    page_request: PageRequest = Depends(_page_request),
    type: Optional[ApplicationType] = Query(None, description="Only apps of this type"),
    search: Optional[str] = Query(None, description="Only apps whose name contains this"),
    service: AppRegistryService = Depends(get_service),
):
    """List app registrations, optionally filtered by type and name substring.

    With filters applied, the page metadata reports the filtered total.
    """
    return _page_response(service.list(page_request, type=type, search=search))


@router.post(
    "",
    response_model=AppRegistrationPageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Register apps in bulk",
)
def register_all(
    page_request: PageRequest = Depends(_page_request),
    uri: Optional[str] = Query(None, description="URI of a properties file listing apps"),
    apps: Optional[str] = Query(None, description="Inline <type>.<name>=<uri> lines"),
    force: bool = Query(False, description="Overwrite existing registrations"),
    service: AppRegistryService = Depends(get_service),
):
    """Register every app listed at ``uri`` or in the inline ``apps`` properties."""
    return _page_response(service.register_all(page_request, uri=uri, apps=apps, force=force))


@router.get(
    "/{type}/{name}",
    response_model=DetailedAppRegistrationResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get an app with its configuration properties",
)
def info(
    type: ApplicationType,
    name: str,
    exhaustive: bool = Query(False, description="Include every property, not only visible ones"),
    service: AppRegistryService = Depends(get_service),
):
    """Retrieve an app registration and the options described by its metadata."""
    return _detailed_response(service.info(type, name, exhaustive=exhaustive))


@router.post(
    "/{type}/{name}",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Register an app",
)
def register(
    type: ApplicationType,
    name: str,
    uri: str = Query(..., description="URI of the app artifact"),
    metadata_uri: Optional[str] = Query(
        None, alias="metadata-uri", description="URI of the metadata artifact"
    ),
    force: bool = Query(False, description="Overwrite an existing registration"),
    service: AppRegistryService = Depends(get_service),
):
    """Register an app artifact under a type and name."""
    service.register(type, name, uri, metadata_uri=metadata_uri, force=force)


@router.delete(
    "/{type}/{name}",
    status_code=status.HTTP_200_OK,
    responses={404: {"model": ErrorResponse}},
    summary="Unregister an app",
)
def unregister(
    type: ApplicationType,
    name: str,
    service: AppRegistryService = Depends(get_service),
):
    """Remove an app registration."""
    service.unregister(type, name)

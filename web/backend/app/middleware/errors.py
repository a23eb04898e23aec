"""Exception handlers mapping registry errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from appregistry.registry.exceptions import (
    AppAlreadyRegisteredError,
    AppRegistryError,
    ImportSourceError,
    InvalidAppUriError,
    InvalidImportEntryError,
    MetadataResolutionError,
    NoSuchAppRegistrationError,
)
from appregistry.resources.loader import ResourceError, UnsupportedResourceError

logger = logging.getLogger(__name__)

# Checked in order; the first matching base class decides the status code.
STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (NoSuchAppRegistrationError, status.HTTP_404_NOT_FOUND),
    (AppAlreadyRegisteredError, status.HTTP_409_CONFLICT),
    (InvalidAppUriError, status.HTTP_400_BAD_REQUEST),
    (InvalidImportEntryError, status.HTTP_400_BAD_REQUEST),
    (ImportSourceError, status.HTTP_400_BAD_REQUEST),
    (MetadataResolutionError, status.HTTP_502_BAD_GATEWAY),
    (UnsupportedResourceError, status.HTTP_400_BAD_REQUEST),
    (ResourceError, status.HTTP_400_BAD_REQUEST),
]


def status_for(exc: Exception) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def registry_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an AppRegistryError or ResourceError as ``{"detail": message}``."""
    status_code = status_for(exc)
    message = exc.message if isinstance(exc, AppRegistryError) else str(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, message)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, status_code, message)
    return JSONResponse(status_code=status_code, content={"detail": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppRegistryError, registry_exception_handler)
    app.add_exception_handler(ResourceError, registry_exception_handler)

"""Registry exceptions."""

from __future__ import annotations

from typing import Optional

from appregistry.registry.models import AppRegistration, ApplicationType


class AppRegistryError(Exception):
    """Base exception for registry operations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AppAlreadyRegisteredError(AppRegistryError):
    """Raised when registering over an existing entry without ``force``."""

    def __init__(self, previous: AppRegistration):
        self.previous = previous
        super().__init__(
            f"The '{previous.type.value}:{previous.name}' application is already "
            f"registered as {previous.uri}"
        )


class NoSuchAppRegistrationError(AppRegistryError):
    """Raised when no registration exists for a (name, type) key."""

    def __init__(self, name: str, type: Optional[ApplicationType] = None):
        self.name = name
        self.type = type
        if type is None:
            super().__init__(f"Application named '{name}' does not exist")
        else:
            super().__init__(f"Application named '{name}' of type '{type.value}' does not exist")


class InvalidAppUriError(AppRegistryError, ValueError):
    """Raised for a URI string that cannot be parsed."""

    def __init__(self, uri: str, reason: str = "not a valid URI"):
        self.uri = uri
        super().__init__(f"Invalid URI '{uri}': {reason}")


class InvalidImportEntryError(AppRegistryError, ValueError):
    """Raised for a bulk-import line that does not describe an application."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Invalid import entry '{key}': {reason}")


class ImportSourceError(AppRegistryError):
    """Raised when a bulk import has no source, or two conflicting ones."""


class MetadataResolutionError(AppRegistryError):
    """Raised when an application's metadata artifact cannot be read."""

    def __init__(self, description: str, cause: Exception | None = None):
        self.cause = cause
        message = f"Could not resolve metadata from {description}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)

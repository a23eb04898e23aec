"""Registry service -- the operations exposed over HTTP and the CLI."""

from __future__ import annotations

import logging
from typing import Optional

from appregistry.metadata.resolver import MetadataResolver
from appregistry.registry.exceptions import (
    ImportSourceError,
    MetadataResolutionError,
    NoSuchAppRegistrationError,
)
from appregistry.registry.local_registry import LocalRegistry
from appregistry.registry.models import (
    AppRegistration,
    ApplicationType,
    DetailedAppRegistration,
    Page,
    PageRequest,
)
from appregistry.registry.pagination import filter_page
from appregistry.registry.prefetch import MetadataPrefetcher
from appregistry.registry.uris import validate_optional_uri, validate_uri
from appregistry.resources.loader import ByteResource, ResourceError
from appregistry.resources.properties import ENCODING as PROPERTIES_ENCODING
from appregistry.resources.properties import format_properties, parse_properties

logger = logging.getLogger(__name__)


class AppRegistryService:
    """List, inspect, register, import and delete app registrations."""

    def __init__(
        self,
        registry: LocalRegistry,
        metadata_resolver: MetadataResolver,
        prefetcher: MetadataPrefetcher,
    ):
        self.registry = registry
        self.metadata_resolver = metadata_resolver
        self.prefetcher = prefetcher

    def list(
        self,
        request: PageRequest,
        type: Optional[ApplicationType] = None,
        search: Optional[str] = None,
    ) -> Page:
        """One page of registrations, optionally filtered by type and name substring."""
        return filter_page(self.registry, request, type=type, search=search)

    def info(
        self, type: ApplicationType, name: str, exhaustive: bool = False
    ) -> DetailedAppRegistration:
        """A registration together with the configuration options in its metadata."""
        registration = self.registry.find(name, type)
        if registration is None:
            raise NoSuchAppRegistrationError(name, type)

        result = DetailedAppRegistration(registration=registration)
        try:
            resource = self.registry.get_app_metadata_resource(registration)
        except ResourceError as exc:
            raise MetadataResolutionError(registration.metadata_uri or registration.uri, exc) from exc
        for prop in self.metadata_resolver.list_properties(resource, exhaustive):
            result.add_option(prop)
        return result

    def register(
        self,
        type: ApplicationType,
        name: str,
        uri: str,
        metadata_uri: Optional[str] = None,
        force: bool = False,
    ) -> AppRegistration:
        """Register ``name`` as an app of ``type``.

        An existing registration is only replaced when ``force`` is set.
        """
        validate_uri(uri)
        validate_optional_uri(metadata_uri)

        registration = AppRegistration(name=name, type=type, uri=uri, metadata_uri=metadata_uri)
        self.registry.save(registration, overwrite=force)
        logger.info("Registered %s as %s", registration.qualified_id, uri)
        self.prefetcher.prefetch([registration])
        return registration

    def unregister(self, type: ApplicationType, name: str) -> None:
        """Delete a registration. Deleting an unknown app is an error."""
        if not self.registry.delete(name, type):
            raise NoSuchAppRegistrationError(name, type)
        logger.info("Unregistered %s/%s", type.value, name)

    def register_all(
        self,
        request: PageRequest,
        uri: Optional[str] = None,
        apps: Optional[str | dict[str, str]] = None,
        force: bool = False,
    ) -> Page:
        """Import every app listed at ``uri`` or in the inline ``apps`` properties.

        Exactly one of the two sources must be given. The returned page holds
        the imported registrations in natural order; its total is the size of
        the whole registry after the import.
        """
        inline = _inline_properties(apps)
        if uri and inline:
            raise ImportSourceError("Specify either a 'uri' or inline 'apps', not both")
        if uri:
            resource = self.registry.resource_loader.get_resource(validate_uri(uri))
        elif inline:
            resource = ByteResource(
                format_properties(inline).encode(PROPERTIES_ENCODING), "Inline properties"
            )
        else:
            raise ImportSourceError("Specify either a 'uri' or inline 'apps' to import")

        registrations = sorted(self.registry.import_all(force, resource))
        self.prefetcher.prefetch(registrations)
        return Page(
            content=registrations,
            request=request,
            total_elements=self.registry.count(),
        )


def _inline_properties(apps: Optional[str | dict[str, str]]) -> dict[str, str]:
    if not apps:
        return {}
    if isinstance(apps, str):
        return parse_properties(apps)
    return dict(apps)

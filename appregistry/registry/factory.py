"""Assembly of a ready-to-use ``AppRegistryService`` from settings."""

from __future__ import annotations

from appregistry.config import AppRegistrySettings
from appregistry.metadata.resolver import MetadataResolver
from appregistry.registry.local_registry import LocalRegistry
from appregistry.registry.prefetch import MetadataPrefetcher, WorkerPool
from appregistry.registry.service import AppRegistryService
from appregistry.resources.loader import CachingResourceLoader


def build_service(settings: AppRegistrySettings, pool: WorkerPool) -> AppRegistryService:
    """Wire the store, resolver and prefetcher around a shared, started ``pool``."""
    loader = CachingResourceLoader(
        settings.cache_dir,
        maven_remote_repository=settings.maven_remote_repository,
        timeout=settings.http_timeout,
    )
    registry = LocalRegistry(settings.registry_dir, resource_loader=loader)
    return AppRegistryService(
        registry=registry,
        metadata_resolver=MetadataResolver(),
        prefetcher=MetadataPrefetcher(registry, pool),
    )

"""Shared fixtures for registry tests."""

import pytest

from appregistry.metadata.resolver import MetadataResolver
from appregistry.registry.local_registry import LocalRegistry
from appregistry.registry.prefetch import MetadataPrefetcher, WorkerPool
from appregistry.registry.service import AppRegistryService


@pytest.fixture
def registry(tmp_path):
    return LocalRegistry(tmp_path / "registry")


@pytest.fixture
def pool():
    with WorkerPool(max_workers=4) as p:
        yield p


@pytest.fixture
def service(registry, pool):
    return AppRegistryService(
        registry=registry,
        metadata_resolver=MetadataResolver(),
        prefetcher=MetadataPrefetcher(registry, pool),
    )

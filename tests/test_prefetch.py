"""Tests for the worker pool and background metadata prefetching."""

import logging
import threading

import pytest

from appregistry.registry.models import AppRegistration, ApplicationType
from appregistry.registry.prefetch import MetadataPrefetcher, WorkerPool
from appregistry.resources.loader import ByteResource, ResourceError


class RecordingRegistry:
    """Stands in for the store; fails for URIs listed in ``failing``."""

    def __init__(self, failing=(), gate=None):
        self.failing = set(failing)
        self.gate = gate
        self.fetched = []
        self._lock = threading.Lock()

    def get_app_metadata_resource(self, registration):
        if self.gate is not None:
            self.gate.wait(timeout=5)
        with self._lock:
            self.fetched.append(registration.metadata_uri)
        if registration.metadata_uri in self.failing:
            raise ResourceError(f"boom: {registration.metadata_uri}")
        return ByteResource(b"", registration.metadata_uri)


def _app(name, metadata_uri=None):
    return AppRegistration(name, ApplicationType.SOURCE, f"file:///{name}.jar", metadata_uri)


def test_failing_member_does_not_stop_siblings(pool, caplog):
    caplog.set_level(logging.INFO, logger="appregistry.registry.prefetch")
    registry = RecordingRegistry(failing={"file:///two-meta.yaml"})
    prefetcher = MetadataPrefetcher(registry, pool)

    prefetcher.prefetch(
        [
            _app("one", "file:///one-meta.yaml"),
            _app("two", "file:///two-meta.yaml"),
            _app("three", "file:///three-meta.yaml"),
        ]
    )

    assert pool.join(timeout=5)
    assert sorted(registry.fetched) == [
        "file:///one-meta.yaml",
        "file:///three-meta.yaml",
        "file:///two-meta.yaml",
    ]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "file:///two-meta.yaml" in warnings[0].getMessage()


def test_only_registrations_with_metadata_are_fetched(pool):
    registry = RecordingRegistry()
    prefetcher = MetadataPrefetcher(registry, pool)

    prefetcher.prefetch([_app("plain"), _app("described", "file:///described-meta.yaml")])

    assert pool.join(timeout=5)
    assert registry.fetched == ["file:///described-meta.yaml"]


def test_prefetch_returns_before_fetches_complete(pool):
    gate = threading.Event()
    registry = RecordingRegistry(gate=gate)
    prefetcher = MetadataPrefetcher(registry, pool)

    prefetcher.prefetch([_app("slow", "file:///slow-meta.yaml")])

    assert registry.fetched == []
    gate.set()
    assert pool.join(timeout=5)
    assert registry.fetched == ["file:///slow-meta.yaml"]


def test_prefetch_on_stopped_pool_does_not_raise(caplog):
    pool = WorkerPool(max_workers=1)
    prefetcher = MetadataPrefetcher(RecordingRegistry(), pool)

    prefetcher.prefetch([_app("a", "file:///a-meta.yaml")])

    assert any("Skipping metadata prefetch" in r.getMessage() for r in caplog.records)


def test_fetch_captures_failure_in_outcome():
    registry = RecordingRegistry(failing={"file:///bad.yaml"})
    prefetcher = MetadataPrefetcher(registry, WorkerPool())

    outcome = prefetcher.fetch(_app("bad", "file:///bad.yaml"))

    assert not outcome.ok
    assert isinstance(outcome.error, ResourceError)
    assert prefetcher.fetch(_app("good", "file:///good.yaml")).ok


def test_shutdown_drains_queued_work():
    gate = threading.Event()
    registry = RecordingRegistry(gate=gate)
    pool = WorkerPool(max_workers=2).start()
    prefetcher = MetadataPrefetcher(registry, pool)

    prefetcher.prefetch([_app(f"app{i}", f"file:///app{i}-meta.yaml") for i in range(5)])
    gate.set()
    pool.shutdown(wait=True)

    assert len(registry.fetched) == 5
    assert not pool.running


def test_submit_after_shutdown_raises():
    pool = WorkerPool(max_workers=1).start()
    pool.shutdown()

    with pytest.raises(RuntimeError):
        pool.submit(print, "never")


def test_pool_can_be_restarted():
    pool = WorkerPool(max_workers=1)
    with pool:
        assert pool.submit(lambda: 42).result(timeout=5) == 42
    with pool:
        assert pool.submit(lambda: 43).result(timeout=5) == 43

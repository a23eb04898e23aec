"""Background prefetching of application metadata.

After apps are registered their metadata artifacts are fetched on a shared
worker pool so that a later detail lookup finds them in the download cache.
Prefetching is best effort: failures are logged and dropped, and the caller
is never blocked or interrupted.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol

from appregistry.registry.models import AppRegistration
from appregistry.resources.loader import Resource

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


class WorkerPool:
    """A fixed-size thread pool with explicit start and drain.

    One pool is created at process start and shared by every component that
    needs background work. ``shutdown`` waits for queued and running tasks,
    including tasks submitted by other tasks, before stopping the threads.
    """

    def __init__(self, max_workers: int = DEFAULT_WORKERS, name: str = "prefetch"):
        self.max_workers = max_workers
        self.name = name
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending = 0
        self._closing = False
        self._idle = threading.Condition()

    def start(self) -> WorkerPool:
        with self._idle:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix=self.name
                )
                self._closing = False
                logger.debug("Started worker pool %s with %d workers", self.name, self.max_workers)
        return self

    @property
    def running(self) -> bool:
        return self._executor is not None and not self._closing

    def submit(self, fn: Callable[..., object], *args) -> Future:
        """Queue ``fn(*args)``. Raises ``RuntimeError`` once the pool is closing."""
        with self._idle:
            if self._executor is None:
                raise RuntimeError(f"Worker pool {self.name} is not running")
            if self._closing and not _on_worker_thread(self.name):
                raise RuntimeError(f"Worker pool {self.name} is shutting down")
            self._pending += 1
            future = self._executor.submit(fn, *args)
        future.add_done_callback(self._task_done)
        return future

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until no task is queued or running. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting outside work and, if ``wait``, drain what is queued."""
        with self._idle:
            if self._executor is None:
                return
            self._closing = True
        if wait:
            self.join()
        with self._idle:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.debug("Stopped worker pool %s", self.name)

    def _task_done(self, _future: Future) -> None:
        with self._idle:
            self._pending -= 1
            if self._pending == 0:
                self._idle.notify_all()

    def __enter__(self) -> WorkerPool:
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)


def _on_worker_thread(name: str) -> bool:
    return threading.current_thread().name.startswith(name + "_")


class MetadataSource(Protocol):
    def get_app_metadata_resource(self, registration: AppRegistration) -> Resource:
        ...


@dataclass
class PrefetchOutcome:
    """What happened to one prefetched metadata artifact."""

    metadata_uri: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MetadataPrefetcher:
    """Warms metadata artifacts of newly registered apps in the background."""

    def __init__(self, registry: MetadataSource, pool: WorkerPool):
        self.registry = registry
        self.pool = pool

    def prefetch(self, registrations: Iterable[AppRegistration]) -> None:
        """Fetch the metadata of every registration that names a metadata URI.

        Returns as soon as the work is queued. Never raises.
        """
        batch = [r for r in registrations if r.metadata_uri is not None]
        if not batch:
            return
        try:
            self.pool.submit(self._dispatch, batch)
        except RuntimeError as exc:
            logger.warning("Skipping metadata prefetch of %d apps: %s", len(batch), exc)

    def _dispatch(self, batch: list[AppRegistration]) -> None:
        for registration in batch:
            try:
                self.pool.submit(self._fetch_and_log, registration)
            except RuntimeError as exc:
                logger.warning("Could not schedule fetch of %s: %s", registration.metadata_uri, exc)

    def fetch(self, registration: AppRegistration) -> PrefetchOutcome:
        """Fetch one metadata artifact, capturing any failure in the outcome."""
        logger.info("Eagerly fetching %s", registration.metadata_uri)
        try:
            self.registry.get_app_metadata_resource(registration)
        except Exception as exc:
            return PrefetchOutcome(metadata_uri=registration.metadata_uri, error=exc)
        return PrefetchOutcome(metadata_uri=registration.metadata_uri)

    def _fetch_and_log(self, registration: AppRegistration) -> PrefetchOutcome:
        outcome = self.fetch(registration)
        if outcome.ok:
            logger.debug("Prefetched %s", outcome.metadata_uri)
        else:
            logger.warning("Could not fetch %s", outcome.metadata_uri, exc_info=outcome.error)
        return outcome

"""Resource loading for artifact and metadata URIs.

Supported locations:

- ``file:`` URIs and plain filesystem paths
- ``http:`` / ``https:`` URLs (fetched with httpx)
- ``maven://group:artifact[:extension[:classifier]]:version`` coordinates,
  resolved against a remote Maven repository
- inline bytes (``ByteResource``)

``CachingResourceLoader`` keeps a local copy of every remote resource it
hands out, so that a resource fetched once is served from disk afterwards.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MAVEN_REPOSITORY = "https://repo.maven.apache.org/maven2"
DEFAULT_TIMEOUT = 30.0
LOCK_STRIPES = 64


class ResourceError(Exception):
    """Raised when a resource cannot be located or read."""


class UnsupportedResourceError(ResourceError, ValueError):
    """Raised for a URI whose scheme no loader understands."""


class Resource(ABC):
    """A readable chunk of bytes with a human-readable description."""

    description: str = ""

    @abstractmethod
    def read_bytes(self) -> bytes:
        ...

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_bytes().decode(encoding)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r})"


class FileResource(Resource):
    def __init__(self, path: str | Path, description: str = ""):
        self.path = Path(path)
        self.description = description or f"file [{self.path}]"

    def read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise ResourceError(f"Cannot read {self.description}: {exc}") from exc


class UrlResource(Resource):
    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout
        self.description = f"URL [{url}]"

    def read_bytes(self) -> bytes:
        try:
            response = httpx.get(self.url, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ResourceError(f"Cannot fetch {self.description}: {exc}") from exc
        return response.content

    def download_to(self, target: Path) -> None:
        """Stream the resource into ``target``, replacing it atomically."""
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".download-")
        try:
            with os.fdopen(fd, "wb") as out:
                with httpx.stream(
                    "GET", self.url, timeout=self.timeout, follow_redirects=True
                ) as response:
                    response.raise_for_status()
                    for chunk in response.iter_bytes():
                        out.write(chunk)
            os.replace(tmp_name, target)
        except httpx.HTTPError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ResourceError(f"Cannot fetch {self.description}: {exc}") from exc
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class ByteResource(Resource):
    def __init__(self, data: bytes, description: str = "byte array"):
        self.data = data
        self.description = description

    def read_bytes(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class MavenCoordinates:
    """Coordinates of a Maven artifact."""

    group_id: str
    artifact_id: str
    version: str
    extension: str = "jar"
    classifier: str = ""

    @classmethod
    def parse(cls, uri: str) -> MavenCoordinates:
        """Parse ``maven://g:a:v``, ``maven://g:a:ext:v`` or ``maven://g:a:ext:cls:v``."""
        body = uri.split("://", 1)[1] if "://" in uri else uri.split(":", 1)[1]
        parts = body.split(":")
        if len(parts) == 3:
            group, artifact, version = parts
            return cls(group, artifact, version)
        if len(parts) == 4:
            group, artifact, extension, version = parts
            return cls(group, artifact, version, extension=extension)
        if len(parts) == 5:
            group, artifact, extension, classifier, version = parts
            return cls(group, artifact, version, extension=extension, classifier=classifier)
        raise UnsupportedResourceError(
            f"Maven coordinates must be group:artifact[:extension[:classifier]]:version, got '{body}'"
        )

    @property
    def filename(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact_id}-{self.version}{suffix}.{self.extension}"

    def repository_path(self) -> str:
        group_path = self.group_id.replace(".", "/")
        return f"{group_path}/{self.artifact_id}/{self.version}/{self.filename}"


class ResourceLoader:
    """Resolve URIs into ``Resource`` objects."""

    def __init__(
        self,
        maven_remote_repository: str = DEFAULT_MAVEN_REPOSITORY,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.maven_remote_repository = maven_remote_repository.rstrip("/")
        self.timeout = timeout

    def get_resource(self, uri: str) -> Resource:
        parsed = urlparse(uri)
        scheme = parsed.scheme.lower()

        if scheme in ("", "file") or len(scheme) == 1:
            return FileResource(_file_path(uri, parsed), description=uri)
        if scheme in ("http", "https"):
            return UrlResource(uri, timeout=self.timeout)
        if scheme == "maven":
            coordinates = MavenCoordinates.parse(uri)
            url = f"{self.maven_remote_repository}/{coordinates.repository_path()}"
            return UrlResource(url, timeout=self.timeout)
        raise UnsupportedResourceError(f"Unsupported resource scheme '{scheme}' in '{uri}'")


class CachingResourceLoader(ResourceLoader):
    """A ``ResourceLoader`` that keeps downloaded resources on local disk.

    Remote resources are downloaded on first request and served as
    ``FileResource`` objects afterwards. Concurrent requests for the same URI
    share one download.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        maven_remote_repository: str = DEFAULT_MAVEN_REPOSITORY,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(maven_remote_repository=maven_remote_repository, timeout=timeout)
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def get_resource(self, uri: str) -> Resource:
        resource = super().get_resource(uri)
        if not isinstance(resource, UrlResource):
            return resource

        target = self.cache_path(uri)
        with self._lock_for(uri):
            if not target.is_file():
                logger.info("Downloading %s to %s", resource.url, target)
                resource.download_to(target)
        return FileResource(target, description=uri)

    def is_cached(self, uri: str) -> bool:
        return self.cache_path(uri).is_file()

    def cache_path(self, uri: str) -> Path:
        digest = _digest(uri)
        name = Path(urlparse(uri).path).name or "resource"
        return self.cache_dir / digest[:2] / f"{digest}-{name}"

    def _lock_for(self, uri: str) -> threading.Lock:
        """One of a fixed set of locks; the same URI always maps to the same one."""
        return self._locks[int(_digest(uri)[:8], 16) % len(self._locks)]


def _digest(uri: str) -> str:
    return hashlib.sha256(uri.encode("utf-8")).hexdigest()


def _file_path(uri: str, parsed) -> Path:
    if parsed.scheme.lower() == "file":
        path = unquote(parsed.path)
        if parsed.netloc and parsed.netloc != "localhost":
            path = f"//{parsed.netloc}{path}"
        return Path(path)
    return Path(uri)

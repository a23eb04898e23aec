"""Settings, read from ``APPREGISTRY_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from appregistry.registry.prefetch import DEFAULT_WORKERS
from appregistry.resources.loader import DEFAULT_MAVEN_REPOSITORY, DEFAULT_TIMEOUT

ENV_PREFIX = "APPREGISTRY_"


@dataclass
class AppRegistrySettings:
    registry_dir: Path = Path.home() / ".appregistry" / "registry"
    cache_dir: Path = Path.home() / ".appregistry" / "cache"
    prefetch_workers: int = DEFAULT_WORKERS
    maven_remote_repository: str = DEFAULT_MAVEN_REPOSITORY
    http_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> AppRegistrySettings:
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name) or None

        return cls(
            registry_dir=Path(get("REGISTRY_DIR") or defaults.registry_dir).expanduser(),
            cache_dir=Path(get("CACHE_DIR") or defaults.cache_dir).expanduser(),
            prefetch_workers=int(get("PREFETCH_WORKERS") or defaults.prefetch_workers),
            maven_remote_repository=get("MAVEN_REMOTE_REPOSITORY")
            or defaults.maven_remote_repository,
            http_timeout=float(get("HTTP_TIMEOUT") or defaults.http_timeout),
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
        )

"""Local file-based registry implementation.

A simple, file-system-backed registry for development and single-node use.
Stores app registrations as JSON in a local directory, keyed by
``<type>/<name>``.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from appregistry.registry.exceptions import AppAlreadyRegisteredError, InvalidImportEntryError
from appregistry.registry.models import AppRegistration, ApplicationType, Page, PageRequest
from appregistry.registry.uris import validate_uri
from appregistry.resources.loader import Resource, ResourceLoader
from appregistry.resources.properties import ENCODING as PROPERTIES_ENCODING, parse_properties

logger = logging.getLogger(__name__)

METADATA_SUFFIX = "metadata"


class LocalRegistry:
    """File-based local registry for app registrations."""

    INDEX_FILE = "index.json"

    def __init__(self, registry_dir: str | Path, resource_loader: Optional[ResourceLoader] = None):
        self.registry_dir = Path(registry_dir)
        self.registry_dir.mkdir(parents=True, exist_ok=True)
        self.index_path = self.registry_dir / self.INDEX_FILE
        self.resource_loader = resource_loader or ResourceLoader()
        self._lock = threading.RLock()
        self._index: dict[str, dict] = self._load_index()

    def find(self, name: str, type: ApplicationType) -> AppRegistration | None:
        """Get a registration by name and type."""
        with self._lock:
            data = self._index.get(_key(name, type))
        return _dict_to_registration(data) if data else None

    def find_all(self) -> list[AppRegistration]:
        """Snapshot of every registration, in natural order."""
        with self._lock:
            values = list(self._index.values())
        return sorted(_dict_to_registration(d) for d in values)

    def find_page(self, request: PageRequest) -> Page:
        """One page of registrations in natural order."""
        registrations = self.find_all()
        content = registrations[request.offset : request.offset + request.size]
        return Page(content=content, request=request, total_elements=len(registrations))

    def count(self) -> int:
        with self._lock:
            return len(self._index)

    def save(self, registration: AppRegistration, overwrite: bool = True) -> AppRegistration | None:
        """Insert or replace a registration; returns the one it replaced.

        With ``overwrite=False`` an occupied key raises
        ``AppAlreadyRegisteredError`` and the store is left unchanged. The
        check and the write happen under one lock.
        """
        key = _key(registration.name, registration.type)
        with self._lock:
            previous = self._index.get(key)
            if previous is not None and not overwrite:
                raise AppAlreadyRegisteredError(_dict_to_registration(previous))
            self._index[key] = _registration_to_dict(registration)
            self._save_index()
        return _dict_to_registration(previous) if previous else None

    def delete(self, name: str, type: ApplicationType) -> bool:
        """Remove a registration. Returns False when nothing was registered."""
        with self._lock:
            if self._index.pop(_key(name, type), None) is None:
                return False
            self._save_index()
        return True

    def import_all(self, force: bool, resource: Resource) -> list[AppRegistration]:
        """Register every application listed in a ``.properties`` resource.

        Lines are ``<type>.<name>=<uri>`` with an optional
        ``<type>.<name>.metadata=<uri>``. Existing registrations are left in
        place unless ``force`` is set; only registrations actually saved are
        returned.
        """
        entries = parse_properties(resource.read_text(PROPERTIES_ENCODING))
        uris: dict[tuple[str, ApplicationType], str] = {}
        metadata_uris: dict[tuple[str, ApplicationType], str] = {}

        for key, value in entries.items():
            parts = key.split(".")
            if len(parts) == 3 and parts[2] == METADATA_SUFFIX:
                target = metadata_uris
            elif len(parts) == 2:
                target = uris
            else:
                raise InvalidImportEntryError(
                    key, "expected <type>.<name> or <type>.<name>.metadata"
                )
            type_value, name = parts[0], parts[1]
            try:
                app_type = ApplicationType(type_value)
            except ValueError:
                raise InvalidImportEntryError(key, f"unknown application type '{type_value}'")
            if not name:
                raise InvalidImportEntryError(key, "application name is empty")
            target[(name, app_type)] = validate_uri(value)

        orphans = set(metadata_uris) - set(uris)
        if orphans:
            name, app_type = sorted(orphans, key=lambda k: (k[1].ordinal, k[0]))[0]
            raise InvalidImportEntryError(
                f"{app_type.value}.{name}.{METADATA_SUFFIX}", "metadata given without an app URI"
            )

        saved = []
        with self._lock:
            for (name, app_type), uri in uris.items():
                if not force and _key(name, app_type) in self._index:
                    logger.info("Skipping existing registration %s/%s", app_type.value, name)
                    continue
                registration = AppRegistration(
                    name=name,
                    type=app_type,
                    uri=uri,
                    metadata_uri=metadata_uris.get((name, app_type)),
                )
                self._index[_key(name, app_type)] = _registration_to_dict(registration)
                saved.append(registration)
            if saved:
                self._save_index()

        logger.info("Imported %d registrations from %s", len(saved), resource.description)
        return saved

    def get_app_resource(self, registration: AppRegistration) -> Resource:
        return self.resource_loader.get_resource(registration.uri)

    def get_app_metadata_resource(self, registration: AppRegistration) -> Resource:
        """The metadata artifact of a registration, falling back to the app artifact."""
        if registration.metadata_uri:
            return self.resource_loader.get_resource(registration.metadata_uri)
        return self.get_app_resource(registration)

    def _load_index(self) -> dict[str, dict]:
        if self.index_path.exists():
            with open(self.index_path) as f:
                return json.load(f)
        return {}

    def _save_index(self):
        with open(self.index_path, "w") as f:
            json.dump(self._index, f, indent=2)


def _key(name: str, type: ApplicationType) -> str:
    return f"{type.value}/{name}"


def _registration_to_dict(registration: AppRegistration) -> dict:
    return {
        "name": registration.name,
        "type": registration.type.value,
        "uri": registration.uri,
        "metadata_uri": registration.metadata_uri,
    }


def _dict_to_registration(data: dict) -> AppRegistration:
    return AppRegistration(
        name=data["name"],
        type=ApplicationType(data["type"]),
        uri=data["uri"],
        metadata_uri=data.get("metadata_uri"),
    )

"""Metadata resolver -- list the configuration properties of an application.

A metadata artifact is either:

1. A YAML or JSON document::

       properties:
         - name: server.port
           type: java.lang.Integer
           default_value: 8080
           description: Port to listen on.
       visible:
         - server.port

2. A jar/zip archive carrying ``META-INF/spring-configuration-metadata.json``
   and, optionally, ``META-INF/dataflow-configuration-metadata-whitelist.properties``
   whose ``configuration-properties.names`` lists the visible properties.

``visible`` entries match a property by full name or by dotted prefix.
"""

from __future__ import annotations

import io
import json
import zipfile

import yaml

from appregistry.registry.exceptions import MetadataResolutionError
from appregistry.registry.models import ConfigurationProperty
from appregistry.resources.loader import Resource, ResourceError
from appregistry.resources.properties import ENCODING as PROPERTIES_ENCODING, parse_properties

ARCHIVE_METADATA = "META-INF/spring-configuration-metadata.json"
ARCHIVE_VISIBLE = "META-INF/dataflow-configuration-metadata-whitelist.properties"
VISIBLE_NAMES_KEY = "configuration-properties.names"


class MetadataResolver:
    """Reads configuration properties out of metadata resources."""

    def list_properties(
        self, resource: Resource, exhaustive: bool = False
    ) -> list[ConfigurationProperty]:
        """Return the properties of ``resource``.

        Unless ``exhaustive`` is set, only the properties marked visible are
        returned; artifacts that mark nothing visible return everything.
        """
        try:
            data = resource.read_bytes()
        except ResourceError as exc:
            raise MetadataResolutionError(resource.description, exc) from exc

        if zipfile.is_zipfile(io.BytesIO(data)):
            raw_properties, visible = self._read_archive(data, resource.description)
        else:
            raw_properties, visible = self._read_document(data, resource.description)

        properties = [_to_property(p) for p in raw_properties if isinstance(p, dict)]
        properties = [p for p in properties if p.id]
        if exhaustive or not visible:
            return properties
        return [p for p in properties if _is_visible(p.id, visible)]

    def _read_document(self, data: bytes, description: str) -> tuple[list, list[str]]:
        try:
            doc = yaml.safe_load(data.decode("utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise MetadataResolutionError(description, exc) from exc

        if doc is None:
            return [], []
        if not isinstance(doc, dict):
            raise _malformed(description, "metadata document must be a mapping")
        properties = _as_list(doc.get("properties"), "properties", description)
        visible = _as_list(doc.get("visible"), "visible", description)
        return properties, [str(v) for v in visible]

    def _read_archive(self, data: bytes, description: str) -> tuple[list, list[str]]:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                names = set(archive.namelist())
                properties: list = []
                if ARCHIVE_METADATA in names:
                    metadata = json.loads(archive.read(ARCHIVE_METADATA).decode("utf-8"))
                    if not isinstance(metadata, dict):
                        raise _malformed(description, f"{ARCHIVE_METADATA} must hold an object")
                    properties = _as_list(metadata.get("properties"), "properties", description)
                visible: list[str] = []
                if ARCHIVE_VISIBLE in names:
                    listing = parse_properties(archive.read(ARCHIVE_VISIBLE).decode(PROPERTIES_ENCODING))
                    visible = [
                        n.strip() for n in listing.get(VISIBLE_NAMES_KEY, "").split(",") if n.strip()
                    ]
        except (zipfile.BadZipFile, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MetadataResolutionError(description, exc) from exc
        return properties, visible


def _malformed(description: str, reason: str) -> MetadataResolutionError:
    return MetadataResolutionError(description, ValueError(reason))


def _as_list(value, field_name: str, description: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _malformed(description, f"'{field_name}' must be a list")
    return value


def _to_property(raw: dict) -> ConfigurationProperty:
    prop_id = str(raw.get("id") or raw.get("name") or "")
    default = raw.get("default_value", raw.get("defaultValue"))
    deprecation = raw.get("deprecated", False) or bool(raw.get("deprecation"))
    return ConfigurationProperty(
        id=prop_id,
        name=prop_id.rsplit(".", 1)[-1],
        type=str(raw.get("type") or ""),
        default_value=default,
        description=str(raw.get("description") or ""),
        deprecated=bool(deprecation),
    )


def _is_visible(prop_id: str, visible: list[str]) -> bool:
    return any(prop_id == v or prop_id.startswith(v + ".") for v in visible)

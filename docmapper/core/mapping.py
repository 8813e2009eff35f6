from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Union

from docmapper.config import logger
from docmapper.core.paths import resolve_path

if TYPE_CHECKING:
    from docmapper.core.engine import Engine

ACTION_MAPPING = "_mapping"


class MappingType(str, Enum):
    """Field types understood by the engine."""

    DATE = "date"
    GEO_POINT = "geo_point"
    STRING = "string"

    BYTE = "byte"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"

    FLOAT = "float"
    DOUBLE = "double"

    BOOLEAN = "boolean"

    NULL = "null"


class MappingBuilder:
    """Declares how the engine indexes the fields of one document type.

        MappingBuilder().add_mapping("hq", MappingType.GEO_POINT).to_json()

    gives ``{"properties":{"hq":{"type":"geo_point"}}}``.
    """

    def __init__(self):
        self.properties: Dict[str, Dict[str, str]] = {}

    def add_mapping(self, name: str, field_type: Union[MappingType, str]) -> "MappingBuilder":
        self.properties[name] = {"type": MappingType(field_type).value}
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"properties": {k: dict(v) for k, v in self.properties.items()}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


def set_mapping_raw_json(engine: "Engine", obj, mapping: str) -> Any:
    """PUT a mapping for the storage path of ``obj``.

    The caller closes and reopens the index when the engine requires it.
    """
    path = resolve_path(obj)
    logger.info(f"Setting mapping for {path}")
    return engine.transport.request("PUT", engine.url(path, ACTION_MAPPING), body=mapping)


def set_mapping(engine: "Engine", obj, builder: MappingBuilder) -> Any:
    return set_mapping_raw_json(engine, obj, builder.to_json())


def get_mapping(engine: "Engine", obj) -> Dict[str, Any]:
    path = resolve_path(obj)
    return engine.transport.request("GET", engine.url(path, ACTION_MAPPING))


def delete_mapping_and_data(engine: "Engine", obj) -> Any:
    """Drop the mapping of ``obj``'s storage path along with its documents."""
    path = resolve_path(obj)
    logger.info(f"Deleting mapping and data for {path}")
    return engine.transport.request("DELETE", engine.url(path))

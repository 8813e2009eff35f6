"""Conversion between application objects and engine documents.

Documents are dataclasses or pydantic models; anything pydantic's
``TypeAdapter`` can validate and dump is accepted.
"""

from __future__ import annotations

import dataclasses
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Type, TypeVar

from pydantic import PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from docmapper.exceptions import SerializationError

T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter(doc_type: type) -> TypeAdapter:
    try:
        return TypeAdapter(doc_type)
    except PydanticUserError as e:
        raise SerializationError(
            f"{doc_type.__qualname__} cannot be mapped to a document: {e}"
        ) from e


def encode(obj: Any) -> Dict[str, Any]:
    """Return the JSON-ready document for ``obj``."""
    try:
        doc = _adapter(type(obj)).dump_python(obj, mode="json", by_alias=True)
    except (PydanticSerializationError, PydanticUserError) as e:
        raise SerializationError(
            f"Cannot serialize {type(obj).__qualname__}: {e}"
        ) from e
    if not isinstance(doc, dict):
        raise SerializationError(
            f"{type(obj).__qualname__} does not serialize to a JSON object"
        )
    return doc


def decode_as(doc_type: Type[T], source: Any) -> T:
    """Build a new ``doc_type`` instance from a raw ``_source`` payload."""
    try:
        return _adapter(doc_type).validate_python(source)
    except (PydanticValidationError, PydanticUserError) as e:
        raise SerializationError(
            f"Cannot decode document into {doc_type.__qualname__}: {e}"
        ) from e


def _field_names(obj: Any) -> List[str]:
    if dataclasses.is_dataclass(obj):
        return [f.name for f in dataclasses.fields(obj)]
    model_fields = getattr(type(obj), "model_fields", None)
    if model_fields is not None:
        return list(model_fields)
    return list(vars(obj))


def _merge(current: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(current)
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def update_from_source(obj: Any, source: Any) -> None:
    """Overwrite the fields of ``obj`` present in ``source``.

    Fields missing from the payload keep their current value, nested objects
    included, and unknown keys are ignored.
    """
    if not isinstance(source, Mapping):
        raise SerializationError(
            f"Document source must be a JSON object, got {type(source).__name__}"
        )
    merged = _merge(encode(obj), source)
    decoded = decode_as(type(obj), merged)
    for name in _field_names(decoded):
        setattr(obj, name, getattr(decoded, name))


def decode_into(obj: Any, envelope: Mapping[str, Any]) -> bool:
    """Apply a single-document fetch envelope to ``obj``.

    The envelope has the shape ``{_index, _type, _id, _version, found,
    _source}``. Returns ``False`` and leaves ``obj`` untouched when the
    document was not found.
    """
    if not envelope.get("found"):
        return False
    if "_source" not in envelope:
        raise SerializationError(
            f"Missing source for document {envelope.get('_id')!r} after a match"
        )
    update_from_source(obj, envelope["_source"])
    return True

"""Single-document operations: insert, bulk insert, update, get, delete,
delete by query and count.

Documents expose ``key()``, the identifier of the document inside its
storage path; the path itself comes from ``resolve_path``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence
from urllib.parse import quote

from opensearchpy import exceptions

from docmapper.config import logger
from docmapper.core.codec import decode_into, encode
from docmapper.core.paths import resolve_path
from docmapper.exceptions import SerializationError, ValidationError
from docmapper.schemas import DeletedIndex

if TYPE_CHECKING:
    from docmapper.core.engine import Engine
    from docmapper.core.query import QueryBuilder

ACTION_BULK = "_bulk"
ACTION_UPDATE = "_update"
ACTION_QUERY = "_query"
ACTION_COUNT = "_count"

NDJSON_HEADERS = {"Content-Type": "application/x-ndjson"}


def _doc_key(obj) -> str:
    return quote(str(obj.key()), safe="")


def _dumps(data: Any) -> str:
    try:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize document: {e}") from e


def insert(engine: "Engine", obj) -> Dict[str, Any]:
    """Index ``obj`` under its key. The caller ensures keys are unique."""
    path = resolve_path(obj)
    body = _dumps(encode(obj))
    return engine.transport.request("PUT", engine.url(path, _doc_key(obj)), body=body)


def bulk_insert(engine: "Engine", objs: Sequence[Any]) -> Dict[str, Any]:
    """Index several documents of the same type in one request.

    The storage path of the first object is used for the whole batch.
    """
    if not objs:
        raise ValidationError("no object to bulk insert")
    path = resolve_path(objs[0])
    lines = []
    for obj in objs:
        lines.append(_dumps({"index": {"_id": str(obj.key())}}))
        lines.append(_dumps(encode(obj)))
    # the bulk API wants every line newline-terminated, the last one included
    body = "\n".join(lines) + "\n"
    logger.info(f"Bulk indexing {len(objs)} documents into {path}")
    response = engine.transport.request(
        "POST", engine.url(path, ACTION_BULK), body=body, headers=NDJSON_HEADERS
    )
    if isinstance(response, dict) and response.get("errors"):
        logger.error(
            "Bulk insert reported item errors.",
            extra={"path": path, "count": len(objs)},
        )
    return response


def update(engine: "Engine", obj) -> Dict[str, Any]:
    """Partial update: the encoded object is sent as ``{"doc": ...}``."""
    path = resolve_path(obj)
    body = _dumps({"doc": encode(obj)})
    return engine.transport.request(
        "POST", engine.url(path, _doc_key(obj), ACTION_UPDATE), body=body
    )


def get(engine: "Engine", obj) -> bool:
    """Fetch the document stored under ``obj.key()`` into ``obj``.

    Only the key needs to be set beforehand. Returns False, leaving ``obj``
    untouched, when no such document exists.
    """
    path = resolve_path(obj)
    url = engine.url(path, _doc_key(obj))
    # a missing document answers 404 with a {"found": false} envelope
    response = engine.transport.request("GET", url, params={"ignore": 404})
    if not isinstance(response, dict):
        raise SerializationError(f"Unexpected response for GET {url}: {response!r}")
    if "found" not in response:
        # 404 about something else than the document, e.g. a missing index
        raise exceptions.NotFoundError(404, str(response.get("error", "not found")), response)
    return decode_into(obj, response)


def delete(engine: "Engine", obj) -> Dict[str, Any]:
    path = resolve_path(obj)
    return engine.transport.request("DELETE", engine.url(path, _doc_key(obj)))


def delete_by_query(
    engine: "Engine", obj, builder: Optional["QueryBuilder"]
) -> Optional[DeletedIndex]:
    """Delete the documents of ``obj``'s storage path matching ``builder``.

    The engine refuses pagination on this endpoint, so the builder's offset
    and limit are reset and left out of the request. Returns the summary of
    the first index whose entry parses, or None.
    """
    if builder is None:
        raise ValidationError("Query is not valid")
    path = resolve_path(obj)
    body = builder.to_json(paginate=False)
    builder.from_ = 0
    builder.size = 0
    response = engine.transport.request("DELETE", engine.url(path, ACTION_QUERY), body=body)
    if not isinstance(response, dict):
        raise SerializationError(f"Unexpected delete by query response: {response!r}")

    indices = response.get("_indices") or {}
    if not isinstance(indices, dict):
        return None
    for index_name, data in indices.items():
        try:
            return DeletedIndex.parse(data)
        except ValueError as e:
            logger.debug(f"Skipping delete summary of {index_name}: {e}")
    return None


def count(engine: "Engine", obj) -> int:
    """Number of documents stored under ``obj``'s storage path."""
    path = resolve_path(obj)
    response = engine.transport.request("GET", engine.url(path, ACTION_COUNT))
    try:
        return int(response["count"])
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"Cannot decode count response: {response!r}") from e

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar, Union

from docmapper.config import logger
from docmapper.core.codec import decode_as
from docmapper.core.paths import document_type, resolve_path
from docmapper.exceptions import SerializationError
from docmapper.schemas import ResultSet
from docmapper.tracing import (
    HITS_TOTAL,
    QUERY_VALUE,
    SEARCH,
    STATUS_OK,
    STORAGE_PATH,
    record_span_error,
    start_span,
)

if TYPE_CHECKING:
    from docmapper.core.engine import Engine
    from docmapper.core.query import QueryBuilder

T = TypeVar("T")

ACTION_SEARCH = "_search"
SEARCH_TYPE_COUNT = "count"


def search(
    engine: "Engine",
    obj: Union[T, Type[T]],
    builder: Optional["QueryBuilder"] = None,
) -> ResultSet[T]:
    """Search the storage path of ``obj`` and decode every hit.

    ``obj`` is a document instance or class; each hit is decoded into a new
    instance of that class and attached to ``Hit.object``. Without a builder
    every document of the path matches.
    """
    body = builder.to_json() if builder is not None else None
    return search_raw_json(engine, obj, body)


def search_count(
    engine: "Engine",
    obj: Union[T, Type[T]],
    builder: Optional["QueryBuilder"] = None,
) -> ResultSet[T]:
    """Like ``search`` with the count search type: totals and facets only."""
    body = builder.to_json() if builder is not None else None
    return search_raw_json(engine, obj, body, search_type=SEARCH_TYPE_COUNT)


def search_raw_json(
    engine: "Engine",
    obj: Union[T, Type[T]],
    body: Optional[str],
    search_type: Optional[str] = None,
) -> ResultSet[T]:
    """Search with a caller-supplied JSON body, sent as is.

    Prefer ``search`` with a ``QueryBuilder``, which never emits the empty
    clauses the engine rejects.
    """
    path = resolve_path(obj)
    doc_type = document_type(obj)
    params: Dict[str, Any] = {"search_type": search_type} if search_type else {}

    with start_span("Search", kind=SEARCH) as span:
        span.set_attribute(STORAGE_PATH, path)
        if body:
            span.set_attribute(QUERY_VALUE, body)
        logger.info(f"Searching {path} with query: {body or '<match all>'}")

        response = engine.transport.request(
            "GET", engine.url(path, ACTION_SEARCH), body=body, params=params or None
        )
        if not isinstance(response, dict):
            error = SerializationError(f"Unexpected search response: {response!r}")
            record_span_error(span, error)
            raise error

        rset: ResultSet[T] = ResultSet.from_response(response)
        span.set_attribute(HITS_TOTAL, rset.total)
        for hit in rset.hits:
            try:
                hit.object = decode_as(doc_type, hit.source)
            except SerializationError as e:
                # one bad document fails the whole result set
                record_span_error(span, e)
                logger.error(
                    f"Cannot decode hit {hit.id} of {path}",
                    extra={"path": path, "id": hit.id},
                )
                raise
        logger.info(f"Search on {path} returned {len(rset.hits)} of {rset.total} hits.")
        span.set_status(STATUS_OK)
        return rset

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from docmapper.config import logger

if TYPE_CHECKING:
    from docmapper.core.engine import Engine

ACTION_OPEN = "_open"
ACTION_CLOSE = "_close"


def index_exists(engine: "Engine") -> bool:
    # HEAD requests come back as a boolean from the transport
    return bool(engine.transport.request("HEAD", engine.url()))


def create_index(engine: "Engine") -> Any:
    logger.info(f"Creating OpenSearch index: {engine.index_name}")
    return engine.transport.request("PUT", engine.url())


def create_index_if_needed(engine: "Engine") -> bool:
    """Create the engine's index when missing. Returns True if it was created."""
    if index_exists(engine):
        return False
    create_index(engine)
    return True


def open_index(engine: "Engine") -> Any:
    return engine.transport.request("POST", engine.url("", ACTION_OPEN))


def close_index(engine: "Engine") -> Any:
    return engine.transport.request("POST", engine.url("", ACTION_CLOSE))


def delete_index(engine: "Engine") -> Any:
    logger.info(f"Deleting OpenSearch index: {engine.index_name}")
    return engine.transport.request("DELETE", engine.url())

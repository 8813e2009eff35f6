from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Type, TypeVar, Union
from urllib.parse import urlsplit

from docmapper.config import DOCMAPPER_URL, logger
from docmapper.core import crud, indexes, mapping, search
from docmapper.core.mapping import MappingBuilder
from docmapper.core.opensearch_client import GatedTransport, get_client
from docmapper.core.paths import strict_slash
from docmapper.core.query import QueryBuilder
from docmapper.exceptions import ValidationError
from docmapper.schemas import DeletedIndex, ResultSet

T = TypeVar("T")


class Engine:
    """Handle on one index of a search engine.

    The handle owns the server URL, the index base path and a single-slot
    gate: whatever the number of threads using it, at most one request is in
    flight at a time. Handles are independent, so two handles on the same
    server do not block each other.

        engine = Engine.from_url("http://localhost:9200/shop")
        engine.insert(item)
        found = engine.get(Item(id=item.id))
    """

    def __init__(self, url: Optional[str] = None, transport=None):
        parts = urlsplit(url or DOCMAPPER_URL)
        if not parts.scheme or not parts.netloc:
            raise ValidationError(f"Invalid engine URL: {url!r}")
        self.server_url = f"{parts.scheme}://{parts.netloc}"
        self.base_path = strict_slash(parts.path or "/")
        if self.base_path == "/":
            raise ValidationError(f"Engine URL has no index path: {url!r}")
        if transport is None:
            transport = get_client(self.server_url).transport
        self.transport = GatedTransport(transport)

    @classmethod
    def from_url(cls, url: Optional[str] = None, create_index: bool = True) -> "Engine":
        """Build a handle and create its index when it does not exist yet."""
        engine = cls(url)
        if create_index and engine.create_index_if_needed():
            logger.info(f"Created index {engine.index_name} on {engine.server_url}")
        return engine

    @property
    def index_name(self) -> str:
        return self.base_path.strip("/")

    def url(self, path: str = "", *parts: str) -> str:
        """Request path: index base path, storage path, then ``parts``."""
        return self.base_path + path + "/".join(parts)

    # ───────────────────────────────────────
    # Documents
    # ───────────────────────────────────────
    def insert(self, obj) -> Dict[str, Any]:
        return crud.insert(self, obj)

    def bulk_insert(self, objs: Sequence[Any]) -> Dict[str, Any]:
        return crud.bulk_insert(self, objs)

    def update(self, obj) -> Dict[str, Any]:
        return crud.update(self, obj)

    def get(self, obj) -> bool:
        return crud.get(self, obj)

    def delete(self, obj) -> Dict[str, Any]:
        return crud.delete(self, obj)

    def delete_by_query(self, obj, builder: Optional[QueryBuilder]) -> Optional[DeletedIndex]:
        return crud.delete_by_query(self, obj, builder)

    def count(self, obj) -> int:
        return crud.count(self, obj)

    # ───────────────────────────────────────
    # Search
    # ───────────────────────────────────────
    def search(
        self, obj: Union[T, Type[T]], builder: Optional[QueryBuilder] = None
    ) -> ResultSet[T]:
        return search.search(self, obj, builder)

    def search_count(
        self, obj: Union[T, Type[T]], builder: Optional[QueryBuilder] = None
    ) -> ResultSet[T]:
        return search.search_count(self, obj, builder)

    def search_raw_json(self, obj: Union[T, Type[T]], body: Optional[str]) -> ResultSet[T]:
        return search.search_raw_json(self, obj, body)

    # ───────────────────────────────────────
    # Mappings
    # ───────────────────────────────────────
    def set_mapping(self, obj, builder: MappingBuilder) -> Any:
        return mapping.set_mapping(self, obj, builder)

    def set_mapping_raw_json(self, obj, body: str) -> Any:
        return mapping.set_mapping_raw_json(self, obj, body)

    def get_mapping(self, obj) -> Dict[str, Any]:
        return mapping.get_mapping(self, obj)

    def delete_mapping_and_data(self, obj) -> Any:
        return mapping.delete_mapping_and_data(self, obj)

    # ───────────────────────────────────────
    # Index
    # ───────────────────────────────────────
    def index_exists(self) -> bool:
        return indexes.index_exists(self)

    def create_index(self) -> Any:
        return indexes.create_index(self)

    def create_index_if_needed(self) -> bool:
        return indexes.create_index_if_needed(self)

    def open_index(self) -> Any:
        return indexes.open_index(self)

    def close_index(self) -> Any:
        return indexes.close_index(self)

    def delete_index(self) -> Any:
        return indexes.delete_index(self)

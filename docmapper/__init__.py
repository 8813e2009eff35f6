"""Map typed objects onto documents of an OpenSearch/Elasticsearch index and
build queries for it."""

from docmapper.core.engine import Engine
from docmapper.core.mapping import MappingBuilder, MappingType
from docmapper.core.paths import resolve_path
from docmapper.core.query import (
    BoundingBox,
    Location,
    QueryBuilder,
    SortMode,
    SortOrder,
    Unit,
)
from docmapper.exceptions import (
    DocMapperError,
    InvalidQueryError,
    PathResolutionError,
    SerializationError,
    ValidationError,
)
from docmapper.schemas import DeletedIndex, FacetResult, Hit, ResultSet, ShardSummary

__all__ = [
    "Engine",
    "MappingBuilder",
    "MappingType",
    "resolve_path",
    "BoundingBox",
    "Location",
    "QueryBuilder",
    "SortMode",
    "SortOrder",
    "Unit",
    "DocMapperError",
    "InvalidQueryError",
    "PathResolutionError",
    "SerializationError",
    "ValidationError",
    "DeletedIndex",
    "FacetResult",
    "Hit",
    "ResultSet",
    "ShardSummary",
]

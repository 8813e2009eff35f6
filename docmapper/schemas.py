"""Response envelopes returned by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


# -----------------------------
# Search
# -----------------------------
@dataclass
class Hit(Generic[T]):
    id: str
    source: Dict[str, Any] = field(default_factory=dict)
    # filled by the search engine once the source is decoded
    object: Optional[T] = None


@dataclass
class FacetResult:
    total: int = 0
    terms: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ResultSet(Generic[T]):
    took: int = 0
    total: int = 0
    hits: List[Hit[T]] = field(default_factory=list)
    facets: Dict[str, FacetResult] = field(default_factory=dict)

    @property
    def objects(self) -> List[T]:
        return [hit.object for hit in self.hits if hit.object is not None]

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "ResultSet[T]":
        hits = response.get("hits") or {}
        total = hits.get("total", 0)
        # newer engines report {"value": n, "relation": "eq"}
        if isinstance(total, dict):
            total = total.get("value", 0)
        return cls(
            took=int(response.get("took") or 0),
            total=int(total or 0),
            hits=[
                Hit(id=str(h.get("_id", "")), source=h.get("_source") or {})
                for h in hits.get("hits") or []
            ],
            facets={
                name: FacetResult(
                    total=int(facet.get("total") or 0),
                    terms=list(facet.get("terms") or []),
                )
                for name, facet in (response.get("facets") or {}).items()
            },
        )


# -----------------------------
# Delete by query
# -----------------------------
@dataclass
class ShardSummary:
    total: int = 0
    successful: int = 0
    failed: int = 0


@dataclass
class DeletedIndex:
    shards: ShardSummary = field(default_factory=ShardSummary)

    @classmethod
    def parse(cls, data: Any) -> "DeletedIndex":
        """Parse one per-index entry of a delete-by-query response.

        Missing counters default to zero; a value of the wrong shape raises
        ``ValueError``.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        shards = data.get("_shards", {})
        if not isinstance(shards, dict):
            raise ValueError("_shards is not an object")
        counters = {}
        for name in ("total", "successful", "failed"):
            value = shards.get(name, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"_shards.{name} is not an integer: {value!r}")
            counters[name] = value
        return cls(shards=ShardSummary(**counters))

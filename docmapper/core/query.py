"""Fluent builder for search queries.

    qb = QueryBuilder().add_query_string("name", "bmw").add_lesser_than_range("price", 15000)
    qb.add_sort("price", SortOrder.DESC)
    body = qb.to_json()

expands to::

    {"from":0,"size":10,
     "query":{"filtered":{"query":{"bool":{"must":[
        {"query_string":{"default_field":"name","query":"bmw"}},
        {"range":{"price":{"lte":15000}}}]}}}},
     "sort":[{"price":{"order":"desc"}}]}

Only the parts that were set are emitted: an empty boolean query becomes
``match_all``, an unset geo filter leaves no ``filter`` key, and empty sort or
facet sections are left out. The engine rejects those empty shapes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from docmapper.config import DEFAULT_PAGE_SIZE, EXACT_MATCH_BOOST, FUZZY_MATCH_BOOST
from docmapper.core.checksum import query_checksum
from docmapper.exceptions import InvalidQueryError, SerializationError, ValidationError

Number = Union[int, float]


class Unit(str, Enum):
    """Distance units known by the engine."""

    METERS = "m"
    KILOMETERS = "km"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortMode(str, Enum):
    """How multi-valued fields are reduced before sorting."""

    DEFAULT = ""
    MIN = "min"
    MAX = "max"
    SUM = "sum"
    AVG = "avg"


def _number(value: Number) -> Number:
    # 12.0 is written 12, as the engine's own clients do
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass
class Location:
    lat: float
    lon: float

    def to_dict(self) -> Dict[str, Number]:
        return {"lat": _number(self.lat), "lon": _number(self.lon)}


@dataclass
class BoundingBox:
    top_left: Location
    bottom_right: Location

    def to_dict(self) -> Dict[str, Dict[str, Number]]:
        return {
            "top_left": self.top_left.to_dict(),
            "bottom_right": self.bottom_right.to_dict(),
        }


def _encode(value: Any) -> Any:
    """JSON-ready form of a clause: mapping keys sorted, geo types in their
    fixed field order."""
    if isinstance(value, (Location, BoundingBox)):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _encode(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    if isinstance(value, float):
        return _number(value)
    return value


class QueryBuilder:
    """Mutable, chainable description of a search request.

    ``from_`` and ``size`` hold the result offset and limit. At most one geo
    filter is active at a time: adding one replaces the previous one.
    """

    def __init__(self, from_: int = 0, size: int = DEFAULT_PAGE_SIZE):
        self.from_ = from_
        self.size = size
        self._must: List[Dict[str, Any]] = []
        self._should: List[Dict[str, Any]] = []
        self._geo_filter: Optional[Dict[str, Any]] = None
        self._sort: List[Dict[str, Any]] = []
        self._facets: Dict[str, Dict[str, Any]] = {}
        self._warnings: List[str] = []

    def warnings(self) -> List[str]:
        return list(self._warnings)

    # ───────────────────────────────────────
    # Pagination and sort
    # ───────────────────────────────────────
    def set_pagination(self, offset: int, limit: int) -> "QueryBuilder":
        if offset < 0 or limit < 0:
            raise ValidationError(
                f"offset and limit must be positive, got {offset} and {limit}"
            )
        self.from_ = offset
        self.size = limit
        return self

    def add_sort(
        self,
        field: str,
        order: Union[SortOrder, str] = SortOrder.ASC,
        mode: Union[SortMode, str] = SortMode.DEFAULT,
    ) -> "QueryBuilder":
        """Append a sort directive; directives apply in insertion order.

        ``add_sort("name")`` adds ``{"name": {"order": "asc"}}``.
        """
        directive: Dict[str, Any] = {"order": SortOrder(order)}
        mode = SortMode(mode)
        if mode is not SortMode.DEFAULT:
            directive["mode"] = mode
        self._sort.append({field: directive})
        return self

    # ───────────────────────────────────────
    # Boolean clauses
    # ───────────────────────────────────────
    def set_term(self, field: str, value: Any) -> "QueryBuilder":
        """Require an exact term: ``{"term": {field: value}}`` in "must"."""
        self._must.append({"term": {field: value}})
        return self

    def add_query_string(self, field: str, query: str) -> "QueryBuilder":
        """Require a free-text match on ``field``, in "must"."""
        self._must.append(
            {"query_string": {"default_field": field, "query": query}}
        )
        return self

    def add_fuzzy_search(self, field: str, query: str) -> "QueryBuilder":
        """Favor exact phrase matches while tolerating near matches.

        Two "should" clauses are added: a phrase match on ``field`` with a
        high boost and a match on the ``<field>.fuzzy`` sub-field with a low
        one.
        """
        self._should.append(
            {
                "match": {
                    field: {
                        "boost": EXACT_MATCH_BOOST,
                        "query": query,
                        "type": "phrase",
                    }
                }
            }
        )
        self._should.append(
            {"match": {f"{field}.fuzzy": {"boost": FUZZY_MATCH_BOOST, "query": query}}}
        )
        return self

    def add_range(self, field: str, from_: int, to: int) -> "QueryBuilder":
        """Inclusive integer range, ``{"range": {field: {"from": .., "to": ..}}}``."""
        self._must.append({"range": {field: {"from": from_, "to": to}}})
        return self

    def add_float_range(self, field: str, from_: Number, to: Number) -> "QueryBuilder":
        """Lower and upper bounds, added as two separate range clauses."""
        return self.add_greater_than_range(field, from_).add_lesser_than_range(field, to)

    def add_greater_than_range(self, field: str, from_: Number) -> "QueryBuilder":
        self._must.append({"range": {field: {"gte": from_}}})
        return self

    def add_lesser_than_range(self, field: str, to: Number) -> "QueryBuilder":
        self._must.append({"range": {field: {"lte": to}}})
        return self

    # ───────────────────────────────────────
    # Geo filters
    # ───────────────────────────────────────
    def add_geo_distance(
        self,
        field: str,
        point: Location,
        distance: Number,
        unit: Union[Unit, str] = Unit.KILOMETERS,
    ) -> "QueryBuilder":
        """Keep results within ``distance`` of ``point``.

        ``add_geo_distance("location", Location(0, 0), 12)`` sets the filter
        ``{"geo_distance": {"distance": "12km", "location": {"lat": 0, "lon": 0}}}``.
        """
        if distance < 0:
            self._warnings.append(f"invalid geo distance {distance}, must be positive")
        self._geo_filter = {
            "geo_distance": {
                "distance": f"{_number(distance)}{Unit(unit).value}",
                field: point,
            }
        }
        return self

    def add_geo_bounding_box(
        self, field: str, top_left: Location, bottom_right: Location
    ) -> "QueryBuilder":
        """Keep results inside the box spanned by two corners.

        An inverted box is still set but records a warning, so ``to_json()``
        refuses it while ``force_to_json()`` does not.
        """
        if top_left.lat < bottom_right.lat:
            self._warnings.append(
                "invalid bounding box, top_left latitude "
                f"({top_left.lat:f}) is lower than bottom_right latitude ({bottom_right.lat:f})"
            )
        if top_left.lon < bottom_right.lon:
            self._warnings.append(
                "invalid bounding box, top_left longitude "
                f"({top_left.lon:f}) is lower than bottom_right longitude ({bottom_right.lon:f})"
            )
        self._geo_filter = {"geo_bounding_box": {field: BoundingBox(top_left, bottom_right)}}
        return self

    def add_geo_polygon(self, field: str, points: Sequence[Location]) -> "QueryBuilder":
        """Keep results inside the polygon described by ``points``."""
        if len(points) < 3:
            self._warnings.append(
                f"invalid polygon, {len(points)} points given, at least 3 needed"
            )
        self._geo_filter = {"geo_polygon": {field: {"points": list(points)}}}
        return self

    # ───────────────────────────────────────
    # Facets
    # ───────────────────────────────────────
    def set_term_facet(
        self,
        name: str,
        field: str,
        size: int,
        terms: Optional[Dict[str, Any]] = None,
    ) -> "QueryBuilder":
        """Register a terms facet called ``name``.

        ``set_term_facet("facet1", "field1", 50)`` adds
        ``"facets": {"facet1": {"terms": {"field": "field1", "size": 50}}}``.
        Extra ``terms`` options are merged in; ``field`` and ``size`` win.
        """
        self._facets[name] = {"terms": {**(terms or {}), "field": field, "size": size}}
        return self

    # ───────────────────────────────────────
    # Serialization
    # ───────────────────────────────────────
    def to_dict(self, paginate: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if paginate:
            out["from"] = self.from_
            out["size"] = self.size

        bool_query: Dict[str, Any] = {}
        if self._must:
            bool_query["must"] = _encode(self._must)
        if self._should:
            bool_query["should"] = _encode(self._should)
        filtered: Dict[str, Any] = {
            "query": {"bool": bool_query} if bool_query else {"match_all": {}}
        }
        if self._geo_filter is not None:
            filtered["filter"] = _encode(self._geo_filter)
        out["query"] = {"filtered": filtered}

        if self._sort:
            out["sort"] = _encode(self._sort)
        if self._facets:
            out["facets"] = _encode(self._facets)
        return out

    def _dumps(self, paginate: bool) -> str:
        try:
            return json.dumps(
                self.to_dict(paginate=paginate),
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot serialize query: {e}") from e

    def _check_warnings(self) -> None:
        if self._warnings:
            raise InvalidQueryError(
                "to_json() refuses to serialize queries with warnings: "
                + "; ".join(self._warnings),
                warnings=self._warnings,
            )

    def to_json(self, paginate: bool = True) -> str:
        """Serialized query, only when no warning was recorded.

        The engine usually accepts such queries but the results are probably
        not the expected ones (see ``add_geo_bounding_box``).
        """
        self._check_warnings()
        return self._dumps(paginate)

    def force_to_json(self, paginate: bool = True) -> str:
        """Serialized query, even when warnings were recorded."""
        return self._dumps(paginate)

    def checksum(self) -> str:
        """SHA-1 of ``to_json()``: identical queries, clause order included,
        share a checksum."""
        return query_checksum(self.to_json())

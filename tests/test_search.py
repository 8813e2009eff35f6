import json
from dataclasses import dataclass, field

import pytest

from docmapper.core.paths import resolve_path
from docmapper.core.query import Location, QueryBuilder
from docmapper.exceptions import InvalidQueryError, SerializationError
from docmapper.schemas import FacetResult


@dataclass
class DummyObject:
    id: int = 0
    description: str = ""
    len: float = 0.0
    hq: Location = field(default_factory=lambda: Location(0.5, 0.5))

    def key(self):
        return str(self.id)


PATH = resolve_path(DummyObject)
SEARCH_URL = f"/gooseindex/{PATH}_search"

DUMMIES = [
    DummyObject(1, "Dummy object 1", 30.18, Location(40.12, -71.34)),
    DummyObject(2, "My object id is 2", 40.5, Location(43.454834, 3.757789)),
]


def _response(sources, total=None, facets=None):
    return {
        "took": 4,
        "hits": {
            "total": len(sources) if total is None else total,
            "hits": [
                {"_id": str(s.get("id")), "_source": s} for s in sources
            ],
        },
        "facets": facets or {},
    }


def _source(dummy):
    return {
        "id": dummy.id,
        "description": dummy.description,
        "len": dummy.len,
        "hq": {"lat": dummy.hq.lat, "lon": dummy.hq.lon},
    }


def test_search_without_builder_matches_everything(engine, transport):
    transport.queue(_response([_source(d) for d in DUMMIES]))
    rset = engine.search(DUMMIES[0])

    call = transport.last
    assert call["method"] == "GET"
    assert call["url"] == SEARCH_URL
    assert call["body"] is None
    assert call["params"] is None

    assert rset.took == 4
    assert rset.total == 2
    assert [hit.id for hit in rset.hits] == ["1", "2"]
    assert rset.objects == DUMMIES
    assert all(isinstance(hit.object, DummyObject) for hit in rset.hits)
    # each hit gets its own instance
    assert rset.hits[0].object is not DUMMIES[0]


def test_search_with_builder_sends_query(engine, transport):
    transport.queue(_response([_source(DUMMIES[0])]))
    qb = QueryBuilder().add_query_string("description", "Dummy")
    rset = engine.search(DummyObject, qb)

    assert transport.last["body"] == qb.to_json()
    assert rset.total == 1
    assert rset.objects == [DUMMIES[0]]


def test_search_refuses_builder_with_warnings(engine, transport):
    qb = QueryBuilder().add_geo_bounding_box("hq", Location(0, 0), Location(1, 1))
    with pytest.raises(InvalidQueryError):
        engine.search(DummyObject, qb)
    assert transport.calls == []


def test_search_decodes_facets(engine, transport):
    transport.queue(
        _response(
            [],
            total=12,
            facets={"tags": {"total": 12, "terms": [{"term": "watch", "count": 7}]}},
        )
    )
    rset = engine.search(DummyObject, QueryBuilder().set_term_facet("tags", "tags", 10))
    assert rset.total == 12
    assert rset.hits == []
    assert rset.facets == {"tags": FacetResult(total=12, terms=[{"term": "watch", "count": 7}])}


def test_search_accepts_object_total(engine, transport):
    response = _response([_source(DUMMIES[0])])
    response["hits"]["total"] = {"value": 7, "relation": "eq"}
    transport.queue(response)
    assert engine.search(DummyObject).total == 7


def test_bad_hit_aborts_the_result_set(engine, transport):
    sources = [_source(DUMMIES[0]), {"id": "two", "hq": "nowhere"}, _source(DUMMIES[1])]
    transport.queue(_response(sources))
    with pytest.raises(SerializationError):
        engine.search(DummyObject)


def test_search_count_uses_count_search_type(engine, transport):
    transport.queue(_response([], total=2))
    rset = engine.search_count(DummyObject, QueryBuilder().set_term("id", "1"))
    assert rset.total == 2
    assert transport.last["params"] == {"search_type": "count"}
    assert transport.last["url"] == SEARCH_URL


def test_search_raw_json_sends_body_as_is(engine, transport):
    body = json.dumps({"query": {"match_all": {}}})
    transport.queue(_response([_source(DUMMIES[1])]))
    rset = engine.search_raw_json(DummyObject, body)
    assert transport.last["body"] == body
    assert rset.objects == [DUMMIES[1]]


def test_search_uses_build_path_override(engine, transport):
    @dataclass
    class Corner:
        name: str = ""

        def key(self):
            return self.name

        @staticmethod
        def build_path():
            return "corner/"

    transport.queue(_response([{"name": "a"}]))
    rset = engine.search(Corner)
    assert transport.last["url"] == "/gooseindex/corner/_search"
    assert rset.objects == [Corner("a")]

import logging

import pytest
from opensearchpy import OpenSearch, exceptions

from docmapper.core.opensearch_client import GatedTransport, get_client


def test_get_client_is_cached_per_url():
    client = get_client("http://localhost:9200")
    assert isinstance(client, OpenSearch)
    assert get_client("http://localhost:9200") is client
    assert get_client("http://localhost:9201") is not client


def test_request_returns_decoded_body(transport_factory):
    fake = transport_factory([{"acknowledged": True}])
    gated = GatedTransport(fake)
    assert gated.request("PUT", "/idx/", body="{}", params={"refresh": "true"}) == {"acknowledged": True}
    assert fake.last == {
        "method": "PUT",
        "url": "/idx/",
        "headers": None,
        "params": {"refresh": "true"},
        "body": "{}",
    }


def test_request_logs_and_reraises_transport_errors(transport_factory, caplog):
    error = exceptions.TransportError(400, "parsing_exception", {"error": "bad query"})
    gated = GatedTransport(transport_factory([error]))
    with caplog.at_level(logging.ERROR, logger="docmapper"):
        with pytest.raises(exceptions.TransportError) as excinfo:
            gated.request("GET", "/idx/item/_search", body="{}")
    assert excinfo.value is error
    assert "GET /idx/item/_search" in caplog.text

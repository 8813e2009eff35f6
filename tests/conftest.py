import pytest

from docmapper.core.engine import Engine

ENGINE_URL = "http://localhost:9200/gooseindex"


class FakeTransport:
    """Stands in for ``opensearchpy.Transport``: records every request and
    replays queued responses (exceptions are raised)."""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = list(responses or [])

    def queue(self, *responses):
        self.responses.extend(responses)

    def perform_request(self, method, url, headers=None, params=None, body=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": headers,
                "params": dict(params) if params else params,
                "body": body,
            }
        )
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return {}

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def engine(transport):
    return Engine(ENGINE_URL, transport=transport)


@pytest.fixture
def transport_factory():
    return FakeTransport

from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Spans are no-ops until the application installs an SDK tracer provider.
tracer = trace.get_tracer("docmapper")

# Span kinds
REQUEST = "request"
SEARCH = "search"
STATUS_OK = Status(StatusCode.OK)

# Attribute keys
SPAN_KIND = "docmapper.span.kind"
HTTP_METHOD = "http.request.method"
URL_PATH = "url.path"
HTTP_STATUS = "http.response.status_code"
STORAGE_PATH = "docmapper.storage_path"
QUERY_VALUE = "docmapper.query"
HITS_TOTAL = "docmapper.hits.total"


@contextmanager
def start_span(name: str, kind: str):
    """Start a span tagged with the docmapper span kind."""
    with tracer.start_as_current_span(name) as span:
        span.set_attribute(SPAN_KIND, kind)
        yield span


def record_span_error(span, error: Exception):
    """Attach error information to a span and mark it as failed."""
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))

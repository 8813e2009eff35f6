import threading
from functools import lru_cache
from typing import Any, Dict, Optional

from opensearchpy import OpenSearch, RequestsHttpConnection, exceptions

from docmapper.config import (
    DOCMAPPER_VERIFY_CERTS,
    OPENSEARCH_REQUEST_TIMEOUT,
    logger,
)
from docmapper.tracing import (
    HTTP_METHOD,
    HTTP_STATUS,
    REQUEST,
    STATUS_OK,
    URL_PATH,
    record_span_error,
    start_span,
)


@lru_cache(maxsize=None)
def get_client(server_url: str) -> OpenSearch:
    return OpenSearch(
        hosts=[server_url],
        connection_class=RequestsHttpConnection,
        timeout=OPENSEARCH_REQUEST_TIMEOUT,
        verify_certs=DOCMAPPER_VERIFY_CERTS,
        # a failed request surfaces to the caller, who owns any retry policy
        max_retries=0,
        retry_on_timeout=False,
    )


class GatedTransport:
    """Sends requests through a client transport, one at a time.

    The gate is a plain (non-reentrant) lock: a caller must not issue a new
    request from code running while the gate is held.
    """

    def __init__(self, transport):
        self.transport = transport
        self._lock = threading.Lock()

    def request(
        self,
        method: str,
        url: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform one request and return the decoded response body.

        Non-2xx responses raise ``opensearchpy.exceptions.TransportError``
        (status code in ``status_code``, response body in ``info``).
        """
        with start_span(f"{method} {url}", kind=REQUEST) as span:
            span.set_attribute(HTTP_METHOD, method)
            span.set_attribute(URL_PATH, url)
            logger.debug(f"{method} {url}")
            try:
                with self._lock:
                    response = self.transport.perform_request(
                        method, url, headers=headers, params=params, body=body
                    )
            except exceptions.TransportError as e:
                status = getattr(e, "status_code", None)
                if isinstance(status, int):
                    span.set_attribute(HTTP_STATUS, status)
                record_span_error(span, e)
                logger.error(
                    f"OpenSearch request failed: {method} {url}",
                    extra={"status": status, "info": getattr(e, "info", None)},
                )
                raise
            except Exception as e:
                record_span_error(span, e)
                logger.exception(f"Unexpected error during {method} {url}")
                raise
            span.set_status(STATUS_OK)
            return response

from typing import List, Optional


class DocMapperError(Exception):
    """Base class for errors raised by docmapper itself.

    Transport failures are not wrapped: they surface as the
    ``opensearchpy.exceptions.TransportError`` raised by the client, which
    carries the HTTP status code and the response body.
    """


class PathResolutionError(DocMapperError, TypeError):
    """No storage path can be derived for an object (None, unnamed type or
    an invalid ``build_path()`` result)."""


class ValidationError(DocMapperError, ValueError):
    """An operation was called with unusable arguments (missing query,
    empty batch)."""


class SerializationError(DocMapperError, ValueError):
    """An object cannot be encoded, or a payload cannot be decoded into the
    target type."""


class InvalidQueryError(DocMapperError, ValueError):
    """Strict query serialization refused a builder holding warnings."""

    def __init__(self, message: str, warnings: Optional[List[str]] = None):
        super().__init__(message)
        self.warnings = list(warnings or [])

import re
from functools import lru_cache

from docmapper.exceptions import PathResolutionError

PATH_SEPARATOR = "/"
_TYPE_SEPARATOR = "__"
_TRAILING_SLASHES = re.compile(r"/*$")


def strict_slash(path: str) -> str:
    """Terminate ``path`` with exactly one slash."""
    return _TRAILING_SLASHES.sub(PATH_SEPARATOR, path, count=1)


def document_type(obj) -> type:
    return obj if isinstance(obj, type) else type(obj)


@lru_cache(maxsize=None)
def type_path(doc_type: type) -> str:
    """Storage path derived from a type's module and name.

    ``shop.models.Item`` maps to ``shop_models__item/``.
    """
    name = getattr(doc_type, "__name__", "") or ""
    if not name.isidentifier():
        raise PathResolutionError("Object cannot be an unnamed type.")
    module = (getattr(doc_type, "__module__", "") or "").replace(".", "_")
    return f"{module}{_TYPE_SEPARATOR}{name}{PATH_SEPARATOR}".lower()


def resolve_path(obj) -> str:
    """Return the storage path for ``obj``, an instance or a document class.

    An object (or class) defining ``build_path()`` chooses its own path: the
    method is called with no argument and must return a string of at least
    two characters ending with a slash. Otherwise the path is derived from
    the type identity, see ``type_path``.
    """
    if obj is None:
        raise PathResolutionError("Object cannot be None")
    doc_type = document_type(obj)

    build_path = getattr(obj, "build_path", None)
    if callable(build_path):
        try:
            path = build_path()
        except TypeError as e:
            # instance method looked up on the class itself
            raise PathResolutionError(
                f"{doc_type.__qualname__}.build_path() cannot be called without arguments"
            ) from e
        if (
            not isinstance(path, str)
            or len(path) < 2
            or not path.endswith(PATH_SEPARATOR)
        ):
            raise PathResolutionError(
                f"{doc_type.__qualname__}.build_path() returned invalid path: {path!r}"
            )
        return path
    return type_path(doc_type)

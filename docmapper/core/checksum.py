from typing import Union
import hashlib


def query_checksum(query: Union[str, bytes]) -> str:
    if isinstance(query, str):
        query = query.encode("utf-8")
    return hashlib.sha1(query).hexdigest()

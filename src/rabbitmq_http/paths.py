from __future__ import annotations

import urllib.parse
from typing import Union

Segment = Union[str, int]


def encode_segment(segment: Segment) -> str:
    """Percent-encode a single path segment, including any '/' it contains."""
    return urllib.parse.quote(str(segment), safe="")


def path(*segments: Segment) -> str:
    """
    Join segments into an API-relative path.

    Each segment is encoded on its own, so the default virtual host "/" becomes
    "%2F" rather than an empty path component:

    >>> path("queues", "/", "orders")
    'queues/%2F/orders'
    """
    return "/".join(encode_segment(s) for s in segments)


def join_endpoint(endpoint: str, relative_path: str) -> str:
    return f"{endpoint.rstrip('/')}/{relative_path.lstrip('/')}"

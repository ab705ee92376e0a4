"""Canonical resource and query normalization for request signing.

The store re-derives the canonical resource from the request it receives,
so every byte produced here must match what goes out on the wire:

- Query parameters are sorted by key. Values for a repeated key keep their
  submission order and are emitted consecutively.
- A parameter with an empty value is emitted as the bare escaped key
  (``?acl``, ``?uploads``).
- Object keys are escaped one path segment at a time so that ``/`` stays a
  separator: ``a/b`` and ``a%2Fb`` are different objects.
"""

from typing import Iterable
from urllib.parse import quote_plus


def clean_key(key: str) -> str:
    """Trim surrounding spaces and slashes from an object key."""
    return key.strip(" /")


def query_escape(value: str) -> str:
    """Escape a string for use in a query component (space becomes ``+``)."""
    return quote_plus(value, safe="")


# Dot segments would be removed by URL normalization before sending
_DOT_SEGMENTS = {".": "%2E", "..": "%2E%2E"}


def escape_key(key: str) -> str:
    """Escape an object key for use as a URL path.

    Each segment is query-escaped independently, then any ``+`` produced
    for a space is rewritten to ``%20``: a raw ``+`` in a path is a literal
    plus sign to the store. A literal ``+`` in the key is already ``%2B``.
    Segments that are exactly ``.`` or ``..`` are percent-encoded so the
    path reaches the store, and is signed, as the key itself.

    >>> escape_key("a b/c+d")
    'a%20b/c%2Bd'
    >>> escape_key("a/../b")
    'a/%2E%2E/b'
    """
    segments = [
        _DOT_SEGMENTS.get(segment) or query_escape(segment)
        for segment in key.split("/")
    ]
    return "/".join(segments).replace("+", "%20")


def canonical_query(params: Iterable[tuple[str, str]]) -> str:
    """Build the canonical query string from ``(key, value)`` pairs.

    The result is used both as the raw query sent on the wire and as the
    query portion of the canonical resource.
    """
    # sorted() is stable, so repeated keys keep their value order
    ordered = sorted(params, key=lambda item: item[0].encode("utf-8"))

    parts = []
    for key, value in ordered:
        if value == "":
            parts.append(query_escape(key))
        else:
            parts.append(f"{query_escape(key)}={query_escape(value)}")
    return "&".join(parts)


def canonical_resource(bucket: str, path: str, query: str = "") -> str:
    """Build the canonical resource ``/{bucket}{path}[?{query}]``.

    Args:
        bucket: Bucket name.
        path: Escaped object path relative to the bucket, starting with
              ``/`` (or empty for the bucket root).
        query: Canonical query string from :func:`canonical_query`.
    """
    resource = f"/{bucket}{path}"
    if query:
        resource += f"?{query}"
    return resource

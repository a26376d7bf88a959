"""Inbound request accessor for Starlette applications.

The callback signature covers the request URI byte-for-byte, so the URI is
rebuilt from the raw ASGI ``raw_path`` and ``query_string`` values rather than
from Starlette's decoded ``request.url``.  Bytes are decoded as UTF-8 with
``surrogateescape`` so that :func:`~bbauth.core.signer.compute_signature`,
which encodes the same way, hashes exactly the bytes on the wire.
"""

from __future__ import annotations

from types import MappingProxyType

from starlette.requests import Request

from bbauth.core.models import InboundRequest


def raw_request_uri(request: Request) -> str:
    """Return path and query exactly as the client sent them."""
    raw_path: bytes | None = request.scope.get("raw_path")
    path = raw_path.decode("utf-8", "surrogateescape") if raw_path else request.url.path
    # some servers put the query into raw_path as well
    path = path.split("?", 1)[0]
    query: bytes = request.scope.get("query_string", b"")
    if not query:
        return path
    return f"{path}?{query.decode('utf-8', 'surrogateescape')}"


def inbound_request_from_starlette(request: Request) -> InboundRequest:
    """Adapt a Starlette request to :class:`~bbauth.core.models.InboundRequest`."""
    return InboundRequest(
        request_uri=raw_request_uri(request),
        params=MappingProxyType(dict(request.query_params)),
    )

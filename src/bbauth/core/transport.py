"""HTTP transport used for the token exchange and authenticated calls.

The core only needs a single blocking round-trip with custom headers, so the
seam is a narrow :class:`HttpTransport` protocol.  :class:`RequestsTransport`
implements it on top of ``requests``; tests substitute a fake.

A transport returns the response body for 2xx responses and raises
:class:`~bbauth.core.errors.TransportError` otherwise, carrying the status
line (``"500 Internal Server Error"``) for diagnostics.  There is no retry at
this layer.
"""

from __future__ import annotations

import logging
from typing import Literal, Mapping, Protocol, runtime_checkable

import requests

from bbauth.core.errors import TransportError

_LOG = logging.getLogger("bbauth.core.transport")

Method = Literal["GET", "POST"]


@runtime_checkable
class HttpTransport(Protocol):
    """Perform one HTTP request and return the body of a 2xx response."""

    def request(
        self,
        method: Method,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> str: ...


def status_line(response: requests.Response) -> str:
    """Return ``"<code> <reason>"`` for *response*."""
    return f"{response.status_code} {response.reason or ''}".strip()


class RequestsTransport:
    """:class:`HttpTransport` backed by a ``requests.Session``."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | tuple[float, float] | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(
        self,
        method: Method,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        try:
            resp = self.session.request(
                method, url, headers=dict(headers or {}), timeout=self.timeout
            )
        except requests.RequestException as exc:
            # no HTTP status; the message may embed the signed URL, keep it out
            _LOG.warning("%s request failed: %s", method, exc.__class__.__name__)
            raise TransportError(f"500 {exc.__class__.__name__}") from exc

        if not 200 <= resp.status_code < 300:
            line = status_line(resp)
            _LOG.info("%s request returned %s", method, line)
            raise TransportError(line, status_code=resp.status_code)
        return resp.text

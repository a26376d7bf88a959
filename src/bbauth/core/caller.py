"""Authenticated calls to partner web services.

Service calls are not signed.  They are authorised by the session cookie,
sent as a ``Cookie`` header, plus the ``WSSID`` and ``appid`` query
parameters.  The response body is returned verbatim; it may be XML, JSON or
any other text.
"""

from __future__ import annotations

import logging
from typing import Final
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bbauth.core.errors import TransportError
from bbauth.core.models import CallOutcome, CredentialFailure, SessionCredentials
from bbauth.core.transport import HttpTransport, Method

_LOG = logging.getLogger("bbauth.core.caller")

SESSION_ID_PARAM: Final[str] = "WSSID"
APPID_PARAM: Final[str] = "appid"
_METHODS: Final[tuple[str, ...]] = ("GET", "POST")


def build_service_url(url: str, credentials: SessionCredentials, application_id: str) -> str:
    """Return *url* with the session id and application id attached.

    Existing query parameters are kept, except earlier values of ``WSSID``
    and ``appid`` which are replaced.
    """
    parts = urlsplit(url)
    pairs = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k not in (SESSION_ID_PARAM, APPID_PARAM)
    ]
    pairs.append((SESSION_ID_PARAM, credentials.session_id))
    pairs.append((APPID_PARAM, application_id))
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(pairs), parts.fragment)
    )


def normalize_method(method: str) -> Method:
    """Return *method* upper-cased; raise ``ValueError`` unless GET or POST."""
    method_upper = method.upper()
    if method_upper not in _METHODS:
        raise ValueError(f"unsupported method {method!r}")
    return method_upper  # type: ignore[return-value]


def perform_call(
    url: str,
    method: Method,
    credentials: SessionCredentials,
    application_id: str,
    transport: HttpTransport,
) -> CallOutcome:
    """Make one authenticated *method* call to *url*."""
    method_upper = normalize_method(method)
    service_url = build_service_url(url, credentials, application_id)
    try:
        body = transport.request(
            method_upper,
            service_url,
            headers={"Cookie": credentials.cookie},
        )
    except TransportError as exc:
        _LOG.info("Service call to %s failed: %s", urlsplit(url).path, exc.status_line)
        return CallOutcome(failure=CredentialFailure.transport_error(exc.status_line))
    return CallOutcome(body=body)

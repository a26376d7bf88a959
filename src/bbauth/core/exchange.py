"""Exchange of a one-time token for session credentials.

The token-exchange endpoint answers with a small, fixed XML-ish document::

    <BBAuthTokenLoginResponse>
      <Success>
        <Cookie>
          Y=v=1&n=...;
        </Cookie>
        <WSSID>...</WSSID>
        <Timeout>3600</Timeout>
      </Success>
    </BBAuthTokenLoginResponse>

or, on failure, a document carrying ``<ErrorCode>…</ErrorCode>``.  Fields are
pulled out by targeted pattern scans in :func:`parse_exchange_response`, the
single place that knows the grammar.  Responses that do not conform degrade to
a ``MissingField`` outcome; they never raise.
"""

from __future__ import annotations

import logging
import re
from typing import Final

from bbauth.core.clock import Clock, default_clock
from bbauth.core.errors import TransportError
from bbauth.core.models import (
    ApplicationIdentity,
    CredentialFailure,
    ExchangeOutcome,
    SessionCredentials,
)
from bbauth.core.signer import sign_url
from bbauth.core.transport import HttpTransport
from bbauth.utils.logging import mask_sensitive

_LOG = logging.getLogger("bbauth.core.exchange")

WSLOGIN_PREFIX: Final[str] = "https://api.login.yahoo.com/WSLogin/V1/"
LOGIN_URL: Final[str] = WSLOGIN_PREFIX + "wslogin"
EXCHANGE_URL: Final[str] = WSLOGIN_PREFIX + "wspwtoken_login"

_ERROR_CODE_RE: Final[re.Pattern[str]] = re.compile(r"<ErrorCode>(.+)</ErrorCode>")
_COOKIE_RE: Final[re.Pattern[str]] = re.compile(r"(Y=[^\r\n]*)")
_WSSID_RE: Final[re.Pattern[str]] = re.compile(r"<WSSID>(.+)</WSSID>")
_TIMEOUT_RE: Final[re.Pattern[str]] = re.compile(r"<Timeout>(.+)</Timeout>")


def build_exchange_url(
    identity: ApplicationIdentity,
    token: str,
    *,
    clock: Clock = default_clock,
) -> str:
    """Return the signed token-exchange URL for *token*."""
    return sign_url(
        EXCHANGE_URL,
        identity.shared_secret,
        {"token": token, "appid": identity.application_id},
        clock=clock,
    )


def parse_exchange_response(body: str, *, clock: Clock = default_clock) -> ExchangeOutcome:
    """Extract session credentials from an exchange response body.

    Missing fields are reported in a fixed order: cookie, session id, timeout.
    """
    error = _ERROR_CODE_RE.search(body)
    if error:
        return ExchangeOutcome(failure=CredentialFailure.provider_error(error.group(1)))

    cookie = _COOKIE_RE.search(body)
    if not cookie:
        return ExchangeOutcome(failure=CredentialFailure.missing_field("cookie"))

    wssid = _WSSID_RE.search(body)
    if not wssid:
        return ExchangeOutcome(failure=CredentialFailure.missing_field("session_id"))

    timeout = _TIMEOUT_RE.search(body)
    try:
        timeout_seconds = int(timeout.group(1).strip()) if timeout else None
    except ValueError:
        timeout_seconds = None
    if timeout_seconds is None:
        return ExchangeOutcome(failure=CredentialFailure.missing_field("timeout"))

    return ExchangeOutcome(
        credentials=SessionCredentials(
            cookie=cookie.group(1).strip(),
            session_id=wssid.group(1),
            timeout=timeout_seconds,
            obtained_at=int(clock()),
        )
    )


def exchange_token(
    identity: ApplicationIdentity,
    token: str,
    transport: HttpTransport,
    *,
    clock: Clock = default_clock,
) -> ExchangeOutcome:
    """Perform exactly one GET against the exchange endpoint and classify it."""
    url = build_exchange_url(identity, token, clock=clock)
    _LOG.debug("Exchanging token=%s", mask_sensitive(token))
    try:
        body = transport.request("GET", url)
    except TransportError as exc:
        return ExchangeOutcome(failure=CredentialFailure.transport_error(exc.status_line))

    outcome = parse_exchange_response(body, clock=clock)
    if outcome.failure is not None:
        _LOG.info(
            "Token exchange failed reason=%s detail=%s",
            outcome.failure.reason.value,
            outcome.failure.detail,
        )
    else:
        _LOG.info(
            "Exchanged token for session credentials (expires at %s)",
            outcome.credentials.expires_at,  # type: ignore[union-attr]
        )
    return outcome

"""Validation of signed callbacks returned by the identity provider.

After authenticating the user, the provider redirects the browser back to the
application with a URL of the shape::

    <relative_url>&sig=<32 hex chars>

where ``relative_url`` contains ``ts`` and, optionally, ``token``,
``userhash`` and ``appdata``.  The signature is recomputed over the request
URI *as received*; a front-end proxy that rewrites the URI therefore breaks
validation, which surfaces as ``MalformedRequestURL`` or
``SignatureMismatch``.

Checks run in this order and stop at the first failure:

1. URI shape                         → ``MalformedRequestURL``
2. explicit ``sig`` vs. URI ``sig``  → ``SignatureMismatch``
3. ``abs(now - ts) >= 600``          → ``ClockSkewExceeded``
4. recomputed digest vs. ``sig``     → ``SignatureMismatch``

A stale callback is thus reported as ``ClockSkewExceeded`` whatever its
signature looks like.
"""

from __future__ import annotations

import hmac
import logging
import re
from typing import Final
from urllib.parse import urlsplit

from bbauth.core.clock import Clock, default_clock
from bbauth.core.models import InboundRequest, ValidationFailure, ValidationOutcome
from bbauth.core.signer import TS_PARAM, compute_signature

_LOG = logging.getLogger("bbauth.core.validator")

# Replay window in seconds; a protocol constant.
MAX_CLOCK_SKEW: Final[int] = 600

_SIGNED_URI_RE: Final[re.Pattern[str]] = re.compile(r"^(.+)&sig=([0-9A-Fa-f]{32})$")


def _relative_uri(request_uri: str) -> str:
    """Drop scheme and host from an absolute URI without touching the rest."""
    parts = urlsplit(request_uri)
    if not parts.netloc:
        return request_uri
    authority = request_uri.index("//") + 2
    return request_uri[authority + len(parts.netloc):]


def split_signed_uri(request_uri: str) -> tuple[str, str] | None:
    """Return ``(relative_url, sig)`` or ``None`` if *request_uri* is not signed."""
    match = _SIGNED_URI_RE.match(_relative_uri(request_uri))
    if match is None:
        return None
    return match.group(1), match.group(2)


def _parse_ts(value: str | int | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_callback(
    request: InboundRequest,
    secret: str,
    *,
    ts: str | int | None = None,
    sig: str | None = None,
    clock: Clock = default_clock,
) -> ValidationOutcome:
    """Validate the signature and freshness of a provider callback.

    Parameters
    ----------
    request:
        The inbound request; ``request_uri`` must be the raw URI.
    secret:
        Shared secret of the application.
    ts, sig:
        Optional overrides for frameworks that already parsed the original
        request differently.  Default to the request's own values.
    clock:
        Time source for the skew check.

    Returns
    -------
    ValidationOutcome
        Truthy when valid; otherwise carries the reason and a diagnostic
        message.
    """
    split = split_signed_uri(request.request_uri)
    if split is None:
        return ValidationOutcome.invalid(
            ValidationFailure.MALFORMED_REQUEST_URL,
            f"Invalid url may have been passed - request_uri: {request.request_uri}",
        )
    relative_url, url_sig = split

    supplied_sig = url_sig if sig is None else sig
    if supplied_sig != url_sig:
        return ValidationOutcome.invalid(
            ValidationFailure.SIGNATURE_MISMATCH,
            f"Invalid sig may have been passed: {url_sig} , {supplied_sig}",
        )

    now = int(clock())
    ts_value = _parse_ts(request.get(TS_PARAM) if ts is None else ts)
    if ts_value is None:
        return ValidationOutcome.invalid(
            ValidationFailure.CLOCK_SKEW_EXCEEDED,
            f"Invalid timestamp - ts is missing, current time is {now}",
        )
    clock_skew = abs(now - ts_value)
    if clock_skew >= MAX_CLOCK_SKEW:
        return ValidationOutcome.invalid(
            ValidationFailure.CLOCK_SKEW_EXCEEDED,
            f"Invalid timestamp - clock_skew is {clock_skew} seconds, "
            f"current time is {now}, ts is {ts_value}",
        )

    calculated_sig = compute_signature(relative_url, secret)
    if not hmac.compare_digest(calculated_sig, supplied_sig):
        # the sig input embeds the secret; only the digests are reported
        return ValidationOutcome.invalid(
            ValidationFailure.SIGNATURE_MISMATCH,
            f"calculated_sig was {calculated_sig}, supplied sig was {supplied_sig}, "
            f"relative url was {relative_url}",
        )

    _LOG.debug("Validated callback signature (clock_skew=%ss)", clock_skew)
    return ValidationOutcome.valid()

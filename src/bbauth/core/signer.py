"""URL signing for the browser-based auth protocol.

A signed URL carries two trailing query parameters:

1. ``ts`` – UNIX timestamp produced by an injected :pyclass:`~bbauth.core.clock.Clock`
2. ``sig`` – lowercase hex MD5 of ``path + "?" + query + secret``

The digest covers the query *including* ``ts`` and *excluding* ``sig``, over
the exact bytes that are returned.  The provider verifies it positionally, so
``sig`` is always appended last and nothing may re-encode or reorder the query
between signing and transmission.

Logging
-------
Only the path of the signed URL is ever logged; the query (which may carry
one-time tokens) and the secret are *never* written to logs.
"""

from __future__ import annotations

import logging
from hashlib import md5
from typing import Final, Iterable, Mapping, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from requests.utils import requote_uri

from bbauth.core.clock import Clock, default_clock

_LOG = logging.getLogger("bbauth.core.signer")

TS_PARAM: Final[str] = "ts"
SIG_PARAM: Final[str] = "sig"

ParamValue = Union[str, int]
ExtraParams = Union[Mapping[str, ParamValue], Iterable[tuple[str, ParamValue]]]


def compute_signature(relative_url: str, secret: str) -> str:
    """Return ``md5_hex(relative_url + secret)``.

    ``relative_url`` is path and query exactly as transmitted, without the
    ``sig`` parameter.
    """
    return md5((relative_url + secret).encode("utf-8", "surrogateescape")).hexdigest()


def _merge_query(query: str, extra_params: ExtraParams | None) -> list[tuple[str, str]]:
    pairs = [
        (k, v)
        for k, v in parse_qsl(query, keep_blank_values=True)
        if k not in (TS_PARAM, SIG_PARAM)
    ]
    if extra_params:
        items = extra_params.items() if isinstance(extra_params, Mapping) else extra_params
        pairs.extend((k, str(v)) for k, v in items if v is not None)
    return pairs


def sign_url(
    url: str,
    secret: str,
    extra_params: ExtraParams | None = None,
    *,
    clock: Clock = default_clock,
) -> str:
    """Return *url* with *extra_params*, ``ts`` and ``sig`` appended.

    Parameters
    ----------
    url:
        Absolute or relative URL, possibly already carrying a query.  Stale
        ``ts`` / ``sig`` parameters are dropped before re-signing.
    secret:
        Shared secret of the application.
    extra_params:
        Additional query parameters appended after the existing ones, in
        iteration order.  ``None`` values are skipped.
    clock:
        Time source for ``ts``.

    Returns
    -------
    str
        Fully serialized URL ready for a redirect or an HTTP request.
    """
    parts = urlsplit(url)
    pairs = _merge_query(parts.query, extra_params)
    pairs.append((TS_PARAM, str(int(clock()))))

    query = urlencode(pairs)
    # requests would percent-encode the path after signing otherwise
    path = requote_uri(parts.path or "/")
    sig = compute_signature(f"{path}?{query}", secret)

    unsigned = urlunsplit((parts.scheme, parts.netloc, path, query, ""))
    _LOG.debug("Signed URL for path=%s", path)
    # sig must be last
    return f"{unsigned}&{SIG_PARAM}={sig}"

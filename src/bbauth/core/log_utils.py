"""Per-client logger with a fixed set of context fields.

``BBAuthClient`` logs through :func:`get_auth_logger`, which stamps every
record with the shortened application id and, when the HTTP layer supplies
one, the request's correlation id.  Keys outside that set are dropped when
the adapter is built, so a caller cannot route the shared secret, token,
cookie or session id into record attributes by accident.

>>> log = get_auth_logger(app_id="dj0yJmk9abcdef")
>>> log.extra
{'app_id': 'dj0yJm'}
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping, MutableMapping

CONTEXT_FIELDS: Final[frozenset[str]] = frozenset({"app_id", "correlation_id"})
# enough of the id to tell applications apart in a shared log
APP_ID_PREFIX: Final[int] = 6


def _context(fields: Mapping[str, Any]) -> dict[str, Any]:
    kept = {name: value for name, value in fields.items() if name in CONTEXT_FIELDS and value is not None}
    if "app_id" in kept:
        kept["app_id"] = str(kept["app_id"])[:APP_ID_PREFIX]
    return kept


class ClientContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter whose context is limited to :data:`CONTEXT_FIELDS`."""

    def __init__(self, logger: logging.Logger, fields: Mapping[str, Any] | None = None) -> None:
        super().__init__(logger, _context(fields or {}))

    def process(self, msg: str, kwargs: MutableMapping[str, Any]):
        # a call-site extra overrides the adapter's value for the same key
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_auth_logger(
    *,
    base_logger_name: str = "bbauth.core",
    app_id: str | None = None,
    correlation_id: str | None = None,
) -> logging.LoggerAdapter:
    return ClientContextAdapter(
        logging.getLogger(base_logger_name),
        {"app_id": app_id, "correlation_id": correlation_id},
    )

"""Exception types raised by the bbauth core.

Expected protocol failures (bad signature, clock skew, provider errors…) are
*returned* as outcomes, never raised.  Only two conditions use exceptions:

* :class:`ConfigurationError` – construction-time misuse, fatal.
* :class:`TransportError` – raised by HTTP transports and converted into a
  ``TransportError`` outcome by the exchanger / caller.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when the application id or shared secret is missing."""


class TransportError(RuntimeError):
    """Raised by a transport when a request fails or returns non-2xx."""

    def __init__(self, status_line: str, *, status_code: int | None = None) -> None:
        super().__init__(status_line)
        self.status_line: str = status_line
        self.status_code: int | None = status_code

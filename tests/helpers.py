"""Test doubles shared by unit and integration tests (no network)."""

from __future__ import annotations

from hashlib import md5
from typing import Callable, List, Mapping, Tuple, Union

APP_ID = "dj0yJmk9testapp"
SECRET = "super-secret"
NOW = 1_672_531_200  # frozen at 2023-01-01T00:00:00Z

EXCHANGE_OK_BODY = (
    "<?xml version='1.0' encoding='utf-8'?>\n"
    "<BBAuthTokenLoginResponse>\n"
    "  <Success>\n"
    "    <Cookie>\n"
    "      Y=abc123\n"
    "    </Cookie>\n"
    "    <WSSID>xyz</WSSID>\n"
    "    <Timeout>3600</Timeout>\n"
    "  </Success>\n"
    "</BBAuthTokenLoginResponse>\n"
)

EXCHANGE_ERROR_BODY = (
    "<?xml version='1.0' encoding='utf-8'?>\n"
    "<Error><ErrorCode>1001</ErrorCode><ErrorDescription>bad token</ErrorDescription></Error>\n"
)


class FakeTransport:
    """Records requests and replays canned bodies or TransportError instances."""

    def __init__(self, responses: List[Union[str, Exception]] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: List[Tuple[str, str, dict]] = []

    def request(self, method: str, url: str, *, headers: Mapping[str, str] | None = None) -> str:
        self.calls.append((method, url, dict(headers or {})))
        if not self.responses:
            raise AssertionError(f"unexpected {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def fake_clock_factory(now: float) -> Callable[[], float]:
    """Return a deterministic clock returning *now*."""
    return lambda now=now: now


def md5_hex(text: str) -> str:
    return md5(text.encode("utf-8")).hexdigest()


def flip_last_bit(sig: str) -> str:
    """Flip the lowest bit of the last hex digit of *sig*."""
    return sig[:-1] + format(int(sig[-1], 16) ^ 1, "x")

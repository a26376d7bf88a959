"""Time source shared by signing, validation and credential expiry.

``ts`` values written into signed URLs, the replay-window check on callbacks
and ``SessionCredentials.obtained_at`` all read the time from a ``Clock``
passed in by the caller.  Tests hand in a lambda returning a fixed epoch.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def __call__(self) -> float: ...


def default_clock() -> float:
    """Wall-clock seconds since the epoch."""
    return time.time()

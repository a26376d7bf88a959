"""Browser-based authentication core package.

This namespace hosts the **HTTP-agnostic** building blocks of the signing and
validation protocol.  Request data is always passed in explicitly; nothing
here reaches for an ambient "current request".

Sub-modules
-----------
clock
    Test-friendly time abstraction.
signer
    Signed URL construction (``ts`` + ``sig``).
validator
    Signed callback validation with clock-skew protection.
exchange
    One-time token → session credentials exchange.
caller
    Session-authenticated service calls.
transport
    ``requests``-backed HTTP transport behind a small protocol.
client
    ``BBAuthClient``, the stateful façade tying the above together.
models
    Immutable dataclasses and outcome types.
errors
    Exception types used by the core.
log_utils
    Structured logging helpers (thin wrapper around :pymod:`logging`).

All public objects are re-exported here for convenience.
"""

from __future__ import annotations

from .clock import Clock, default_clock  # noqa: F401
from .errors import ConfigurationError, TransportError  # noqa: F401
from .models import (  # noqa: F401
    ApplicationIdentity,
    CallOutcome,
    CredentialFailure,
    ExchangeOutcome,
    FailureReason,
    InboundRequest,
    SessionCredentials,
    ValidationFailure,
    ValidationOutcome,
)
from .signer import compute_signature, sign_url  # noqa: F401
from .validator import MAX_CLOCK_SKEW, validate_callback  # noqa: F401
from .exchange import exchange_token, parse_exchange_response  # noqa: F401
from .caller import build_service_url, perform_call  # noqa: F401
from .transport import HttpTransport, RequestsTransport  # noqa: F401
from .client import BBAuthClient  # noqa: F401
from .log_utils import get_auth_logger  # noqa: F401

__all__ = [
    # clock
    "Clock",
    "default_clock",
    # errors
    "ConfigurationError",
    "TransportError",
    # models
    "ApplicationIdentity",
    "CallOutcome",
    "CredentialFailure",
    "ExchangeOutcome",
    "FailureReason",
    "InboundRequest",
    "SessionCredentials",
    "ValidationFailure",
    "ValidationOutcome",
    # protocol
    "compute_signature",
    "sign_url",
    "MAX_CLOCK_SKEW",
    "validate_callback",
    "exchange_token",
    "parse_exchange_response",
    "build_service_url",
    "perform_call",
    # transport
    "HttpTransport",
    "RequestsTransport",
    # client
    "BBAuthClient",
    # logging helpers
    "get_auth_logger",
]

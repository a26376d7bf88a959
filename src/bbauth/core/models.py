"""Typed, immutable records used by the browser-based auth core."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from urllib.parse import parse_qsl, urlsplit

from bbauth.core.clock import Clock, default_clock
from bbauth.core.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ApplicationIdentity:
    """Registered application id plus the shared secret issued with it."""

    application_id: str
    shared_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.application_id or not self.shared_secret:
            raise ConfigurationError("application id and shared secret required")


@dataclass(frozen=True, slots=True)
class InboundRequest:
    """The parts of an incoming HTTP request the protocol needs.

    ``request_uri`` is the path and query exactly as received, **not**
    re-encoded; the callback signature is computed over those bytes.
    """

    request_uri: str
    params: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_uri(cls, request_uri: str) -> "InboundRequest":
        """Build a request from a raw URI, parsing its query string."""
        query = urlsplit(request_uri).query
        params = dict(parse_qsl(query, keep_blank_values=True))
        return cls(request_uri=request_uri, params=MappingProxyType(params))

    def get(self, name: str) -> str | None:
        return self.params.get(name)


@dataclass(frozen=True, slots=True)
class SessionCredentials:
    """Cookie / session id / timeout bundle obtained from a token exchange."""

    cookie: str = field(repr=False)
    session_id: str = field(repr=False)
    timeout: int
    obtained_at: int = field(default_factory=lambda: int(default_clock()))

    @property
    def expires_at(self) -> int:
        return self.obtained_at + self.timeout

    def is_expired(self, *, clock: Clock = default_clock) -> bool:
        """Return *True* once the provider-announced timeout has elapsed."""
        return clock() >= self.expires_at


class ValidationFailure(str, enum.Enum):
    SIGNATURE_MISMATCH = "SignatureMismatch"
    MALFORMED_REQUEST_URL = "MalformedRequestURL"
    CLOCK_SKEW_EXCEEDED = "ClockSkewExceeded"


class FailureReason(str, enum.Enum):
    TRANSPORT_ERROR = "TransportError"
    PROVIDER_ERROR = "ProviderError"
    MISSING_FIELD = "MissingField"


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validating a signed callback; truthy only when valid."""

    reason: ValidationFailure | None = None
    message: str | None = None

    @classmethod
    def valid(cls) -> "ValidationOutcome":
        return cls()

    @classmethod
    def invalid(cls, reason: ValidationFailure, message: str) -> "ValidationOutcome":
        return cls(reason=reason, message=message)

    @property
    def ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True, slots=True)
class CredentialFailure:
    """Why an exchange or an authenticated call did not succeed.

    ``detail`` is the transport status line, the provider error code or the
    name of the missing field depending on ``reason``.
    """

    reason: FailureReason
    detail: str

    @classmethod
    def transport_error(cls, status_line: str) -> "CredentialFailure":
        return cls(FailureReason.TRANSPORT_ERROR, status_line)

    @classmethod
    def provider_error(cls, code: str) -> "CredentialFailure":
        return cls(FailureReason.PROVIDER_ERROR, code)

    @classmethod
    def missing_field(cls, name: str) -> "CredentialFailure":
        return cls(FailureReason.MISSING_FIELD, name)

    @property
    def message(self) -> str:
        if self.reason is FailureReason.PROVIDER_ERROR:
            return f"Error code returned in XML response: {self.detail}"
        if self.reason is FailureReason.MISSING_FIELD:
            return f"No {self.detail} found"
        return self.detail


@dataclass(frozen=True, slots=True)
class ExchangeOutcome:
    """Either session credentials or the failure that prevented them."""

    credentials: SessionCredentials | None = None
    failure: CredentialFailure | None = None

    @property
    def ok(self) -> bool:
        return self.credentials is not None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True, slots=True)
class CallOutcome:
    """Raw body of an authenticated service call, or its failure."""

    body: str | None = None
    failure: CredentialFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.body is not None

    def __bool__(self) -> bool:
        return self.ok

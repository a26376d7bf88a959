"""Tests for the immutable records and outcome types."""

from __future__ import annotations

import dataclasses

import pytest

from bbauth.core.errors import ConfigurationError
from bbauth.core.models import (
    ApplicationIdentity,
    CallOutcome,
    CredentialFailure,
    ExchangeOutcome,
    InboundRequest,
    SessionCredentials,
    ValidationFailure,
    ValidationOutcome,
)
from helpers import fake_clock_factory


def test_identity_is_immutable() -> None:
    identity = ApplicationIdentity("app", "secret")
    with pytest.raises(dataclasses.FrozenInstanceError):
        identity.shared_secret = "other"  # type: ignore[misc]


def test_identity_requires_both_values() -> None:
    with pytest.raises(ConfigurationError):
        ApplicationIdentity("app", "")


def test_inbound_request_from_uri_parses_params() -> None:
    request = InboundRequest.from_uri("/cb?token=a%2Bb&appdata=&ts=1&sig=" + "f" * 32)
    assert request.get("token") == "a+b"
    assert request.get("appdata") == ""
    assert request.get("missing") is None
    assert request.request_uri.startswith("/cb?token=a%2Bb")


def test_session_credentials_expiry() -> None:
    creds = SessionCredentials(cookie="Y=1", session_id="s", timeout=60, obtained_at=1_000)
    assert creds.expires_at == 1_060
    assert not creds.is_expired(clock=fake_clock_factory(1_059))
    assert creds.is_expired(clock=fake_clock_factory(1_060))
    assert "Y=1" not in repr(creds)


def test_outcomes_truthiness() -> None:
    assert ValidationOutcome.valid()
    assert not ValidationOutcome.invalid(ValidationFailure.CLOCK_SKEW_EXCEEDED, "late")
    assert not ExchangeOutcome(failure=CredentialFailure.missing_field("cookie"))
    assert CallOutcome(body="")
    assert not CallOutcome(failure=CredentialFailure.transport_error("500 Internal Server Error"))


def test_reason_values_are_stable() -> None:
    assert ValidationFailure.MALFORMED_REQUEST_URL.value == "MalformedRequestURL"
    assert CredentialFailure.provider_error("7").reason.value == "ProviderError"

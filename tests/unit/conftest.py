"""Fixtures shared by the bbauth unit tests."""

from __future__ import annotations

import pytest

from bbauth.core.client import BBAuthClient
from helpers import APP_ID, NOW, SECRET, FakeTransport, fake_clock_factory


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def client(transport: FakeTransport) -> BBAuthClient:
    """Client frozen at ``NOW`` talking to *transport*."""
    return BBAuthClient(APP_ID, SECRET, transport=transport, clock=fake_clock_factory(NOW))

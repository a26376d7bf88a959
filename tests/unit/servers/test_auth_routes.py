"""Unit tests for the Starlette login / callback routes."""

from __future__ import annotations

import hashlib
from urllib.parse import parse_qsl, urlsplit

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.testclient import TestClient

from bbauth.core.client import BBAuthClient
from bbauth.core.errors import TransportError
from bbauth.core.exchange import LOGIN_URL
from bbauth.core.signer import sign_url
from bbauth.core.validator import validate_callback
from bbauth.servers.auth import build_auth_routes
from bbauth.servers.request import inbound_request_from_starlette, raw_request_uri
from helpers import (
    APP_ID,
    EXCHANGE_ERROR_BODY,
    EXCHANGE_OK_BODY,
    NOW,
    SECRET,
    FakeTransport,
    fake_clock_factory,
    flip_last_bit,
)

CALLBACK = "/auth/callback?token=tok123&userhash=uh42&appdata=sess1"


# --------------------------------------------------------------------------- #
# Fixtures                                                                    #
# --------------------------------------------------------------------------- #
@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def clients() -> list[BBAuthClient]:
    return []


def _app(transport: FakeTransport, clients: list[BBAuthClient], **kwargs) -> Starlette:
    def factory() -> BBAuthClient:
        client = BBAuthClient(APP_ID, SECRET, transport=transport, clock=fake_clock_factory(NOW))
        clients.append(client)
        return client

    return Starlette(routes=build_auth_routes(factory, **kwargs))


@pytest.fixture()
def http(transport: FakeTransport, clients: list[BBAuthClient]) -> TestClient:
    return TestClient(_app(transport, clients))


def _signed_callback(base: str = CALLBACK) -> str:
    return sign_url(base, SECRET, clock=fake_clock_factory(NOW))


# --------------------------------------------------------------------------- #
# /auth/login                                                                 #
# --------------------------------------------------------------------------- #
def test_login_html_accept_redirects(http: TestClient) -> None:
    resp = http.get("/auth/login", headers={"Accept": "text/html"}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"].startswith(LOGIN_URL + "?appid=")


def test_login_json_default(http: TestClient) -> None:
    resp = http.get("/auth/login", headers={"Accept": "application/json"})
    assert resp.status_code == 200
    url = resp.json()["auth_url"]
    assert [k for k, _ in parse_qsl(urlsplit(url).query)] == ["appid", "ts", "sig"]


def test_login_forwards_appdata_and_userhash(http: TestClient) -> None:
    resp = http.get("/auth/login?format=json&appdata=abc&send_userhash=1")
    pairs = dict(parse_qsl(urlsplit(resp.json()["auth_url"]).query))
    assert pairs["appdata"] == "abc"
    assert pairs["send_userhash"] == "1"


def test_login_userhash_default_from_builder(transport: FakeTransport, clients: list) -> None:
    http = TestClient(_app(transport, clients, send_userhash=True))
    resp = http.get("/auth/login?format=json")
    assert "send_userhash=1" in resp.json()["auth_url"]


def test_login_format_redirect_forces_redirect(http: TestClient) -> None:
    resp = http.get(
        "/auth/login?format=redirect",
        headers={"Accept": "application/json"},
        follow_redirects=False,
    )
    assert resp.status_code == 303


# --------------------------------------------------------------------------- #
# /auth/callback                                                              #
# --------------------------------------------------------------------------- #
def test_callback_success(http: TestClient, transport: FakeTransport, clients: list) -> None:
    transport.responses.append(EXCHANGE_OK_BODY)
    resp = http.get(_signed_callback())
    assert resp.status_code == 200
    assert "Authorization successful" in resp.text
    client = clients[-1]
    assert client.userhash == "uh42"
    assert client.appdata == "sess1"
    assert client.session_id == "xyz"
    assert len(transport.calls) == 1


def test_callback_hook_response(transport: FakeTransport, clients: list) -> None:
    def _hook(client: BBAuthClient, request: Request) -> JSONResponse:
        return JSONResponse({"session_id": client.session_id, "appdata": client.appdata})

    http = TestClient(_app(transport, clients, on_authenticated=_hook))
    transport.responses.append(EXCHANGE_OK_BODY)
    resp = http.get(_signed_callback())
    assert resp.json() == {"session_id": "xyz", "appdata": "sess1"}


def test_callback_tampered_sig(http: TestClient, transport: FakeTransport) -> None:
    resp = http.get(flip_last_bit(_signed_callback()))
    assert resp.status_code == 400
    assert "SignatureMismatch" in resp.text
    assert SECRET not in resp.text
    assert transport.calls == []


def test_callback_unsigned(http: TestClient) -> None:
    resp = http.get("/auth/callback?token=tok123")
    assert resp.status_code == 400
    assert "MalformedRequestURL" in resp.text


def test_callback_provider_error(http: TestClient, transport: FakeTransport) -> None:
    transport.responses.append(EXCHANGE_ERROR_BODY)
    resp = http.get(_signed_callback())
    assert resp.status_code == 400
    assert "ProviderError" in resp.text


def test_callback_exchange_transport_error(http: TestClient, transport: FakeTransport) -> None:
    transport.responses.append(TransportError("500 Internal Server Error", status_code=500))
    resp = http.get(_signed_callback())
    assert resp.status_code == 502


# --------------------------------------------------------------------------- #
# Request accessor                                                            #
# --------------------------------------------------------------------------- #
def _request(**scope_overrides) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/cb x",
        "query_string": b"a=%2F&b=hello+world",
        "headers": [],
    }
    scope.update(scope_overrides)
    return Request(scope)


def test_raw_request_uri_prefers_raw_path() -> None:
    request = _request(raw_path=b"/cb%20x")
    assert raw_request_uri(request) == "/cb%20x?a=%2F&b=hello+world"


def test_raw_request_uri_strips_query_from_raw_path() -> None:
    request = _request(raw_path=b"/cb?a=%2F&b=hello+world")
    assert raw_request_uri(request) == "/cb?a=%2F&b=hello+world"


def test_raw_request_uri_without_query() -> None:
    request = _request(raw_path=b"/cb", query_string=b"")
    assert raw_request_uri(request) == "/cb"


def test_inbound_request_decodes_params() -> None:
    inbound = inbound_request_from_starlette(_request(raw_path=b"/cb%20x"))
    assert inbound.get("a") == "/"
    assert inbound.get("b") == "hello world"
    assert inbound.request_uri == "/cb%20x?a=%2F&b=hello+world"


@pytest.mark.parametrize("raw_path", [b"/cb/\xc3\xa4", b"/cb/\xff"])
def test_raw_non_ascii_path_hashes_wire_bytes(raw_path: bytes) -> None:
    query = f"token=t&ts={NOW}".encode()
    sig = hashlib.md5(raw_path + b"?" + query + SECRET.encode()).hexdigest()
    request = _request(raw_path=raw_path, query_string=query + b"&sig=" + sig.encode())
    inbound = inbound_request_from_starlette(request)
    assert validate_callback(inbound, SECRET, clock=fake_clock_factory(NOW))

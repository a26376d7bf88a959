"""Browser-based auth endpoints for Starlette applications.

Handlers are intentionally thin:

1. Adapt the Starlette request to an :class:`~bbauth.core.models.InboundRequest`.
2. Delegate protocol logic to a fresh :class:`~bbauth.core.client.BBAuthClient`.
3. Return an appropriate Starlette ``Response`` type.

The base path is configurable (default: ``/auth``) so that reverse-proxies can
mount the application under arbitrary prefixes.  Note that a proxy which
rewrites the callback's query string breaks signature validation.

SECURITY NOTE
-------------
• No raw secrets (shared secret, token, cookie, session id) are ever logged
  or echoed back; failure pages show the reason name only.
• Correlation IDs, if present in ``request.state.correlation_id``, are included
  in INFO logs to aid troubleshooting.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from bbauth.core.client import BBAuthClient
from bbauth.core.models import FailureReason
from bbauth.servers.request import inbound_request_from_starlette
from bbauth.utils.environment import _truthy

_LOG = logging.getLogger("bbauth.servers.auth")

ClientFactory = Callable[[], BBAuthClient]
AuthenticatedHook = Callable[[BBAuthClient, Request], Optional[Response]]


def _html_page(title: str, body: str, status: int = 200) -> HTMLResponse:
    """Return a tiny success / error HTML page."""
    content = (
        "<!doctype html><html lang='en'>"
        "<head><meta charset='utf-8'><title>"
        f"{title}</title></head><body><h1>{title}</h1><p>{body}</p></body></html>"
    )
    return HTMLResponse(content, status_code=status)


def build_auth_routes(
    client_factory: ClientFactory,
    *,
    base_path: str = "/auth",
    send_userhash: bool | None = None,
    on_authenticated: AuthenticatedHook | None = None,
) -> list[Route]:
    """Return login and callback routes mounted under *base_path*.

    *client_factory* is called once per request since clients are
    single-owner.  *send_userhash* overrides the client default unless the
    request carries its own ``send_userhash`` parameter.  *on_authenticated*
    receives the client holding fresh session credentials; it may persist
    them and return its own response.
    """

    # ----- GET /auth/login ------------------------------------------------ #
    async def _login(request: Request) -> Response:
        client = client_factory()
        userhash_param = request.query_params.get("send_userhash")
        auth_url = client.auth_url(
            appdata=request.query_params.get("appdata"),
            send_userhash=_truthy(userhash_param) if userhash_param is not None else send_userhash,
        )
        _LOG.info(
            "Login redirect built correlation_id=%s",
            getattr(request.state, "correlation_id", "-"),
        )

        fmt_param = request.query_params.get("format")
        accept_header = (request.headers.get("accept") or "").lower()

        if fmt_param == "json":
            return JSONResponse({"auth_url": auth_url})
        if fmt_param == "redirect" or "text/html" in accept_header:
            # 303 See Other for GET safety across methods
            return RedirectResponse(auth_url, status_code=303)
        return JSONResponse({"auth_url": auth_url})

    # ----- GET /auth/callback --------------------------------------------- #
    async def _callback(request: Request) -> Response:
        client = client_factory()
        inbound = inbound_request_from_starlette(request)

        validation = client.validate_sig(inbound)
        if not validation:
            _LOG.warning(
                "Callback rejected reason=%s correlation_id=%s",
                validation.reason.value,  # type: ignore[union-attr]
                getattr(request.state, "correlation_id", "-"),
            )
            return _html_page("Authorization failed", validation.reason.value, 400)  # type: ignore[union-attr]

        exchanged = client.exchange(request=inbound)
        if not exchanged:
            _LOG.warning(
                "Credential exchange failed reason=%s correlation_id=%s",
                exchanged.failure.reason.value,  # type: ignore[union-attr]
                getattr(request.state, "correlation_id", "-"),
            )
            upstream = exchanged.failure.reason is FailureReason.TRANSPORT_ERROR  # type: ignore[union-attr]
            status = 502 if upstream else 400
            return _html_page(
                "Authorization failed",
                exchanged.failure.reason.value,  # type: ignore[union-attr]
                status,
            )

        _LOG.info(
            "Callback authenticated correlation_id=%s",
            getattr(request.state, "correlation_id", "-"),
        )
        if on_authenticated is not None:
            custom = on_authenticated(client, request)
            if custom is not None:
                return custom
        return _html_page("Authorization successful", "You may close this window.")

    return [
        Route(f"{base_path}/login", _login, methods=["GET"]),
        Route(f"{base_path}/callback", _callback, methods=["GET"]),
    ]

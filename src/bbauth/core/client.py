"""BBAuthClient – stateful façade over the browser-based auth protocol.

One client instance holds one application identity, at most one set of
session credentials and the outcome of the most recent validation and
credential operation.  Typical use::

    client = BBAuthClient(application_id=appid, shared_secret=secret)

    # 1. send the user to the provider
    redirect_to(client.auth_url(appdata=session_id))

    # 2. on callback
    request = InboundRequest.from_uri(raw_request_uri)
    if not client.validate_sig(request):
        log(client.sig_validation_error)

    # 3. call services; the token is exchanged lazily on first use
    xml = client.auth_ws_get_call(url, request=request)
    if xml is None:
        log(client.access_credentials_error)

Errors follow a two-channel pattern: every operation returns a truthy/falsy
outcome carrying its reason, and ``sig_validation_error`` /
``access_credentials_error`` project the message of the *latest* outcome in
their category (``None`` after a success, so stale messages never linger).

Instances are not thread-safe; the exchange mutates shared fields without
locking.
"""

from __future__ import annotations

from bbauth.core.caller import normalize_method, perform_call
from bbauth.core.clock import Clock, default_clock
from bbauth.core.exchange import LOGIN_URL, exchange_token
from bbauth.core.log_utils import get_auth_logger
from bbauth.core.models import (
    ApplicationIdentity,
    CallOutcome,
    CredentialFailure,
    ExchangeOutcome,
    InboundRequest,
    SessionCredentials,
    ValidationOutcome,
)
from bbauth.core.signer import sign_url
from bbauth.core.transport import HttpTransport, Method, RequestsTransport
from bbauth.core.validator import validate_callback


class BBAuthClient:
    """Client for one application identity."""

    def __init__(
        self,
        application_id: str,
        shared_secret: str,
        *,
        transport: HttpTransport | None = None,
        clock: Clock = default_clock,
        send_userhash: bool = False,
    ) -> None:
        # raises ConfigurationError when either value is empty
        self._identity = ApplicationIdentity(application_id, shared_secret)
        self._transport: HttpTransport = transport or RequestsTransport()
        self._clock = clock
        self._send_userhash = send_userhash
        self._log = get_auth_logger(base_logger_name="bbauth.core.client", app_id=application_id)

        self._token: str | None = None
        self._userhash: str | None = None
        self._appdata: str | None = None
        self._credentials: SessionCredentials | None = None
        self._last_validation: ValidationOutcome | None = None
        self._last_credential_failure: CredentialFailure | None = None

    @classmethod
    def from_env(
        cls,
        *,
        transport: HttpTransport | None = None,
        clock: Clock = default_clock,
    ) -> "BBAuthClient":
        """Build a client from ``BBAUTH_*`` environment variables."""
        from bbauth.utils.environment import load_settings  # avoid import cycle via core.errors

        settings = load_settings()
        if transport is None:
            transport = RequestsTransport(timeout=settings.http_timeout)
        return cls(
            settings.application_id,
            settings.shared_secret,
            transport=transport,
            clock=clock,
            send_userhash=settings.send_userhash,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(application_id={self.application_id!r}, "
            f"authenticated={self._credentials is not None})"
        )

    # ------------------------------------------------------------------ #
    # Read-only views                                                    #
    # ------------------------------------------------------------------ #
    @property
    def application_id(self) -> str:
        return self._identity.application_id

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def userhash(self) -> str | None:
        return self._userhash

    @property
    def appdata(self) -> str | None:
        return self._appdata

    @property
    def credentials(self) -> SessionCredentials | None:
        return self._credentials

    @property
    def cookie(self) -> str | None:
        return self._credentials.cookie if self._credentials else None

    @property
    def session_id(self) -> str | None:
        return self._credentials.session_id if self._credentials else None

    @property
    def timeout(self) -> int | None:
        return self._credentials.timeout if self._credentials else None

    @property
    def sig_validation_error(self) -> str | None:
        """Message of the last failed :meth:`validate_sig`, if it failed."""
        if self._last_validation is None:
            return None
        return self._last_validation.message

    @property
    def access_credentials_error(self) -> str | None:
        """Message of the last failed exchange or service call, if it failed."""
        if self._last_credential_failure is None:
            return None
        return self._last_credential_failure.message

    # ------------------------------------------------------------------ #
    # Login redirect                                                     #
    # ------------------------------------------------------------------ #
    def auth_url(
        self, *, appdata: str | None = None, send_userhash: bool | None = None
    ) -> str:
        """Return the signed login URL the user is redirected to.

        *appdata* is an opaque string (typically a session id) the provider
        hands back on the callback; *send_userhash* asks it to include the
        user hash as well; ``None`` falls back to the client default.
        """
        if send_userhash is None:
            send_userhash = self._send_userhash
        params: dict[str, str] = {"appid": self.application_id}
        if appdata is not None:
            params["appdata"] = appdata
        if send_userhash:
            params["send_userhash"] = "1"
        return sign_url(LOGIN_URL, self._identity.shared_secret, params, clock=self._clock)

    # ------------------------------------------------------------------ #
    # Callback validation                                                #
    # ------------------------------------------------------------------ #
    def validate_sig(
        self,
        request: InboundRequest,
        *,
        ts: str | int | None = None,
        sig: str | None = None,
    ) -> ValidationOutcome:
        """Validate the provider callback carried by *request*."""
        outcome = validate_callback(
            request,
            self._identity.shared_secret,
            ts=ts,
            sig=sig,
            clock=self._clock,
        )
        self._last_validation = outcome
        if not outcome:
            self._log.warning(
                "Callback validation failed reason=%s", outcome.reason.value  # type: ignore[union-attr]
            )
            return outcome

        if request.get("userhash") is not None:
            self._userhash = request.get("userhash")
        if request.get("appdata") is not None:
            self._appdata = request.get("appdata")
        self._log.info("Callback validated")
        return outcome

    # ------------------------------------------------------------------ #
    # Credential exchange                                                #
    # ------------------------------------------------------------------ #
    def _resolve_token(self, token: str | None, request: InboundRequest | None) -> str | None:
        if token is not None:
            self._token = token
        elif self._token is None and request is not None:
            self._token = request.get("token")
        return self._token

    def exchange(
        self,
        token: str | None = None,
        *,
        request: InboundRequest | None = None,
    ) -> ExchangeOutcome:
        """Exchange the one-time token for session credentials.

        The token is taken from *token*, else the cached one, else the
        ``token`` parameter of *request*; it is cached for later calls.
        """
        resolved = self._resolve_token(token, request)
        if not resolved:
            outcome = ExchangeOutcome(failure=CredentialFailure.missing_field("token"))
        else:
            outcome = exchange_token(
                self._identity, resolved, self._transport, clock=self._clock
            )

        self._last_credential_failure = outcome.failure
        if outcome.credentials is not None:
            self._credentials = outcome.credentials
        return outcome

    def clear_credentials(self) -> None:
        """Forget the session credentials and the cached token."""
        self._credentials = None
        self._token = None

    # ------------------------------------------------------------------ #
    # Authenticated service calls                                        #
    # ------------------------------------------------------------------ #
    def call(
        self,
        url: str,
        method: Method = "GET",
        *,
        request: InboundRequest | None = None,
    ) -> CallOutcome:
        """Call *url* with the session credentials, exchanging first if needed.

        Raises ``ValueError`` for a method other than GET or POST, before any
        request is made.
        """
        method = normalize_method(method)
        if self._credentials is None:
            exchanged = self.exchange(request=request)
            if exchanged.credentials is None:
                return CallOutcome(failure=exchanged.failure)
        elif self._credentials.is_expired(clock=self._clock):
            # no refresh; the provider decides whether to reject the call
            self._log.warning(
                "Session credentials expired at %s", self._credentials.expires_at
            )

        outcome = perform_call(
            url,
            method,
            self._credentials,  # type: ignore[arg-type]
            self.application_id,
            self._transport,
        )
        self._last_credential_failure = outcome.failure
        return outcome

    def auth_ws_get_call(self, url: str, *, request: InboundRequest | None = None) -> str | None:
        """GET *url*; return the body, or ``None`` (see ``access_credentials_error``)."""
        return self.call(url, "GET", request=request).body

    def auth_ws_post_call(self, url: str, *, request: InboundRequest | None = None) -> str | None:
        """POST to *url*; return the body, or ``None`` (see ``access_credentials_error``)."""
        return self.call(url, "POST", request=request).body

"""Configuration read from environment variables."""

import logging
import os
from dataclasses import dataclass, field
from typing import Final, Tuple

from bbauth.core.errors import ConfigurationError

logger = logging.getLogger("bbauth.utils.environment")

APP_ID_ENV: Final[str] = "BBAUTH_APP_ID"
SECRET_ENV: Final[str] = "BBAUTH_SHARED_SECRET"
HTTP_TIMEOUT_ENV: Final[str] = "BBAUTH_HTTP_TIMEOUT"
SEND_USERHASH_ENV: Final[str] = "BBAUTH_SEND_USERHASH"

_TRUTHY: Final[Tuple[str, ...]] = ("true", "1", "yes", "y", "on")


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _float_or_none(name: str) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds") from None


@dataclass(frozen=True)
class Settings:
    """Process configuration for one application identity."""

    application_id: str
    shared_secret: str = field(repr=False)
    http_timeout: float | None = None
    send_userhash: bool = False


def load_settings() -> Settings:
    """
    Read ``BBAUTH_*`` variables.

    ``BBAUTH_APP_ID`` and ``BBAUTH_SHARED_SECRET`` are mandatory; a missing or
    blank value raises :class:`ConfigurationError` rather than producing a
    client that can never sign correctly.
    """
    app_id = (os.getenv(APP_ID_ENV) or "").strip()
    secret = os.getenv(SECRET_ENV) or ""
    missing = [name for name, value in ((APP_ID_ENV, app_id), (SECRET_ENV, secret)) if not value]
    if missing:
        raise ConfigurationError(f"missing required environment: {', '.join(missing)}")

    settings = Settings(
        application_id=app_id,
        shared_secret=secret,
        http_timeout=_float_or_none(HTTP_TIMEOUT_ENV),
        send_userhash=_truthy(os.getenv(SEND_USERHASH_ENV)),
    )
    logger.debug(
        "Loaded settings app_id=%s**** http_timeout=%s send_userhash=%s",
        app_id[:6],
        settings.http_timeout,
        settings.send_userhash,
    )
    return settings

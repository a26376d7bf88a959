"""Client for browser-based authentication (BBAuth) with signed redirects."""

from bbauth.core import (  # noqa: F401
    BBAuthClient,
    ConfigurationError,
    InboundRequest,
    SessionCredentials,
)

__version__ = "0.1.0"

__all__ = ["BBAuthClient", "ConfigurationError", "InboundRequest", "SessionCredentials"]

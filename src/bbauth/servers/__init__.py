"""Starlette integration: inbound request accessor and auth routes."""

from __future__ import annotations

from .auth import build_auth_routes  # noqa: F401
from .request import inbound_request_from_starlette, raw_request_uri  # noqa: F401

__all__ = ["build_auth_routes", "inbound_request_from_starlette", "raw_request_uri"]

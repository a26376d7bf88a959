"""bbauth command line helper.

Walks through the browser-based auth flow by hand, which is handy when
registering a new application or debugging a callback:

* ``bbauth login-url``            – print the signed login URL
* ``bbauth validate <uri>``       – validate a callback URI copied from a browser
* ``bbauth call <url> --token T`` – exchange *T* and make one service call

The application id and shared secret come from ``BBAUTH_APP_ID`` /
``BBAUTH_SHARED_SECRET``, optionally loaded from a ``KEY=VALUE`` env file.
Secrets, tokens and cookies are never printed.

Example
-------
    bbauth --env-file .env.bbauth login-url --appdata my-session
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Sequence

from bbauth.core.client import BBAuthClient
from bbauth.core.errors import ConfigurationError
from bbauth.core.models import InboundRequest
from bbauth.utils.logging import configure_logging


def _load_env_file(env_path: Path | None) -> None:
    """Load KEY=VALUE pairs from a .env style file into *os.environ*."""
    if env_path is None or not env_path.exists():
        return

    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip()
        if key and key not in os.environ:
            os.environ[key] = val


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bbauth", description="Browser-based auth helper.")
    parser.add_argument("--env-file", type=Path, help="KEY=VALUE file with BBAUTH_* settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login-url", help="print the signed login URL")
    login.add_argument("--appdata", help="opaque value echoed back on the callback")
    login.add_argument("--send-userhash", action="store_true", help="ask for the user hash")

    validate = sub.add_parser("validate", help="validate a callback URI")
    validate.add_argument("uri", help="callback URI (path and query, or absolute)")

    call = sub.add_parser("call", help="exchange a token and call a service")
    call.add_argument("url", help="service URL")
    call.add_argument("--token", required=True, help="one-time token from the callback")
    call.add_argument("--method", choices=("GET", "POST"), default="GET")
    return parser


def main(argv: Sequence[str] | None = None, *, client: BBAuthClient | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _load_env_file(args.env_file)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    if client is None:
        try:
            client = BBAuthClient.from_env()
        except ConfigurationError as exc:
            print(f"configuration error: {exc}", file=sys.stderr)
            return 2

    if args.command == "login-url":
        print(client.auth_url(appdata=args.appdata, send_userhash=args.send_userhash))
        return 0

    if args.command == "validate":
        outcome = client.validate_sig(InboundRequest.from_uri(args.uri))
        if outcome:
            print("valid")
            if client.userhash:
                print(f"userhash: {client.userhash}")
            if client.appdata:
                print(f"appdata: {client.appdata}")
            return 0
        print(f"invalid: {client.sig_validation_error}", file=sys.stderr)
        return 1

    exchanged = client.exchange(args.token)
    if not exchanged:
        print(f"exchange failed: {client.access_credentials_error}", file=sys.stderr)
        return 1
    result = client.call(args.url, args.method)
    if not result:
        print(f"call failed: {client.access_credentials_error}", file=sys.stderr)
        return 1
    sys.stdout.write(result.body or "")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

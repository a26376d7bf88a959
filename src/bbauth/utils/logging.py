"""Logging setup and masking helpers."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Return *value* with everything after the first *keep_chars* masked."""
    if not value:
        return ""
    if len(value) <= keep_chars:
        return "*" * len(value)
    return value[:keep_chars] + "*" * (len(value) - keep_chars)


def configure_logging(level: int | str = logging.WARNING, stream=None) -> logging.Logger:
    """Attach a single stream handler to the ``bbauth`` logger.

    Calling it again replaces the handler instead of stacking another one.
    """
    logger = logging.getLogger("bbauth")
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    return logger

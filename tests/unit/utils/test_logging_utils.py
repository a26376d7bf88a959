"""Tests for logging setup and masking helpers."""

from __future__ import annotations

import io
import logging

from bbauth.utils.logging import configure_logging, mask_sensitive


def test_mask_sensitive() -> None:
    assert mask_sensitive("abcdef", 2) == "ab****"
    assert mask_sensitive("abc", 4) == "***"
    assert mask_sensitive(None) == ""


def test_configure_logging_replaces_handler() -> None:
    stream = io.StringIO()
    configure_logging(logging.INFO, stream=stream)
    logger = configure_logging(logging.INFO, stream=stream)
    assert len(logger.handlers) == 1
    logging.getLogger("bbauth.core.test").info("hello")
    assert "INFO bbauth.core.test hello" in stream.getvalue()

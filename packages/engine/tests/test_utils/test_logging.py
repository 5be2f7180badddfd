"""
tests/test_utils/test_logging.py — Tests for the structlog setup.
"""

from __future__ import annotations

import io
import sys

import structlog

from tendermatch_engine.utils.logging import configure_logging, redact_secrets


def test_redacts_long_secret_to_suffix():
    event = redact_secrets(None, "info", {"event": "x", "token": "abcdefghijkl1234"})
    assert event["token"] == "***1234"


def test_redacts_short_secret_fully():
    event = redact_secrets(None, "info", {"event": "x", "api_key": "short"})
    assert event["api_key"] == "***"


def test_leaves_other_fields():
    event = redact_secrets(None, "info", {"event": "x", "page": 2, "token": None})
    assert event == {"event": "x", "page": 2, "token": None}


def test_configure_logging_writes_json_to_stderr(monkeypatch):
    err, out = io.StringIO(), io.StringIO()
    monkeypatch.setattr(sys, "stderr", err)
    monkeypatch.setattr(sys, "stdout", out)
    try:
        configure_logging("INFO", "json")
        structlog.get_logger("test").info("batch_loaded", page=2, token="tok-abcdefgh9999")
    finally:
        structlog.reset_defaults()

    assert out.getvalue() == ""
    assert '"event": "batch_loaded"' in err.getvalue()
    assert "tok-abcdefgh9999" not in err.getvalue()

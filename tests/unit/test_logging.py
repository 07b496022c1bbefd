"""Unit tests for logging setup."""

from __future__ import annotations

import json
import logging

from ticket_rpa.logging_setup import CloudFormatter, configure_logging


def test_cloud_formatter_emits_severity_json() -> None:
    record = logging.LogRecord("ticket_rpa.portal.login", logging.WARNING, __file__, 1, "No %s", ("trigger",), None)

    entry = json.loads(CloudFormatter().format(record))

    assert entry["severity"] == "WARNING"
    assert entry["message"] == "No trigger"
    assert entry["logger"] == "ticket_rpa.portal.login"
    assert "time" in entry


def test_non_local_env_installs_json_handler(monkeypatch) -> None:
    monkeypatch.setenv("TRPA_ENV", "production")
    saved = logging.root.handlers[:]
    saved_level = logging.root.level
    try:
        configure_logging("debug")
        assert logging.root.level == logging.DEBUG
        assert isinstance(logging.root.handlers[0].formatter, CloudFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        logging.root.handlers[:] = saved
        logging.root.setLevel(saved_level)

"""ticket-rpa test configuration: shared fixtures for unit and integration tests."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping
from unittest.mock import MagicMock

import pytest


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from ticket_rpa.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_job_store(monkeypatch: pytest.MonkeyPatch):
    """Give every test a fresh job store singleton."""
    from ticket_rpa.store import job_store

    monkeypatch.setattr(job_store, "_singleton", None)


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Local settings with zero probe timeouts and screenshots under *tmp_path*."""
    monkeypatch.delenv("TRPA_ENV", raising=False)
    from ticket_rpa.settings.config import Settings

    return Settings(
        browser={"probe_timeout_ms": 0, "type_delay_ms": 0},
        artifacts={"screenshot_dir": str(tmp_path / "screenshots")},
    )


# ---------------------------------------------------------------------------
# Fake Playwright page
# ---------------------------------------------------------------------------


def make_page(
    visible: Iterable[str] = (),
    texts: Mapping[str, str] | None = None,
    url: str = "https://portal.example.com/odoo/action-42",
) -> MagicMock:
    """Build a ``MagicMock`` page whose locators are visible only for *visible* selectors.

    ``page.locator(selector)`` returns the same mock per selector so tests
    can assert on clicks and typing. ``texts`` sets each match's text content.
    """
    shown = set(visible)
    texts = dict(texts or {})
    page = MagicMock(name="page")
    page.url = url
    locators: dict[str, MagicMock] = {}

    def locator(selector: str) -> MagicMock:
        if selector not in locators:
            loc = MagicMock(name=f"locator({selector})")
            element = loc.first
            element.is_visible.return_value = selector in shown
            element.text_content.return_value = texts.get(selector, "")
            element.get_attribute.return_value = ""
            element.evaluate.return_value = "input"
            loc.all.return_value = [element] if selector in shown else []
            locators[selector] = loc
        return locators[selector]

    page.locator.side_effect = locator
    page.locators = locators
    return page


@pytest.fixture()
def fake_page():
    """Factory fixture around :func:`make_page`."""
    return make_page


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that exercise the HTTP app end to end")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")

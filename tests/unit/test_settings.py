"""Unit tests for ticket-rpa settings.

Covers default loading, TOML layering, env var overrides, the production
profile and path resolution.
"""

from __future__ import annotations

import os


class TestSettings:
    """Core settings loading and override mechanics."""

    def test_default_settings_load(self, monkeypatch):
        """Settings should load without any env overrides."""
        monkeypatch.delenv("TRPA_ENV", raising=False)
        from ticket_rpa.settings import get_settings

        s = get_settings()
        assert s.env == "local"
        assert s.is_production is False
        assert s.portal.project_name == "Test Support"
        assert s.api.port == 3000

    def test_get_settings_is_cached(self):
        from ticket_rpa.settings import get_settings

        assert get_settings() is get_settings()

    def test_env_override(self, monkeypatch):
        """TRPA_PORTAL__PROJECT_NAME should override the TOML default."""
        monkeypatch.setenv("TRPA_PORTAL__PROJECT_NAME", "Customer Care")
        from ticket_rpa.settings.config import Settings

        s = Settings()
        assert s.portal.project_name == "Customer Care"

    def test_nested_bool_override(self, monkeypatch):
        monkeypatch.setenv("TRPA_BROWSER__HEADLESS", "true")
        from ticket_rpa.settings.config import Settings

        assert Settings().browser.headless is True

    def test_paths_resolved_relative_to_project_root(self):
        from ticket_rpa.settings.config import Settings

        s = Settings()
        assert os.path.isabs(s.artifacts.screenshot_dir)
        assert s.artifacts.screenshot_dir.startswith(str(s.project_root))

    def test_production_profile_forces_headless(self, monkeypatch):
        """TRPA_ENV=production loads settings.production.toml and is always headless."""
        monkeypatch.setenv("TRPA_ENV", "production")
        monkeypatch.setenv("TRPA_BROWSER__HEADLESS", "false")
        from ticket_rpa.settings.config import Settings

        s = Settings()
        assert s.is_production is True
        assert s.browser.headless is True
        assert s.browser.slow_mo_ms == 0
        assert s.artifacts.screenshot_dir == "/app/screenshots"

    def test_credentials_default_empty(self, monkeypatch):
        monkeypatch.delenv("TRPA_PORTAL__EMAIL", raising=False)
        monkeypatch.delenv("TRPA_PORTAL__PASSWORD", raising=False)
        from ticket_rpa.settings.config import Settings

        s = Settings()
        assert s.portal.email == ""
        assert s.portal.password == ""


class TestSectionDefaults:
    """Spot checks of section defaults."""

    def test_browser_defaults(self):
        from ticket_rpa.settings.config import BrowserSettings

        b = BrowserSettings()
        assert b.navigation_attempts == 3
        assert b.timeout_ms == 60_000
        assert b.sandbox is False
        assert "Chrome/120" in b.user_agent

    def test_job_store_defaults(self):
        from ticket_rpa.settings.config import JobStoreSettings

        j = JobStoreSettings()
        assert j.backend == "memory"
        assert j.key_prefix == "trpa:job:"

    def test_ticket_defaults_from_toml(self, monkeypatch):
        monkeypatch.delenv("TRPA_ENV", raising=False)
        from ticket_rpa.settings.config import Settings

        s = Settings()
        assert s.ticket.title == "Sample"
        assert s.ticket.customer == "Discount Pipe & Steel"
        assert s.ticket.edit_description == "this is a task"

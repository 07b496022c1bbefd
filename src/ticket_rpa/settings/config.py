"""Configuration loader for ticket-rpa using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags / per-request payload values (where applicable)
  2. Environment variables (TRPA_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("TRPA_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "TRPA_ENV"
DEFAULT_ENV = "local"
PRODUCTION_ENV = "production"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class PortalSettings(BaseSettings):
    """Target helpdesk portal and login credentials."""

    model_config = SettingsConfigDict(env_prefix="TRPA_PORTAL__")

    base_url: str = "https://teams.eoxs.com/"
    email: str = ""
    password: str = ""
    project_name: str = "Test Support"
    default_assignee: str = "Sahaj Katiyar"


class TicketSettings(BaseSettings):
    """Ticket field defaults used when a request leaves them out."""

    model_config = SettingsConfigDict(env_prefix="TRPA_TICKET__")

    title: str = "Sample"
    customer: str = "Discount Pipe & Steel"
    description: str = ""
    log_note: str = "Email received from customer"
    edit_description: str = "this is a task"


class BrowserSettings(BaseSettings):
    """Playwright browser settings."""

    model_config = SettingsConfigDict(env_prefix="TRPA_BROWSER__")

    headless: bool = False
    slow_mo_ms: int = 100
    timeout_ms: int = 60_000
    navigation_timeout_ms: int = 30_000
    navigation_attempts: int = 3
    probe_timeout_ms: int = 2_000
    type_delay_ms: int = 50
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    sandbox: bool = False


class ArtifactSettings(BaseSettings):
    """Debug screenshot output."""

    model_config = SettingsConfigDict(env_prefix="TRPA_ARTIFACTS__")

    screenshot_dir: str = "data/screenshots"
    screenshots_enabled: bool = True


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="TRPA_API__")

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["http://localhost:5678"]
    request_timeout_sec: int = 900


class JobStoreSettings(BaseSettings):
    """Backend for asynchronous job records."""

    model_config = SettingsConfigDict(env_prefix="TRPA_JOB_STORE__")

    backend: str = "memory"  # memory | redis
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "trpa:job:"
    default_ttl_seconds: int = 86_400


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root ticket-rpa settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="TRPA_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False

    portal: PortalSettings = Field(default_factory=PortalSettings)
    ticket: TicketSettings = Field(default_factory=TicketSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    artifacts: ArtifactSettings = Field(default_factory=ArtifactSettings)
    api: APISettings = Field(default_factory=APISettings)
    job_store: JobStoreSettings = Field(default_factory=JobStoreSettings)

    @property
    def is_production(self) -> bool:
        return self.env == PRODUCTION_ENV

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths against project_root and force headless in production."""
        root = self.project_root
        if not Path(self.artifacts.screenshot_dir).is_absolute():
            self.artifacts.screenshot_dir = str(root / self.artifacts.screenshot_dir)
        if self.is_production:
            self.browser.headless = True
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()

"""Playwright browser session: one Chromium instance per automation run.

Usage::

    with BrowserSession(settings.browser) as session:
        session.page.goto(...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright

    from ticket_rpa.settings.config import BrowserSettings

logger = logging.getLogger(__name__)

# Chromium flags for container hosts (no GPU, small /dev/shm).
_BASE_ARGS: tuple[str, ...] = (
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--disable-gpu",
    "--start-maximized",
)
_NO_SANDBOX_ARGS: tuple[str, ...] = ("--no-sandbox", "--disable-setuid-sandbox")


@dataclass
class BrowserProfile:
    """Keyword arguments for ``chromium.launch()`` and ``browser.new_context()``."""

    launch_args: dict[str, Any] = field(default_factory=dict)
    context_args: dict[str, Any] = field(default_factory=dict)


def build_browser_profile(settings: BrowserSettings, *, headless: bool | None = None) -> BrowserProfile:
    """Translate browser settings into Playwright launch/context kwargs.

    Args:
        settings: Browser section of the settings.
        headless: Per-run override; ``None`` keeps the configured value.
    """
    args = list(_BASE_ARGS)
    if not settings.sandbox:
        args = [*_NO_SANDBOX_ARGS, *args]

    launch_args: dict[str, Any] = {
        "headless": settings.headless if headless is None else headless,
        "slow_mo": settings.slow_mo_ms,
        "args": args,
    }
    # viewport=None lets the page follow the (maximized) window size.
    context_args: dict[str, Any] = {"viewport": None}
    if settings.user_agent:
        context_args["user_agent"] = settings.user_agent
    return BrowserProfile(launch_args=launch_args, context_args=context_args)


class BrowserSession:
    """Owns the Playwright driver, browser, context and page for one run.

    Args:
        settings: Browser section of the settings.
        headless: Per-run override of ``settings.headless``.
    """

    def __init__(self, settings: BrowserSettings, *, headless: bool | None = None) -> None:
        self._settings = settings
        self._profile = build_browser_profile(settings, headless=headless)
        self._playwright: Playwright | None = None
        self.browser: Browser | None = None
        self.context: BrowserContext | None = None
        self.page: Page | None = None

    def start(self) -> Page:
        """Launch Chromium and open a page."""
        from playwright.sync_api import sync_playwright

        logger.info(
            "Launching Chromium (headless=%s, slow_mo=%dms)",
            self._profile.launch_args["headless"],
            self._profile.launch_args["slow_mo"],
        )
        self._playwright = sync_playwright().start()
        try:
            self.browser = self._playwright.chromium.launch(**self._profile.launch_args)
            self.context = self.browser.new_context(**self._profile.context_args)
            self.context.set_default_timeout(self._settings.timeout_ms)
            self.context.set_default_navigation_timeout(self._settings.navigation_timeout_ms)
            self.page = self.context.new_page()
        except Exception:
            logger.error("Failed to initialize browser")
            self.close()
            raise

        self.page.on("console", lambda msg: logger.debug("Browser console: %s", msg.text))
        self.page.on("pageerror", lambda err: logger.debug("Page error: %s", err))
        logger.info("Browser initialized")
        return self.page

    def close(self) -> None:
        """Close the context, browser and driver; safe to call twice."""
        for closer in (self.context, self.browser):
            if closer is None:
                continue
            try:
                closer.close()
            except Exception as exc:
                logger.debug("Ignoring close error: %s", exc)
        if self.browser is not None:
            logger.info("Browser closed")
        self.context = None
        self.browser = None
        self.page = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def __enter__(self) -> "BrowserSession":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

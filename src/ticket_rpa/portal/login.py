"""Portal login through the website's login popup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

from ticket_rpa.browser.actions import (
    SHORT_PAUSE_MS,
    click_first,
    describe_elements,
    fill_first,
    first_visible,
    text_of,
)
from ticket_rpa.browser.navigation import goto_with_retries
from ticket_rpa.portal import selectors as sel

if TYPE_CHECKING:
    from playwright.sync_api import Page

    from ticket_rpa.models.ticket import Credentials
    from ticket_rpa.settings.config import Settings

logger = logging.getLogger(__name__)

_MODAL_WAIT_MS = 10_000
_POST_SUBMIT_NAV_MS = 15_000
_POST_SUBMIT_SETTLE_MS = 3_000


def login(page: Page, credentials: Credentials, settings: Settings) -> bool:
    """Log into the portal.

    Navigates to the portal home page, opens the login popup, fills the
    credentials and submits. A visible login error, or a URL that still
    points at a login/auth page, counts as failure. When no logged-in
    indicator is visible either, the login is assumed to have worked.

    Args:
        page: Playwright page.
        credentials: Portal email and password.
        settings: Resolved settings (portal URL, browser timings).

    Returns:
        True if the login appears to have succeeded.

    Raises:
        NavigationError: If the portal cannot be reached.
    """
    browser = settings.browser
    probe = browser.probe_timeout_ms

    logger.info("Logging into %s", settings.portal.base_url)
    goto_with_retries(
        page,
        settings.portal.base_url,
        attempts=browser.navigation_attempts,
        timeout_ms=browser.navigation_timeout_ms,
    )
    page.wait_for_timeout(1_500)

    if click_first(page, sel.LOGIN_TRIGGER, timeout_ms=probe, label="login trigger") is None:
        logger.warning("No login trigger found, forcing the login popup open")
        force_open_login_popup(page)
    page.wait_for_timeout(SHORT_PAUSE_MS)

    if first_visible(page, (*sel.LOGIN_MODAL, *sel.EMAIL_INPUT), timeout_ms=_MODAL_WAIT_MS) is None:
        logger.warning("Login modal did not appear, forcing it open again")
        force_open_login_popup(page)
        page.wait_for_timeout(SHORT_PAUSE_MS)

    describe_elements(page, "input")

    email = fill_first(
        page,
        sel.EMAIL_INPUT,
        credentials.email,
        timeout_ms=probe,
        type_delay_ms=browser.type_delay_ms,
        label="email field",
    )
    if email is None:
        logger.error("Could not find or fill email field")
        return False

    password = fill_first(
        page,
        sel.PASSWORD_INPUT,
        credentials.password,
        timeout_ms=probe,
        type_delay_ms=browser.type_delay_ms,
        label="password field",
    )
    if password is None:
        logger.error("Could not find or fill password field")
        return False

    if click_first(page, sel.LOGIN_SUBMIT, timeout_ms=probe, label="login submit") is None:
        match = first_visible(page, sel.PASSWORD_INPUT, timeout_ms=0)
        if match is None:
            logger.error("Could not submit login form")
            return False
        logger.info("Submitting login form with Enter")
        match[1].press("Enter")

    _wait_after_submit(page)
    return _verify_logged_in(page)


def force_open_login_popup(page: Page) -> None:
    """Click any login-ish link and force the login modal visible via script."""
    try:
        page.evaluate(sel.FORCE_OPEN_LOGIN_SCRIPT)
    except PlaywrightError as exc:
        logger.warning("Could not force the login popup open: %s", exc)


def _wait_after_submit(page: Page) -> None:
    try:
        page.wait_for_load_state("networkidle", timeout=_POST_SUBMIT_NAV_MS)
    except PlaywrightError:
        logger.debug("No network idle after login submit, waiting a fixed interval")
        page.wait_for_timeout(10_000)
    page.wait_for_timeout(_POST_SUBMIT_SETTLE_MS)


def _verify_logged_in(page: Page) -> bool:
    error = first_visible(page, sel.LOGIN_ERROR, timeout_ms=0)
    if error is not None:
        logger.error("Login error shown: %s", text_of(error[1]) or error[0])
        return False

    url = page.url.lower()
    if "login" in url or "auth" in url:
        logger.error("Still on a login page after submit: %s", page.url)
        return False

    indicator = first_visible(page, sel.LOGGED_IN_INDICATORS, timeout_ms=0)
    if indicator is None:
        logger.warning("No logged-in indicator found, assuming login succeeded (url=%s)", page.url)
    else:
        logger.info("Login successful (%s)", indicator[0])
    return True

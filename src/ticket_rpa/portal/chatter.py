"""Posting a log note to the open ticket's chatter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

from ticket_rpa.browser.actions import (
    DEFAULT_PROBE_TIMEOUT_MS,
    SHORT_PAUSE_MS,
    click_first,
    click_xpath_fallback,
    fill_first,
    safe_click,
    text_of,
    visible_matches,
)
from ticket_rpa.portal import selectors as sel
from ticket_rpa.portal.matching import is_log_submit_button

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)

_LOG_SETTLE_MS = 3_000


def add_log_note(
    page: Page,
    note: str,
    *,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    type_delay_ms: int = 50,
) -> bool:
    """Open the Log Note composer, type *note* and click the Log button.

    Returns:
        True once the note was submitted.
    """
    if click_first(page, sel.LOG_NOTE_BUTTON, timeout_ms=timeout_ms, label="Log Note button") is None:
        logger.error("Could not find the Log Note button")
        return False
    page.wait_for_timeout(SHORT_PAUSE_MS)

    typed = fill_first(
        page,
        sel.LOG_NOTE_TEXT,
        note,
        timeout_ms=timeout_ms,
        type_delay_ms=type_delay_ms,
        label="log note text area",
    )
    if typed is None:
        logger.error("Could not find the log note text area")
        return False
    page.wait_for_timeout(SHORT_PAUSE_MS)

    if not _click_log_submit(page):
        if not click_xpath_fallback(page, sel.LOG_SUBMIT_XPATH, label="Log button"):
            logger.error("Could not find the Log submit button")
            return False
    page.wait_for_timeout(_LOG_SETTLE_MS)
    logger.info("Log note added")
    return True


def _click_log_submit(page: Page) -> bool:
    for selector in sel.LOG_SUBMIT_BUTTON:
        for button in visible_matches(page, selector):
            text = text_of(button)
            try:
                css_class = button.get_attribute("class") or ""
            except PlaywrightError as exc:
                logger.debug("Skipping detached button %r: %s", text, exc)
                continue
            if not is_log_submit_button(text, css_class, selector):
                logger.debug("Skipping button %r: not a Log button", text)
                continue
            if safe_click(button):
                logger.info("Clicked Log button via %s (%r)", selector, text)
                return True
    return False

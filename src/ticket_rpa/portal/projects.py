"""Navigation from the portal home to a project's kanban board."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ticket_rpa.browser.actions import (
    DEFAULT_PROBE_TIMEOUT_MS,
    SHORT_PAUSE_MS,
    click_first,
    click_xpath_fallback,
    describe_elements,
    safe_click,
    visible_matches,
)
from ticket_rpa.portal import selectors as sel

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)


def open_project(page: Page, project_name: str, *, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> bool:
    """Open the apps menu, go to Projects and click the *project_name* card.

    Each of the three clicks has a last-resort fallback (first button on
    the page, XPath on the link or card text) so a redesigned menu still
    gets a chance.

    Returns:
        True once the project card was clicked.
    """
    logger.info("Opening project %r", project_name)

    if click_first(page, sel.APP_MENU, timeout_ms=timeout_ms, label="apps menu") is None:
        logger.warning("Apps menu not found, clicking the first visible button")
        describe_elements(page, sel.APP_MENU_FALLBACK)
        buttons = visible_matches(page, sel.APP_MENU_FALLBACK)
        if not buttons or not safe_click(buttons[0]):
            logger.error("Could not open the apps menu")
            return False
    page.wait_for_timeout(SHORT_PAUSE_MS)

    if click_first(page, sel.PROJECTS_LINK, timeout_ms=timeout_ms, label="Projects link") is None:
        if not click_xpath_fallback(page, sel.PROJECTS_XPATH, label="Projects link"):
            logger.error("Could not find the Projects menu entry")
            return False
    page.wait_for_timeout(2 * SHORT_PAUSE_MS)

    if click_first(page, sel.project_card(project_name), timeout_ms=timeout_ms, label="project card") is None:
        if not click_xpath_fallback(page, sel.project_xpath(project_name), label="project card"):
            logger.error("Could not find project %r", project_name)
            return False
    page.wait_for_timeout(2 * SHORT_PAUSE_MS)

    logger.info("Project %r opened", project_name)
    return True

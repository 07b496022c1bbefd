"""Selector fallback chain primitives.

Every portal step is built from the helpers here: walk an ordered list of
candidate selectors, act on the first one that is visible, and report which
selector matched so the logs show how the portal markup is drifting.
Selectors the engine rejects (bad syntax, detached frames) are skipped.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence

from playwright.sync_api import Error as PlaywrightError

if TYPE_CHECKING:
    from playwright.sync_api import Locator, Page

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_MS = 2_000
_POLL_INTERVAL_MS = 250

# Settle time after clicks that open menus, popups or dropdowns.
SHORT_PAUSE_MS = 1_000


def first_visible(
    page: Page,
    selectors: Sequence[str],
    *,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
) -> tuple[str, Locator] | None:
    """Return the first visible match from an ordered selector chain.

    The whole chain is re-polled until *timeout_ms* elapses so an element
    rendered late is still found, while earlier selectors keep priority on
    every pass.

    Args:
        page: Playwright page.
        selectors: Candidate selectors in priority order.
        timeout_ms: Total time budget for the chain (0 = single pass).

    Returns:
        ``(selector, locator)`` for the first visible match, else ``None``.
    """
    deadline = time.monotonic() + timeout_ms / 1000
    while True:
        for selector in selectors:
            locator = page.locator(selector).first
            try:
                if locator.is_visible():
                    return selector, locator
            except PlaywrightError as exc:
                logger.debug("Selector %r rejected: %s", selector, exc)
        if time.monotonic() >= deadline:
            return None
        page.wait_for_timeout(_POLL_INTERVAL_MS)


def visible_matches(page: Page, selector: str) -> list[Locator]:
    """Return every currently visible element matching *selector*."""
    try:
        candidates = page.locator(selector).all()
    except PlaywrightError as exc:
        logger.debug("Selector %r rejected: %s", selector, exc)
        return []
    visible: list[Locator] = []
    for candidate in candidates:
        try:
            if candidate.is_visible():
                visible.append(candidate)
        except PlaywrightError:
            continue
    return visible


def click_first(
    page: Page,
    selectors: Sequence[str],
    *,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    label: str = "element",
) -> str | None:
    """Click the first visible element of a selector chain.

    Returns:
        The selector that was clicked, or ``None`` if nothing matched or the
        click itself failed.
    """
    match = first_visible(page, selectors, timeout_ms=timeout_ms)
    if match is None:
        logger.debug("No visible %s among %d selectors", label, len(selectors))
        return None
    selector, locator = match
    if not safe_click(locator):
        return None
    logger.info("Clicked %s: %s", label, selector)
    return selector


def fill_first(
    page: Page,
    selectors: Sequence[str],
    text: str,
    *,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    type_delay_ms: int = 50,
    label: str = "field",
) -> str | None:
    """Clear and type *text* into the first visible field of a selector chain.

    Returns:
        The selector that was filled, or ``None``.
    """
    match = first_visible(page, selectors, timeout_ms=timeout_ms)
    if match is None:
        logger.debug("No visible %s among %d selectors", label, len(selectors))
        return None
    selector, locator = match
    try:
        clear_and_type(locator, text, delay_ms=type_delay_ms)
    except PlaywrightError as exc:
        logger.warning("Failed to type into %s (%s): %s", label, selector, exc)
        return None
    logger.info("Filled %s: %s", label, selector)
    return selector


def clear_and_type(locator: Locator, text: str, *, delay_ms: int = 50) -> None:
    """Scroll to, focus, clear, then type into *locator* key by key.

    Typing (rather than ``fill``) fires the key events the portal's
    autocomplete widgets listen for.
    """
    locator.scroll_into_view_if_needed()
    locator.focus()
    locator.fill("")
    locator.press_sequentially(text, delay=delay_ms)


def safe_click(locator: Locator) -> bool:
    """Scroll into view and click; return False instead of raising."""
    try:
        locator.scroll_into_view_if_needed()
        locator.click()
        return True
    except PlaywrightError as exc:
        logger.warning("Click failed: %s", exc)
        return False


def click_xpath_fallback(page: Page, xpath: str, *, label: str = "element") -> bool:
    """Last-resort click on the first node matching an XPath expression."""
    try:
        page.locator(f"xpath={xpath}").first.click()
    except PlaywrightError as exc:
        logger.warning("Could not find %s via XPath: %s", label, exc)
        return False
    logger.info("Clicked %s via XPath", label)
    return True


def text_contains_xpath(tags: Iterable[str], words: Iterable[str]) -> str:
    """Build a case-insensitive "element text contains word" XPath union.

    >>> text_contains_xpath(["button"], ["save"])
    '//button[contains(translate(., "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"), "save")]'
    """
    upper = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    lower = upper.lower()
    parts = [
        f'//{tag}[contains(translate(., "{upper}", "{lower}"), "{word.lower()}")]'
        for word in words
        for tag in tags
    ]
    return " | ".join(parts)


def text_of(locator: Locator) -> str:
    """Return the element's text content, or ``""`` when unreadable."""
    try:
        return (locator.text_content() or "").strip()
    except PlaywrightError:
        return ""


def tag_name(locator: Locator) -> str:
    """Return the lower-case tag name of *locator*."""
    return locator.evaluate("el => el.tagName.toLowerCase()")


def capture_screenshot(page: Page | None, name: str, directory: str | Path) -> str | None:
    """Save a full-page screenshot as ``screenshot_{name}_{epoch_ms}.png``.

    Screenshots are debugging aids: failures are logged, never raised.

    Returns:
        The file path, or ``None`` if no screenshot was written.
    """
    if page is None:
        return None
    out_dir = Path(directory)
    path = out_dir / f"screenshot_{name}_{int(time.time() * 1000)}.png"
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        page.screenshot(path=str(path), full_page=True)
    except (PlaywrightError, OSError) as exc:
        logger.error("Failed to capture screenshot %s: %s", name, exc)
        return None
    logger.info("Screenshot saved: %s", path)
    return str(path)


def describe_elements(page: Page, selector: str, *, limit: int = 10) -> None:
    """Log an inventory of elements matching *selector* at DEBUG level.

    Used before fragile steps so a failed run's log shows what the page
    actually offered.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    try:
        elements = page.locator(selector).all()
    except PlaywrightError as exc:
        logger.debug("Could not inventory %r: %s", selector, exc)
        return
    logger.debug("Found %d elements for %r", len(elements), selector)
    for i, el in enumerate(elements[:limit]):
        try:
            logger.debug(
                "  %d: %s[name=%r, class=%r, placeholder=%r] text=%r",
                i,
                tag_name(el),
                el.get_attribute("name") or "",
                (el.get_attribute("class") or "")[:50],
                el.get_attribute("placeholder") or "",
                text_of(el)[:60],
            )
        except PlaywrightError:
            logger.debug("  %d: <unreadable>", i)

"""Resilient page navigation with automatic wait-strategy fallback.

The portal keeps long-polling connections open (bus notifications), so
``networkidle`` is not always reached. ``resilient_goto`` wraps Playwright's
``page.goto`` with a fallback chain: try ``networkidle`` first, then ``load``,
then ``domcontentloaded``. ``goto_with_retries`` repeats the whole navigation
a few times with a pause in between for flaky cold starts.
"""

from __future__ import annotations

import logging
from typing import Literal

from playwright.sync_api import Error as PlaywrightError, Page, Response, TimeoutError as PlaywrightTimeout

from ticket_rpa.exceptions import NavigationError

logger = logging.getLogger(__name__)

# Playwright error substrings that indicate non-retryable navigation failures.
_NON_RETRYABLE_ERRORS: tuple[str, ...] = (
    "ERR_NAME_NOT_RESOLVED",
    "ERR_CONNECTION_REFUSED",
    "ERR_SSL_PROTOCOL_ERROR",
    "ERR_CERT_AUTHORITY_INVALID",
    "ERR_CERT_COMMON_NAME_INVALID",
    "ERR_ADDRESS_UNREACHABLE",
)

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]

_FALLBACK_STRATEGY: list[WaitUntil] = ["networkidle", "load", "domcontentloaded"]


def resilient_goto(
    page: Page,
    url: str,
    *,
    timeout_ms: int = 30_000,
    wait_until: WaitUntil = "networkidle",
) -> Response | None:
    """Navigate to *url* with automatic wait-strategy fallback.

    Tries *wait_until* first (default ``networkidle``). If that times out,
    retries with progressively less strict strategies using the same
    timeout for each attempt.

    Args:
        page: Playwright page instance.
        url: Target URL to navigate to.
        timeout_ms: Timeout per attempt in milliseconds.
        wait_until: Preferred initial wait strategy.

    Returns:
        The Playwright ``Response`` for the main frame navigation,
        or ``None`` if the page did not produce a response.

    Raises:
        NavigationError: On DNS, connection or certificate failures.
        PlaywrightTimeout: If all fallback strategies time out.
    """
    strategies = _build_fallback_chain(wait_until)

    last_error: PlaywrightTimeout | None = None
    for strategy in strategies:
        try:
            logger.debug("goto %s (wait_until=%s, timeout=%dms)", url, strategy, timeout_ms)
            return page.goto(url, wait_until=strategy, timeout=timeout_ms)
        except PlaywrightError as exc:
            error_msg = str(exc)
            for pattern in _NON_RETRYABLE_ERRORS:
                if pattern in error_msg:
                    reason = pattern.replace("ERR_", "").replace("_", " ").lower()
                    logger.warning("Navigation to %s failed (non-retryable): %s", url, pattern)
                    raise NavigationError(url, reason) from exc
            if isinstance(exc, PlaywrightTimeout):
                logger.warning(
                    "Navigation to %s timed out with wait_until=%s, retrying with weaker strategy",
                    url,
                    strategy,
                )
                last_error = exc
            else:
                raise

    raise last_error  # type: ignore[misc]


def goto_with_retries(
    page: Page,
    url: str,
    *,
    attempts: int = 3,
    pause_ms: int = 2_000,
    timeout_ms: int = 30_000,
) -> Response | None:
    """Navigate to *url*, repeating the whole navigation on failure.

    Each attempt runs the full :func:`resilient_goto` fallback chain.
    Non-retryable errors surface immediately.

    Args:
        page: Playwright page instance.
        url: Target URL.
        attempts: Number of navigation attempts.
        pause_ms: Pause between attempts.
        timeout_ms: Timeout per wait strategy.

    Raises:
        NavigationError: After the last failed attempt.
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        logger.info("Navigation attempt %d/%d to %s", attempt, attempts, url)
        try:
            response = resilient_goto(page, url, timeout_ms=timeout_ms)
            logger.info("Navigated to %s", url)
            return response
        except NavigationError:
            raise
        except PlaywrightError as exc:
            logger.warning("Navigation attempt %d failed: %s", attempt, exc)
            if attempt == attempts:
                raise NavigationError(url, f"Failed to navigate after {attempts} attempts: {exc}") from exc
            page.wait_for_timeout(pause_ms)
    return None


def _build_fallback_chain(preferred: WaitUntil) -> list[WaitUntil]:
    """Return the fallback chain starting from *preferred*.

    If *preferred* is in the default chain, returns from that point onward.
    Otherwise returns ``[preferred]`` followed by the full default chain.
    """
    if preferred in _FALLBACK_STRATEGY:
        idx = _FALLBACK_STRATEGY.index(preferred)
        return _FALLBACK_STRATEGY[idx:]
    return [preferred, *_FALLBACK_STRATEGY]

"""Automation runner: drives one browser session through the portal flow.

Usage::

    request = TicketRequest.from_payload(payload, settings)
    result = TicketAutomation(request, settings).run()
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from playwright.sync_api import Error as PlaywrightError

from ticket_rpa.browser.actions import capture_screenshot
from ticket_rpa.browser.session import BrowserSession
from ticket_rpa.exceptions import LoginError, StepFailedError, TicketNotFoundError, TicketRPAError
from ticket_rpa.models.results import RunResult, StepOutcome
from ticket_rpa.models.ticket import RunMode
from ticket_rpa.portal.chatter import add_log_note
from ticket_rpa.portal.login import login
from ticket_rpa.portal.projects import open_project
from ticket_rpa.portal.tickets import (
    click_create,
    close_popup_with_discard,
    edit_ticket_details,
    fill_ticket_form,
    open_created_ticket,
    open_ticket_by_title,
    submit_ticket,
)

if TYPE_CHECKING:
    from playwright.sync_api import Page

    from ticket_rpa.models.ticket import TicketRequest
    from ticket_rpa.settings.config import Settings

logger = logging.getLogger(__name__)

_BEFORE_OPEN_TICKET_MS = 3_000


class TicketAutomation:
    """One automation run for one ticket request.

    Args:
        request: The request-scoped ticket values.
        settings: Resolved settings; defaults to ``get_settings()``.
        session_factory: Callable returning a browser session; replaced in tests.
    """

    def __init__(
        self,
        request: TicketRequest,
        settings: Settings | None = None,
        *,
        session_factory: Callable[..., BrowserSession] = BrowserSession,
    ) -> None:
        if settings is None:
            from ticket_rpa.settings import get_settings

            settings = get_settings()
        self.request = request
        self.settings = settings
        self._session_factory = session_factory
        self._page: Page | None = None
        self._result = RunResult(mode=request.mode, title=request.title)

    def run(self) -> RunResult:
        """Execute the flow for the request's mode.

        Never raises: every failure ends up in ``RunResult.error`` with an
        ``error`` screenshot, and the browser is always closed.
        """
        result = self._result
        # Production hosts have no display.
        headless = True if self.settings.is_production else self.request.headless
        session = self._session_factory(self.settings.browser, headless=headless)

        logger.info("Automation starting: mode=%s title=%r", self.request.mode.value, self.request.title)
        try:
            self._page = session.start()
            self._login_and_open_project()
            if self.request.mode is RunMode.LOG_NOTE_ONLY:
                self._run_log_note_only()
            else:
                self._run_create()
            result.success = True
            logger.info("Automation finished: ticket_id=%s", result.ticket_id)
        except TicketRPAError as exc:
            logger.error("Automation failed: %s", exc)
            result.error = str(exc)
            self._screenshot("error")
        except Exception as exc:
            logger.exception("Automation failed unexpectedly")
            result.error = str(exc) or exc.__class__.__name__
            self._screenshot("error")
        finally:
            session.close()
            self._page = None
            result.completed_at = datetime.now(timezone.utc)
        return result

    # -- flows ---------------------------------------------------------------

    def _login_and_open_project(self) -> None:
        if not self._step("login", lambda page: login(page, self.request.credentials, self.settings)):
            raise LoginError()
        self._screenshot("after_login")

        project = self.settings.portal.project_name
        if not self._step("open_project", lambda page: open_project(page, project, timeout_ms=self._probe)):
            raise StepFailedError("open_project", f"Failed to navigate to Projects and select {project}")
        self._screenshot("after_project_selection")

    def _run_log_note_only(self) -> None:
        title = self.request.title
        if not self._step("open_ticket", lambda page: open_ticket_by_title(page, title)):
            raise TicketNotFoundError(title)
        self._screenshot("after_open_existing_ticket")

        if not self._step("add_log_note", self._add_log_note):
            raise StepFailedError("add_log_note", "Failed to add log note")
        self._screenshot("after_log_note")

    def _run_create(self) -> None:
        probe, delay = self._probe, self.settings.browser.type_delay_ms

        if not self._step("click_create", lambda page: click_create(page, timeout_ms=probe)):
            raise StepFailedError("click_create", "Failed to click Create")
        self._screenshot("after_create")

        def fill(page: Page) -> bool:
            return fill_ticket_form(page, self.request, timeout_ms=probe, type_delay_ms=delay)

        if not self._step("fill_ticket_form", fill):
            raise StepFailedError("fill_ticket_form", "Failed to fill ticket form")
        self._screenshot("after_form_fill")

        submitted = self._step("submit_ticket", self._submit)
        if not submitted:
            raise StepFailedError("submit_ticket", "Failed to submit ticket")
        self._screenshot("after_submit")

        self._step("close_popup", lambda page: close_popup_with_discard(page, timeout_ms=probe), fatal=False)
        logger.info("Ticket created")

        self._require_page().wait_for_timeout(_BEFORE_OPEN_TICKET_MS)
        title = self.request.title
        if not self._step("open_created_ticket", lambda page: open_created_ticket(page, title, timeout_ms=probe)):
            raise StepFailedError("open_created_ticket", "Failed to click on created ticket")

        edit_description = self.settings.ticket.edit_description

        def edit(page: Page) -> bool:
            return edit_ticket_details(page, self.request, edit_description, timeout_ms=probe, type_delay_ms=delay)

        if not self._step("edit_ticket_details", edit, fatal=False):
            logger.warning("Could not edit ticket details, continuing")
        self._screenshot("after_ticket_edit")

        if not self._step("add_log_note", self._add_log_note, fatal=False):
            logger.warning("Could not add log note, ticket creation still succeeded")
        self._screenshot("after_log_note")

    # -- step helpers --------------------------------------------------------

    @property
    def _probe(self) -> int:
        return self.settings.browser.probe_timeout_ms

    def _submit(self, page: Page) -> bool:
        ok, ticket_id = submit_ticket(page, timeout_ms=self._probe)
        if ticket_id:
            self._result.ticket_id = ticket_id
        return ok

    def _add_log_note(self, page: Page) -> bool:
        return add_log_note(
            page,
            self.request.log_note,
            timeout_ms=self._probe,
            type_delay_ms=self.settings.browser.type_delay_ms,
        )

    def _require_page(self) -> Page:
        if self._page is None:
            raise TicketRPAError("Browser session is not started")
        return self._page

    def _step(self, name: str, action: Callable[[Page], Any], *, fatal: bool = True) -> bool:
        """Run one portal step, recording its outcome and duration.

        A Playwright error inside a non-fatal step counts as a miss; fatal
        steps let it reach the run boundary.
        """
        page = self._require_page()
        logger.info("Step %s", name)
        start = time.monotonic()
        try:
            ok = bool(action(page))
        except PlaywrightError as exc:
            if fatal:
                raise
            logger.warning("Step %s raised: %s", name, exc)
            ok = False
        outcome = StepOutcome(name=name, success=ok, fatal=fatal, duration_sec=time.monotonic() - start)
        self._result.steps.append(outcome)
        if not ok:
            log = logger.error if fatal else logger.warning
            log("Step %s did not succeed (%.1fs)", name, outcome.duration_sec)
        return ok

    def _screenshot(self, name: str) -> None:
        artifacts = self.settings.artifacts
        if not artifacts.screenshots_enabled or self._page is None:
            return
        path = capture_screenshot(self._page, name, artifacts.screenshot_dir)
        if path:
            self._result.screenshots.append(path)


def run_ticket_automation(request: TicketRequest, settings: Settings | None = None) -> RunResult:
    """Convenience wrapper used by the API and CLI."""
    return TicketAutomation(request, settings).run()

"""Unit tests for the automation runner with every portal step patched."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError

from ticket_rpa.automation import TicketAutomation
from ticket_rpa.exceptions import NavigationError
from ticket_rpa.models.ticket import RunMode, TicketRequest

STEPS = (
    "login",
    "open_project",
    "click_create",
    "fill_ticket_form",
    "close_popup_with_discard",
    "open_created_ticket",
    "open_ticket_by_title",
    "edit_ticket_details",
    "add_log_note",
)


@pytest.fixture()
def steps():
    """Patch every portal step to succeed; tests flip individual ones."""
    patchers = {name: patch(f"ticket_rpa.automation.{name}", return_value=True) for name in STEPS}
    mocks = {name: p.start() for name, p in patchers.items()}
    submit = patch("ticket_rpa.automation.submit_ticket", return_value=(True, "T-1"))
    mocks["submit_ticket"] = submit.start()
    shots = patch("ticket_rpa.automation.capture_screenshot", side_effect=lambda page, name, d: f"{d}/{name}.png")
    mocks["capture_screenshot"] = shots.start()
    yield mocks
    patch.stopall()


@pytest.fixture()
def session():
    s = MagicMock(name="session")
    s.start.return_value = MagicMock(name="page")
    return s


def _run(request: TicketRequest, settings, session) -> tuple:
    factory = MagicMock(return_value=session)
    result = TicketAutomation(request, settings, session_factory=factory).run()
    return result, factory


def _shot_names(steps) -> list[str]:
    return [c.args[1] for c in steps["capture_screenshot"].call_args_list]


class TestCreateMode:
    def test_full_flow_succeeds(self, steps, settings, session) -> None:
        result, _ = _run(TicketRequest(title="Printer on fire"), settings, session)

        assert result.success is True
        assert result.ticket_id == "T-1"
        assert result.mode is RunMode.CREATE
        assert [s.name for s in result.steps] == [
            "login",
            "open_project",
            "click_create",
            "fill_ticket_form",
            "submit_ticket",
            "close_popup",
            "open_created_ticket",
            "edit_ticket_details",
            "add_log_note",
        ]
        assert _shot_names(steps) == [
            "after_login",
            "after_project_selection",
            "after_create",
            "after_form_fill",
            "after_submit",
            "after_ticket_edit",
            "after_log_note",
        ]
        assert len(result.screenshots) == 7
        assert result.completed_at is not None
        steps["open_ticket_by_title"].assert_not_called()
        session.close.assert_called_once()

    def test_login_failure(self, steps, settings, session) -> None:
        steps["login"].return_value = False

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is False
        assert result.error == "Login failed"
        assert _shot_names(steps) == ["error"]
        steps["open_project"].assert_not_called()
        session.close.assert_called_once()

    def test_project_failure_names_project(self, steps, settings, session) -> None:
        steps["open_project"].return_value = False

        result, _ = _run(TicketRequest(), settings, session)

        assert result.error == "Failed to navigate to Projects and select Test Support"

    @pytest.mark.parametrize(
        ("step", "message"),
        [
            ("click_create", "Failed to click Create"),
            ("fill_ticket_form", "Failed to fill ticket form"),
            ("open_created_ticket", "Failed to click on created ticket"),
        ],
    )
    def test_fatal_steps(self, steps, settings, session, step, message) -> None:
        steps[step].return_value = False

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is False
        assert result.error == message
        assert result.to_dict()["error"] == message

    def test_submit_failure(self, steps, settings, session) -> None:
        steps["submit_ticket"].return_value = (False, None)

        result, _ = _run(TicketRequest(), settings, session)

        assert result.error == "Failed to submit ticket"

    def test_edit_and_log_note_are_not_fatal(self, steps, settings, session) -> None:
        steps["edit_ticket_details"].return_value = False
        steps["add_log_note"].return_value = False
        steps["submit_ticket"].return_value = (True, None)

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is True
        assert result.ticket_id is None
        failed = [s for s in result.steps if not s.success]
        assert {s.name for s in failed} == {"edit_ticket_details", "add_log_note"}
        assert all(not s.fatal for s in failed)
        assert "error" not in result.to_dict()

    @pytest.mark.parametrize("step", ["close_popup_with_discard", "edit_ticket_details", "add_log_note"])
    def test_playwright_error_in_non_fatal_step(self, steps, settings, session, step) -> None:
        steps[step].side_effect = PlaywrightError("Element is not attached to the DOM")

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is True
        assert result.ticket_id == "T-1"
        failed = [s for s in result.steps if not s.success]
        assert len(failed) == 1
        assert failed[0].fatal is False
        assert "error" not in _shot_names(steps)

    def test_playwright_error_in_fatal_step_fails_run(self, steps, settings, session) -> None:
        steps["click_create"].side_effect = PlaywrightError("Target closed")

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is False
        assert result.error == "Target closed"
        steps["submit_ticket"].assert_not_called()


class TestLogNoteOnlyMode:
    def test_posts_note_to_existing_ticket(self, steps, settings, session) -> None:
        request = TicketRequest(title="Existing", log_note="Called back", mode=RunMode.LOG_NOTE_ONLY)

        result, _ = _run(request, settings, session)

        assert result.success is True
        assert result.ticket_id is None
        steps["open_ticket_by_title"].assert_called_once()
        assert steps["open_ticket_by_title"].call_args.args[1] == "Existing"
        assert steps["add_log_note"].call_args.args[1] == "Called back"
        steps["click_create"].assert_not_called()
        assert "after_open_existing_ticket" in _shot_names(steps)

    def test_ticket_not_found(self, steps, settings, session) -> None:
        steps["open_ticket_by_title"].return_value = False
        request = TicketRequest(title="Missing", log_note="x", mode=RunMode.LOG_NOTE_ONLY)

        result, _ = _run(request, settings, session)

        assert result.success is False
        assert result.error == "Ticket not found: Missing"
        steps["add_log_note"].assert_not_called()

    def test_log_note_failure_is_fatal(self, steps, settings, session) -> None:
        steps["add_log_note"].return_value = False
        request = TicketRequest(title="Existing", log_note="x", mode=RunMode.LOG_NOTE_ONLY)

        result, _ = _run(request, settings, session)

        assert result.error == "Failed to add log note"


class TestRunBoundary:
    def test_navigation_error_is_reported(self, steps, settings, session) -> None:
        steps["login"].side_effect = NavigationError("https://portal.example.com/", "name not resolved")

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is False
        assert "name not resolved" in result.error
        session.close.assert_called_once()

    def test_unexpected_exception_is_reported(self, steps, settings, session) -> None:
        steps["fill_ticket_form"].side_effect = RuntimeError("boom")

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is False
        assert result.error == "boom"
        assert _shot_names(steps)[-1] == "error"

    def test_browser_launch_failure(self, steps, settings, session) -> None:
        session.start.side_effect = RuntimeError("Executable doesn't exist")

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is False
        assert "Executable" in result.error
        steps["login"].assert_not_called()
        session.close.assert_called_once()

    def test_screenshots_can_be_disabled(self, steps, settings, session) -> None:
        settings.artifacts.screenshots_enabled = False

        result, _ = _run(TicketRequest(), settings, session)

        assert result.success is True
        steps["capture_screenshot"].assert_not_called()
        assert result.screenshots == []


class TestHeadless:
    def test_request_override_passed_to_session(self, steps, settings, session) -> None:
        _, factory = _run(TicketRequest(headless=False), settings, session)
        assert factory.call_args.kwargs["headless"] is False

    def test_production_is_always_headless(self, steps, monkeypatch, session) -> None:
        monkeypatch.setenv("TRPA_ENV", "production")
        from ticket_rpa.settings.config import Settings

        prod = Settings(artifacts={"screenshots_enabled": False})
        _, factory = _run(TicketRequest(headless=False), prod, session)

        assert factory.call_args.kwargs["headless"] is True

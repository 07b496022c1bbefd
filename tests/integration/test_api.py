"""API integration tests: verify request → automation → response round-trip.

Uses the FastAPI ``TestClient`` with the automation runner patched so no
browser is launched. Background jobs finish before ``TestClient`` returns,
so their status can be polled straight away.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ticket_rpa.api.app import create_app
from ticket_rpa.models.results import RunResult
from ticket_rpa.models.ticket import RunMode

pytestmark = pytest.mark.integration

RUNNER = "ticket_rpa.automation.run_ticket_automation"


def _result(success: bool = True, **kwargs) -> RunResult:
    return RunResult(success=success, completed_at=datetime.now(timezone.utc), **kwargs)


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    """Fresh TestClient; server errors are answered, not re-raised."""
    monkeypatch.delenv("TRPA_ENV", raising=False)
    app = create_app()
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ---------------------------------------------------------------------------
# Descriptor and health
# ---------------------------------------------------------------------------


class TestServiceEndpoints:
    def test_descriptor(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "OK"
        assert "POST /automate" in data["endpoints"]
        assert "version" in data

    @pytest.mark.parametrize("path", ["/health", "/healthz"])
    def test_health(self, client: TestClient, path: str) -> None:
        resp = client.get(path)
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "OK"
        datetime.fromisoformat(data["timestamp"])


# ---------------------------------------------------------------------------
# POST /automate (blocking)
# ---------------------------------------------------------------------------


class TestAutomateBlocking:
    def test_json_body_waits_for_result(self, client: TestClient) -> None:
        with patch(RUNNER, return_value=_result(ticket_id="T-5")) as run:
            resp = client.post("/automate", json={"EMAIL_SUBJECT": "Printer on fire", "EMAIL_CUSTOMER": "Acme"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["data"]["ticketId"] == "T-5"
        assert "timestamp" in data
        request = run.call_args.args[0]
        assert request.title == "Printer on fire"
        assert request.customer == "Acme"

    def test_form_body(self, client: TestClient) -> None:
        with patch(RUNNER, return_value=_result()) as run:
            resp = client.post("/automate", data={"TICKET_TITLE": "Existing", "LOG_NOTE": "Called back"})

        assert resp.status_code == 200
        request = run.call_args.args[0]
        assert request.mode is RunMode.LOG_NOTE_ONLY
        assert request.log_note == "Called back"

    def test_failed_run_reported_with_200(self, client: TestClient) -> None:
        with patch(RUNNER, return_value=_result(False, error="Login failed")):
            resp = client.post("/automate", json={})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is False
        assert data["data"]["error"] == "Login failed"

    def test_null_values_ignored(self, client: TestClient) -> None:
        with patch(RUNNER, return_value=_result()) as run:
            resp = client.post("/automate", json={"EMAIL_SUBJECT": None, "waitForResponse": None})

        assert resp.status_code == 200
        assert run.call_args.args[0].title == "Sample"

    def test_runner_exception_is_500(self, client: TestClient) -> None:
        with patch(RUNNER, side_effect=RuntimeError("browser exploded")):
            resp = client.post("/automate", json={})

        assert resp.status_code == 500
        data = resp.json()
        assert data == {"success": False, "error": "browser exploded", "timestamp": data["timestamp"]}

    def test_malformed_json_hits_global_handler(self, client: TestClient) -> None:
        with patch(RUNNER) as run:
            resp = client.post("/automate", content=b"{not json", headers={"content-type": "application/json"})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"
        run.assert_not_called()


# ---------------------------------------------------------------------------
# POST /automate (background) and GET /status
# ---------------------------------------------------------------------------


class TestAutomateBackground:
    def test_accepted_then_completed(self, client: TestClient) -> None:
        with patch(RUNNER, return_value=_result(ticket_id="T-8")):
            resp = client.post("/automate", json={"EMAIL_SUBJECT": "Async", "waitForResponse": "false"})

        assert resp.status_code == 202
        data = resp.json()
        assert data["accepted"] is True
        assert data["message"] == "Automation started"
        assert data["statusUrl"] == f"/status/{data['jobId']}"

        status = client.get(data["statusUrl"])
        assert status.status_code == 200
        body = status.json()
        assert body["jobId"] == data["jobId"]
        assert body["status"] == "completed"
        assert body["result"]["ticketId"] == "T-8"
        assert body["completedAt"] is not None
        assert body["duration"] >= 0

    def test_boolean_false_also_returns_early(self, client: TestClient) -> None:
        with patch(RUNNER, return_value=_result()):
            resp = client.post("/automate", json={"waitForResponse": False})
        assert resp.status_code == 202

    def test_background_exception_marks_job_failed(self, client: TestClient) -> None:
        with patch(RUNNER, side_effect=RuntimeError("boom")):
            resp = client.post("/automate", json={"waitForResponse": "false"})

        body = client.get(resp.json()["statusUrl"]).json()
        assert body["status"] == "failed"
        assert body["result"] == {"success": False, "error": "boom"}

    def test_unknown_job_is_404(self, client: TestClient) -> None:
        resp = client.get("/status/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Job not found", "jobId": "does-not-exist"}

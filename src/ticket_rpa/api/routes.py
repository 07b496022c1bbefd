"""API routes for ticket-rpa."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ticket_rpa import __version__
from ticket_rpa.exceptions import JobNotFoundError
from ticket_rpa.models.job import JobRecord, JobStatus
from ticket_rpa.models.ticket import TicketRequest, wants_blocking_response
from ticket_rpa.settings import get_settings
from ticket_rpa.store import build_job_store

logger = logging.getLogger(__name__)

router = APIRouter()

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/")
def service_info() -> dict[str, Any]:
    """Service descriptor listing the available endpoints."""
    return {
        "status": "OK",
        "service": "Ticket RPA",
        "version": __version__,
        "endpoints": {
            "POST /automate": "Run the portal automation with the provided parameters",
            "GET /health": "Health check endpoint",
            "GET /healthz": "Health check endpoint (for platforms)",
            "GET /status/{job_id}": "Check job status by ID",
        },
    }


@router.get("/health")
@router.get("/healthz")
def health() -> dict[str, str]:
    return {"status": "OK", "timestamp": _timestamp()}


@router.get("/status/{job_id}")
def job_status(job_id: str) -> JSONResponse:
    """Return the state of a background automation job."""
    try:
        job = build_job_store().load(job_id)
    except JobNotFoundError:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "Job not found", "jobId": job_id},
        )
    return JSONResponse(content=job.to_status_payload())


@router.post("/automate")
async def automate(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    """Run one automation with the posted key/value pairs.

    By default the request waits for the run to finish. With
    ``waitForResponse`` set to anything but ``"true"`` it is answered with
    202 and a job id to poll at ``/status/{job_id}``.
    """
    payload = await _read_payload(request)
    logger.info("Received automation request with keys: %s", ", ".join(sorted(payload)) or "<none>")

    try:
        settings = get_settings()
        ticket = TicketRequest.from_payload(payload, settings)

        if not wants_blocking_response(payload):
            job = JobRecord()
            build_job_store().save(job)
            background_tasks.add_task(_run_job, job.id, ticket)
            logger.info("Automation job %s accepted", job.id)
            return JSONResponse(
                status_code=202,
                content={
                    "accepted": True,
                    "message": "Automation started",
                    "jobId": job.id,
                    "statusUrl": f"/status/{job.id}",
                    "timestamp": _timestamp(),
                },
            )

        from ticket_rpa.automation import run_ticket_automation

        # Playwright's sync API must not run on the event loop thread.
        result = await run_in_threadpool(run_ticket_automation, ticket, settings)
        logger.info("Automation completed: success=%s ticket_id=%s", result.success, result.ticket_id)
        return JSONResponse(
            content={"success": result.success, "data": result.to_dict(), "timestamp": _timestamp()},
        )
    except Exception as exc:
        logger.exception("Automation request failed")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc), "timestamp": _timestamp()},
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _read_payload(request: Request) -> dict[str, Any]:
    """Parse a JSON or form-encoded body into a flat dict.

    An empty body is an empty payload. A JSON body that is not an object is
    ignored. Malformed JSON propagates to the app-wide error handler.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in _FORM_CONTENT_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body.strip():
        return {}
    data = await request.json()
    if not isinstance(data, dict):
        logger.debug("Ignoring non-object JSON body (%s)", type(data).__name__)
        return {}
    return data


def _run_job(job_id: str, ticket: TicketRequest) -> None:
    """Background task that executes one automation and records the outcome."""
    from ticket_rpa.automation import run_ticket_automation

    store = build_job_store()
    job = store.load(job_id)
    try:
        result = run_ticket_automation(ticket, get_settings())
        job.finish(JobStatus.COMPLETED, result.to_dict())
        logger.info("Automation job %s completed: success=%s", job_id, result.success)
    except Exception as exc:
        logger.exception("Automation job %s failed", job_id)
        job.finish(JobStatus.FAILED, {"success": False, "error": str(exc)})
    store.save(job)

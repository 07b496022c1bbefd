"""Job records for asynchronous ``POST /automate`` calls."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """Lifecycle of a background automation job."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRecord(BaseModel):
    """A background automation run that callers poll by id."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    status: JobStatus = JobStatus.RUNNING
    created_at: datetime = Field(default_factory=_utcnow)
    completed_at: datetime | None = None
    result: dict[str, Any] | None = None

    @property
    def duration_sec(self) -> float | None:
        """Seconds between creation and completion, ``None`` while running."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.created_at).total_seconds()

    def finish(self, status: JobStatus, result: dict[str, Any]) -> None:
        """Mark the job terminal with its result."""
        self.status = status
        self.result = result
        self.completed_at = _utcnow()

    def to_status_payload(self) -> dict[str, Any]:
        """Render the ``GET /status/{job_id}`` body."""
        return {
            "jobId": self.id,
            "status": self.status.value,
            "result": self.result,
            "createdAt": self.created_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "duration": self.duration_sec,
        }

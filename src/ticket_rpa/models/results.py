"""Result models for an automation run.

Lightweight data classes capturing the outcome of one browser session:
success flag, captured ticket id, per-step outcomes and screenshots.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ticket_rpa.models.ticket import RunMode


@dataclass
class StepOutcome:
    """Outcome of a single portal step."""

    name: str
    success: bool
    fatal: bool = True
    duration_sec: float = 0.0
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "success": self.success,
            "fatal": self.fatal,
            "duration_sec": round(self.duration_sec, 3),
            "detail": self.detail,
        }


@dataclass
class RunResult:
    """Complete outcome from one automation run."""

    success: bool = False
    mode: RunMode = RunMode.CREATE
    ticket_id: str | None = None
    error: str = ""
    title: str = ""
    steps: list[StepOutcome] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    @property
    def duration_sec(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict suitable for JSON output.

        ``error`` is only present on failure, mirroring the
        ``{"success": false, "error": ...}`` shape callers key on.
        """
        data: dict[str, Any] = {
            "success": self.success,
            "ticketId": self.ticket_id,
            "mode": self.mode.value,
            "title": self.title,
            "steps": [s.to_dict() for s in self.steps],
            "screenshots": self.screenshots,
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "duration": self.duration_sec,
        }
        if not self.success:
            data["error"] = self.error
        return data

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

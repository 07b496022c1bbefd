"""Ticket RPA exception hierarchy."""

from __future__ import annotations


class TicketRPAError(Exception):
    """Base exception for all ticket-rpa errors."""


class NavigationError(TicketRPAError):
    """Raised when the portal cannot be reached.

    Attributes:
        url: The URL that failed to load.
        reason: Short human-readable cause.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed: {reason}")


class StepFailedError(TicketRPAError):
    """Raised when a mandatory automation step could not be completed.

    Attributes:
        step: Name of the step (``login``, ``open_project``, ...).
    """

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(message)


class LoginError(StepFailedError):
    """Raised when the portal login did not succeed."""

    def __init__(self, message: str = "Login failed") -> None:
        super().__init__("login", message)


class TicketNotFoundError(StepFailedError):
    """Raised when no kanban card matches the requested ticket title."""

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__("open_ticket", f"Ticket not found: {title}")


class JobNotFoundError(TicketRPAError):
    """Raised when a job id is unknown to the job store."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")

"""Ticket request model: the per-run configuration bag.

Workflow tools post free-form key/value pairs using the environment-variable
names of the legacy shell contract (``EMAIL_SUBJECT``, ``TICKET_TITLE``,
...). :meth:`TicketRequest.from_payload` maps those keys onto a request-scoped
model so concurrent runs never share mutable state.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from ticket_rpa.settings.config import Settings

logger = logging.getLogger(__name__)

# Payload keys understood by ``from_payload``.
EMAIL_SUBJECT = "EMAIL_SUBJECT"
EMAIL_CUSTOMER = "EMAIL_CUSTOMER"
EMAIL_BODY = "EMAIL_BODY"
TICKET_TITLE = "TICKET_TITLE"
LOG_NOTE = "LOG_NOTE"
PORTAL_EMAIL = "EOXS_EMAIL"
PORTAL_PASSWORD = "EOXS_PASSWORD"
HEADLESS = "HEADLESS"
WAIT_FOR_RESPONSE = "waitForResponse"

KNOWN_KEYS = frozenset(
    {
        EMAIL_SUBJECT,
        EMAIL_CUSTOMER,
        EMAIL_BODY,
        TICKET_TITLE,
        LOG_NOTE,
        PORTAL_EMAIL,
        PORTAL_PASSWORD,
        HEADLESS,
        WAIT_FOR_RESPONSE,
    }
)


class RunMode(str, Enum):
    """Which UI flow a run drives."""

    CREATE = "create"
    LOG_NOTE_ONLY = "log_note_only"


class Credentials(BaseModel):
    """Portal login credentials."""

    email: str = ""
    password: str = Field("", repr=False)

    @property
    def is_placeholder(self) -> bool:
        """True when credentials are missing or still the documented placeholders."""
        return (
            not self.email
            or not self.password
            or self.email == "your-email@example.com"
            or self.password == "your-password"
        )


class TicketRequest(BaseModel):
    """Everything one automation run needs to know about the ticket."""

    credentials: Credentials = Field(default_factory=Credentials)
    title: str = "Sample"
    customer: str = ""
    assigned_to: str = ""
    description: str = ""
    log_note: str = ""
    mode: RunMode = RunMode.CREATE
    headless: bool | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], settings: Settings) -> "TicketRequest":
        """Build a request from free-form key/value pairs.

        ``None`` values are ignored and everything else is stringified, so
        numbers and booleans posted by workflow tools behave like env vars.

        Resolution order (later wins): settings defaults, ``EMAIL_SUBJECT``
        (title and description), ``EMAIL_CUSTOMER``, ``EMAIL_BODY``
        (description and log note), ``TICKET_TITLE``, ``LOG_NOTE`` falling
        back to ``EMAIL_SUBJECT`` (log note).

        ``HEADLESS`` is on only for ``"true"`` (any case); any other value
        turns it off.

        Args:
            payload: Request body or CLI-collected values.
            settings: Resolved settings supplying defaults.

        Returns:
            A populated ``TicketRequest``.
        """
        values = normalize_payload(payload)

        unknown = sorted(set(values) - KNOWN_KEYS)
        if unknown:
            logger.debug("Ignoring unknown payload keys: %s", ", ".join(unknown))

        defaults = settings.ticket
        title = defaults.title
        customer = defaults.customer
        description = defaults.description
        log_note = defaults.log_note

        subject = values.get(EMAIL_SUBJECT)
        if subject:
            title = subject
        if values.get(EMAIL_CUSTOMER):
            customer = values[EMAIL_CUSTOMER]
        if values.get(EMAIL_BODY):
            description = values[EMAIL_BODY]
            log_note = values[EMAIL_BODY]
        if values.get(TICKET_TITLE):
            title = values[TICKET_TITLE]
        if values.get(LOG_NOTE) or subject:
            log_note = values.get(LOG_NOTE) or subject
        # The email subject doubles as the ticket description.
        if subject:
            description = subject

        explicit_note = values.get(LOG_NOTE) or subject
        mode = RunMode.LOG_NOTE_ONLY if values.get(TICKET_TITLE) and explicit_note else RunMode.CREATE

        credentials = Credentials(
            email=values.get(PORTAL_EMAIL) or settings.portal.email,
            password=values.get(PORTAL_PASSWORD) or settings.portal.password,
        )

        headless: bool | None = None
        if HEADLESS in values:
            headless = values[HEADLESS].strip().lower() == "true"

        request = cls(
            credentials=credentials,
            title=title,
            customer=customer,
            assigned_to=settings.portal.default_assignee,
            description=description,
            log_note=log_note,
            mode=mode,
            headless=headless,
        )
        logger.info(
            "Resolved ticket request: mode=%s title=%r customer=%r assigned_to=%r log_note=%r",
            request.mode.value,
            request.title,
            request.customer,
            request.assigned_to,
            request.log_note[:80],
        )
        return request


def normalize_payload(payload: Mapping[str, Any]) -> dict[str, str]:
    """Drop ``None`` values and stringify the rest.

    Booleans are lower-cased so ``True`` becomes ``"true"`` like a JSON literal.
    """
    values: dict[str, str] = {}
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, bool):
            values[str(key)] = "true" if value else "false"
        else:
            values[str(key)] = str(value)
    return values


def wants_blocking_response(payload: Mapping[str, Any]) -> bool:
    """Return True unless the caller asked to be answered before the run ends.

    Only the exact string ``"true"`` (the default) keeps the request waiting.
    """
    values = normalize_payload(payload)
    return values.get(WAIT_FOR_RESPONSE, "true") == "true"

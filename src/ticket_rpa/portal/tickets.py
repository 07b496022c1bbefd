"""Ticket steps on a project's kanban board: create, submit, open and edit.

Every step returns a boolean for expected UI misses; the automation runner
decides which misses are fatal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Sequence

from playwright.sync_api import Error as PlaywrightError

from ticket_rpa.browser.actions import (
    DEFAULT_PROBE_TIMEOUT_MS,
    SHORT_PAUSE_MS,
    clear_and_type,
    click_first,
    click_xpath_fallback,
    describe_elements,
    fill_first,
    first_visible,
    safe_click,
    tag_name,
    text_of,
    visible_matches,
)
from ticket_rpa.portal import selectors as sel
from ticket_rpa.portal.matching import matches_assignee, matches_customer, title_matches

if TYPE_CHECKING:
    from playwright.sync_api import Locator, Page

    from ticket_rpa.models.ticket import TicketRequest

logger = logging.getLogger(__name__)

_FORM_WAIT_MS = 5_000
_TYPEAHEAD_WAIT_MS = 1_500
_SUBMIT_SETTLE_MS = 3_000
_DETAIL_WAIT_MS = 5_000


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def click_create(page: Page, *, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> bool:
    """Click the board's Create button and wait for the quick-create form."""
    if click_first(page, sel.CREATE_BUTTON, timeout_ms=timeout_ms, label="Create button") is None:
        if not click_xpath_fallback(page, sel.CREATE_XPATH, label="Create button"):
            logger.error("Could not find the Create button")
            return False

    if first_visible(page, sel.FORM_VIEW, timeout_ms=_FORM_WAIT_MS) is None:
        logger.warning("No form view appeared after Create, continuing")
    return True


def fill_ticket_form(
    page: Page,
    ticket: TicketRequest,
    *,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    type_delay_ms: int = 50,
) -> bool:
    """Fill title, optional description and assignee on the create form.

    A missing description or assignee field is only logged. Returns False
    when the browser raised while filling.
    """
    try:
        describe_elements(page, "input, textarea, select")

        filled = fill_first(
            page, sel.TITLE_INPUT, ticket.title, timeout_ms=timeout_ms, type_delay_ms=type_delay_ms, label="title field"
        )
        if filled is None:
            candidates = visible_matches(page, sel.TITLE_FALLBACK)
            if candidates:
                clear_and_type(candidates[0], ticket.title, delay_ms=type_delay_ms)
                logger.info("Filled title via first text input")
            else:
                logger.warning("No title field found")

        if ticket.description:
            filled = fill_first(
                page,
                sel.DESCRIPTION_INPUT,
                ticket.description,
                timeout_ms=0,
                type_delay_ms=type_delay_ms,
                label="description field",
            )
            if filled is None:
                logger.info("No description field on the create form")

        if ticket.assigned_to:
            _set_assignee(page, ticket.assigned_to, timeout_ms=timeout_ms, type_delay_ms=type_delay_ms)
    except PlaywrightError as exc:
        logger.error("Error filling ticket form: %s", exc)
        return False
    return True


def _set_assignee(page: Page, assignee: str, *, timeout_ms: int, type_delay_ms: int) -> bool:
    match = first_visible(page, sel.ASSIGNEE_FIELD, timeout_ms=timeout_ms)
    if match is None:
        logger.warning("No assignee field found")
        return False
    selector, field = match
    logger.info("Assignee field: %s", selector)

    if tag_name(field) == "select":
        return _select_by_label(field, lambda text: matches_assignee(text, assignee))

    return _choose_from_dropdown(
        page,
        field,
        assignee,
        option_selectors=sel.assignee_options(assignee),
        typed_selectors=sel.assignee_options(assignee),
        predicate=lambda text: matches_assignee(text, assignee),
        type_delay_ms=type_delay_ms,
        label="assignee",
    )


def submit_ticket(page: Page, *, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> tuple[bool, str | None]:
    """Click Add/Save/Create/Submit and read the new ticket id when shown.

    Returns:
        ``(submitted, ticket_id)``; the portal usually shows no id, so
        ``ticket_id`` is often ``None``.
    """
    if click_first(page, sel.SUBMIT_BUTTON, timeout_ms=timeout_ms, label="submit button") is None:
        if not click_xpath_fallback(page, sel.SUBMIT_XPATH, label="submit button"):
            logger.error("Could not find a submit button")
            return False, None
    page.wait_for_timeout(_SUBMIT_SETTLE_MS)

    ticket_id: str | None = None
    id_match = first_visible(page, sel.TICKET_ID, timeout_ms=0)
    if id_match is not None:
        ticket_id = text_of(id_match[1]) or None
    logger.info("Ticket submitted (id=%s)", ticket_id)
    return True, ticket_id


def close_popup_with_discard(page: Page, *, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> bool:
    """Dismiss a leftover dialog via Discard/Cancel/Close, else Escape."""
    if click_first(page, sel.DISCARD_BUTTON, timeout_ms=timeout_ms, label="discard button") is not None:
        page.wait_for_timeout(SHORT_PAUSE_MS)
        return True
    logger.info("No discard button, pressing Escape")
    page.keyboard.press("Escape")
    page.wait_for_timeout(SHORT_PAUSE_MS)
    return False


# ---------------------------------------------------------------------------
# Open
# ---------------------------------------------------------------------------


def open_created_ticket(page: Page, title: str, *, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> bool:
    """Open the ticket just created, falling back to the most recent card."""
    if not _click_card(page, title):
        logger.warning("No card shows %r, opening the most recent card", title)
        if click_first(page, sel.RECENT_CARD, timeout_ms=timeout_ms, label="recent card") is None:
            logger.error("No kanban card to open")
            return False

    page.wait_for_timeout(_DETAIL_WAIT_MS)
    detail = first_visible(page, sel.DETAIL_VIEW, timeout_ms=timeout_ms)
    if detail is None:
        logger.warning("Detail view not detected, waiting for network idle")
        try:
            page.wait_for_load_state("networkidle", timeout=10_000)
        except PlaywrightError as exc:
            logger.debug("Network idle wait ended: %s", exc)
    else:
        logger.info("Ticket detail view open (%s)", detail[0])
    return True


def open_ticket_by_title(page: Page, title: str) -> bool:
    """Open an existing ticket whose kanban card contains *title* (case-insensitive)."""
    logger.info("Looking for ticket %r", title)
    describe_elements(page, sel.KANBAN_CARDS)

    card = _find_card(page, title)
    if card is None:
        logger.error("Ticket not found: %s", title)
        return False
    if not safe_click(card):
        return False
    page.wait_for_timeout(_SUBMIT_SETTLE_MS)

    if first_visible(page, (".o_form_view",), timeout_ms=0) is None:
        logger.info("Detail view not open yet, clicking inside the card")
        inner = card.locator(sel.CARD_INNER_LINK).first
        safe_click(inner)
        page.wait_for_timeout(_SUBMIT_SETTLE_MS)
    return True


def _find_card(page: Page, title: str) -> Locator | None:
    for selector in sel.ticket_cards(title):
        for candidate in visible_matches(page, selector):
            if title_matches(text_of(candidate), title):
                logger.info("Matched ticket card via %s", selector)
                return candidate
    return None


def _click_card(page: Page, title: str) -> bool:
    card = _find_card(page, title)
    return card is not None and safe_click(card)


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------


def edit_ticket_details(
    page: Page,
    ticket: TicketRequest,
    edit_description: str,
    *,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    type_delay_ms: int = 50,
) -> bool:
    """Set the customer and description on an open ticket, then save.

    Returns:
        True if the Save button was clicked.
    """
    if click_first(page, sel.EDIT_BUTTON, timeout_ms=timeout_ms, label="Edit button") is None:
        logger.info("No Edit button, assuming the form is already editable")
    page.wait_for_timeout(SHORT_PAUSE_MS)

    try:
        if ticket.customer:
            _set_customer(page, ticket.customer, timeout_ms=timeout_ms, type_delay_ms=type_delay_ms)

        if edit_description:
            if click_first(page, (sel.DESCRIPTION_TAB,), timeout_ms=0, label="Description tab") is not None:
                page.wait_for_timeout(SHORT_PAUSE_MS)
            filled = fill_first(
                page,
                sel.DESCRIPTION_EDITOR,
                edit_description,
                timeout_ms=timeout_ms,
                type_delay_ms=type_delay_ms,
                label="description editor",
            )
            if filled is None:
                logger.warning("No description editor found")
    except PlaywrightError as exc:
        logger.warning("Error editing ticket details: %s", exc)

    if click_first(page, sel.SAVE_BUTTON, timeout_ms=timeout_ms, label="Save button") is None:
        logger.warning("No Save button found")
        return False
    page.wait_for_timeout(2 * SHORT_PAUSE_MS)
    return True


def _set_customer(page: Page, customer: str, *, timeout_ms: int, type_delay_ms: int) -> bool:
    match = first_visible(page, sel.CUSTOMER_FIELD, timeout_ms=timeout_ms)
    if match is None:
        logger.warning("No customer field found")
        return False
    selector, field = match
    logger.info("Customer field: %s", selector)

    if tag_name(field) == "select":
        return _select_by_label(field, lambda text: matches_customer(text, customer))

    return _choose_from_dropdown(
        page,
        field,
        customer,
        option_selectors=sel.customer_options(customer),
        typed_selectors=(sel.AUTOCOMPLETE_OPTIONS,),
        predicate=lambda text: matches_customer(text, customer),
        type_delay_ms=type_delay_ms,
        label="customer",
    )


# ---------------------------------------------------------------------------
# Dropdown helpers
# ---------------------------------------------------------------------------


def _select_by_label(field: Locator, predicate: Callable[[str], bool]) -> bool:
    for label in field.locator("option").all_text_contents():
        if predicate(label):
            field.select_option(label=label.strip())
            logger.info("Selected option %r", label.strip())
            return True
    logger.warning("No matching option in select")
    return False


def _click_matching_option(page: Page, selectors: Sequence[str], predicate: Callable[[str], bool]) -> bool:
    for selector in selectors:
        for option in visible_matches(page, selector):
            text = text_of(option)
            if not predicate(text):
                logger.debug("Skipping option %r", text)
                continue
            if safe_click(option):
                logger.info("Selected option %r via %s", text, selector)
                return True
    return False


def _choose_from_dropdown(
    page: Page,
    field: Locator,
    value: str,
    *,
    option_selectors: Sequence[str],
    typed_selectors: Sequence[str],
    predicate: Callable[[str], bool],
    type_delay_ms: int,
    label: str,
) -> bool:
    """Pick *value* from an autocomplete widget.

    Order: open the widget and click a verified option; type the value and
    click a verified suggestion; finally accept the keyboard's first
    suggestion, verified when the highlighted item is readable.
    """
    safe_click(field)
    page.wait_for_timeout(SHORT_PAUSE_MS)
    if _click_matching_option(page, option_selectors, predicate):
        return True

    target = field if tag_name(field) in ("input", "textarea") else field.locator("input").first
    clear_and_type(target, value, delay_ms=type_delay_ms)
    page.wait_for_timeout(_TYPEAHEAD_WAIT_MS)
    if _click_matching_option(page, typed_selectors, predicate):
        return True

    page.keyboard.press("ArrowDown")
    highlighted = first_visible(page, sel.HIGHLIGHTED_OPTION, timeout_ms=0)
    verified = highlighted is not None and predicate(text_of(highlighted[1]))
    page.keyboard.press("Enter")
    if verified:
        logger.info("Set %s via keyboard (verified)", label)
    else:
        logger.warning("Set %s via keyboard (unverified)", label)
    return verified

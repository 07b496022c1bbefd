"""Predicates that verify dropdown options and buttons before they are clicked.

The portal's autocomplete lists mix partners, contacts ("Company, Contact")
and users, and the chatter shows both a "Log note" toggle and the "Log"
submit button, so a selector match alone is not enough.
"""

from __future__ import annotations


def matches_assignee(option_text: str, assignee: str) -> bool:
    """Return True if a user option shows the assignee's full name, surname or first name.

    >>> matches_assignee("Sahaj Katiyar", "Sahaj Katiyar")
    True
    >>> matches_assignee("Katiyar, S.", "Sahaj Katiyar")
    True
    >>> matches_assignee("Administrator", "Sahaj Katiyar")
    False
    """
    text = option_text.strip()
    name = assignee.strip()
    if not text or not name:
        return False
    if name in text:
        return True
    parts = name.split()
    return any(part in text for part in (parts[-1], parts[0]))


def matches_customer(option_text: str, customer: str) -> bool:
    """Return True if an option is the customer itself rather than one of its contacts.

    >>> matches_customer("Discount Pipe & Steel", "Discount Pipe & Steel")
    True
    >>> matches_customer("Discount Pipe & Steel, AMY", "Discount Pipe & Steel")
    False
    """
    text = option_text.strip()
    name = customer.strip()
    if not text or not name:
        return False
    if text == name:
        return True
    return name in text and "," not in text


def is_log_submit_button(text: str, css_class: str = "", selector: str = "") -> bool:
    """Return True for the chatter's "Log" submit button, not the "Log note" toggle."""
    label = text.strip().lower()
    if label == "log":
        return True
    if "log" in label and "note" not in label:
        return True
    if "send" in css_class or "submit" in css_class:
        return True
    return "Log" in selector and "note" not in selector.lower()


def title_matches(card_text: str, title: str) -> bool:
    """Case-insensitive "card shows this ticket title" check."""
    if not title.strip():
        return False
    return title.strip().lower() in card_text.lower()

"""Ticket RPA: browser automation that files helpdesk tickets and log notes."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("ticket-rpa")
except Exception:
    __version__ = "0.0.0"

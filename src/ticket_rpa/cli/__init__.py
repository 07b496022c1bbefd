"""Command-line interface (``ticket-rpa``)."""

"""Browser automation modules (Playwright sync API).

``session`` owns the Chromium lifecycle, ``navigation`` loads pages with
wait-strategy fallback, and ``actions`` provides the selector fallback chain
primitives the portal steps are built from.
"""

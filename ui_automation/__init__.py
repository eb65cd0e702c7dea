"""Resilient Playwright UI automation: execution contexts, waits and actions."""

__version__ = "1.0.0"

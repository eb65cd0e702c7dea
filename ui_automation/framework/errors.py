"""
================================================================================
UI Automation Errors
================================================================================

Exception taxonomy shared by the lifecycle and interaction layers.

    UIAutomationError
        SessionInitError       engine/browser/page construction failed
        WaitTimeoutError       a wait condition was not met in time
        InteractionError       click/type failed after exhausting attempts
        ElementNotFoundError   a read could not resolve its target
        ContextClosedError     operation issued against a closed context
        ThreadAffinityError    context torn down from a thread that does not own it
        ConfigurationError     configuration file could not be parsed

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Optional


class UIAutomationError(Exception):
    """Base class for all framework errors."""
    pass


class SessionInitError(UIAutomationError):
    """Raised when an execution context cannot be constructed."""

    def __init__(
        self,
        message: str,
        unit_id: Any = None,
        variant: Optional[str] = None,
    ):
        super().__init__(message)
        self.unit_id = unit_id
        self.variant = variant


class WaitTimeoutError(UIAutomationError, TimeoutError):
    """Raised when a wait condition is not met within its timeout."""

    def __init__(self, target: str, condition: str, timeout_ms: float):
        self.target = target
        self.condition = condition
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for '{target}' "
            f"to be {condition}"
        )


class InteractionError(UIAutomationError):
    """
    Raised when an action ultimately fails.

    The final underlying error is kept untouched in ``cause`` (and chained
    as ``__cause__``) so callers see the true reason, e.g. an element
    obscured by an overlay or detached mid-click.
    """

    def __init__(
        self,
        selector: str,
        action: str,
        cause: BaseException,
        attempts: int = 1,
    ):
        self.selector = selector
        self.action = action
        self.cause = cause
        self.attempts = attempts
        super().__init__(
            f"{action} on '{selector}' failed after {attempts} "
            f"attempt(s): {cause}"
        )


class ElementNotFoundError(UIAutomationError):
    """Raised when a read cannot locate its target element."""

    def __init__(self, selector: str, timeout_ms: Optional[float] = None):
        self.selector = selector
        self.timeout_ms = timeout_ms
        detail = f" within {timeout_ms}ms" if timeout_ms is not None else ""
        super().__init__(f"Element not found: '{selector}'{detail}")


class ContextClosedError(UIAutomationError):
    """Raised when an operation runs against a closed page or browser."""
    pass


class ThreadAffinityError(UIAutomationError):
    """
    Raised when a context is closed from a thread other than its owner.

    Playwright's sync API only works on the thread that started the
    driver, so nothing is closed and the context stays registered.
    """

    def __init__(self, unit_id, owner: str, caller: str):
        self.unit_id = unit_id
        self.owner = owner
        self.caller = caller
        super().__init__(
            f"Context for unit {unit_id!r} is owned by thread '{owner}' "
            f"and cannot be closed from thread '{caller}'"
        )


class ConfigurationError(UIAutomationError):
    """Raised when configuration loading or access fails."""
    pass


__all__ = [
    "UIAutomationError",
    "SessionInitError",
    "WaitTimeoutError",
    "InteractionError",
    "ElementNotFoundError",
    "ContextClosedError",
    "ThreadAffinityError",
    "ConfigurationError",
]

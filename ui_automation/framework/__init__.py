"""
================================================================================
UI Automation Framework
================================================================================

Playwright-based core for reliable browser-driven scenarios.

Components:
    - context_registry: per-unit browser lifecycle (lazy open, safe teardown)
    - execution_context: the (engine, browser, page) triple
    - waits: deterministic wait primitives
    - element_actions: resilient click/type/read/visibility/navigate
    - retry: bounded action retry policy
    - config_loader: YAML + environment configuration
    - errors: exception taxonomy

Author: Automation Team
License: MIT
================================================================================
"""

from .config_loader import (
    BrowserSettings,
    BrowserVariant,
    ConfigLoader,
    load_browser_settings,
    load_retry_policy,
)
from .context_registry import ExecutionContextRegistry, current_unit_id
from .element_actions import ElementActions, Visibility
from .errors import (
    ConfigurationError,
    ContextClosedError,
    ElementNotFoundError,
    InteractionError,
    SessionInitError,
    ThreadAffinityError,
    UIAutomationError,
    WaitTimeoutError,
)
from .execution_context import ExecutionContext
from .logging_setup import init_logger
from .retry import RetryPolicy, retry
from .waits import ElementState, PageState, UrlContains

__all__ = [
    "BrowserSettings",
    "BrowserVariant",
    "ConfigLoader",
    "ConfigurationError",
    "ContextClosedError",
    "ElementActions",
    "ElementNotFoundError",
    "ElementState",
    "ExecutionContext",
    "ExecutionContextRegistry",
    "InteractionError",
    "PageState",
    "RetryPolicy",
    "SessionInitError",
    "ThreadAffinityError",
    "UIAutomationError",
    "UrlContains",
    "Visibility",
    "WaitTimeoutError",
    "current_unit_id",
    "init_logger",
    "load_browser_settings",
    "load_retry_policy",
    "retry",
]

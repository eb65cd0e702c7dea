# ================================================================================
# Element Actions Module
# ================================================================================
#
# Resilient user actions over a Playwright page: deterministic waits first,
# then a bounded retry around the interaction itself.
#
# Failure policy:
#   - click, type, read_text, navigate fail loudly with framework errors
#   - is_visible never blocks and never raises; any failure reads as False
#
# Screens compose an ElementActions instance instead of inheriting from a
# base page:
#
#     actions = ElementActions(page)
#     actions.type("[data-test='username']", "standard_user")
#     actions.click("[data-test='login-button']")
#
# ================================================================================

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional

import allure
from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from . import waits
from .config_loader import (
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    DEFAULT_TIMEOUT_MS,
    ConfigLoader,
    load_browser_settings,
    load_retry_policy,
)
from .errors import (
    ContextClosedError,
    ElementNotFoundError,
    InteractionError,
    WaitTimeoutError,
)
from .retry import RetryPolicy, retry


class Visibility(str, Enum):
    """Outcome of a non-blocking visibility check."""

    VISIBLE = "visible"
    NOT_VISIBLE = "not_visible"
    ERROR = "error"


class ElementActions:
    """
    Resilient element interactions for one page.

    Wraps Playwright's locator operations with explicit waits, bounded retry
    on clicks, Allure steps and logging.

    Example:
        actions = ElementActions(page)
        actions.navigate("https://example.test/login")
        actions.click("#submit")
    """

    def __init__(
        self,
        page: Page,
        default_timeout_ms: float = DEFAULT_TIMEOUT_MS,
        retry_policy: Optional[RetryPolicy] = None,
        navigation_timeout_ms: float = DEFAULT_NAVIGATION_TIMEOUT_MS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize ElementActions with a Playwright page.

        Args:
            page: Playwright Page object
            default_timeout_ms: Default timeout for waits and actions
            retry_policy: Attempt budget for clicks (3 x 200ms by default)
            navigation_timeout_ms: Timeout for page.goto
            sleep: Backoff delay function, injectable for tests
        """
        self.page = page
        self.default_timeout_ms = default_timeout_ms
        self.retry_policy = retry_policy or RetryPolicy()
        self.navigation_timeout_ms = navigation_timeout_ms
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        page: Page,
        config: Optional[ConfigLoader] = None,
    ) -> "ElementActions":
        """Build an instance using timeouts and retry policy from configuration."""
        settings = load_browser_settings(config)
        return cls(
            page,
            default_timeout_ms=settings.timeout_ms,
            retry_policy=load_retry_policy(config),
            navigation_timeout_ms=settings.navigation_timeout_ms,
        )

    @allure.step("Click element: {selector}")
    def click(self, selector: str, timeout_ms: Optional[float] = None) -> None:
        """
        Click an element, retrying transient failures.

        Waits for the element to be visible and attached, then attempts the
        click up to ``retry_policy.max_attempts`` times with a fixed backoff.

        Raises:
            WaitTimeoutError: The element never became visible/attached
            InteractionError: Every click attempt failed; ``cause`` holds
                the last underlying error
            ContextClosedError: The page or browser was closed
        """
        timeout_ms = self._timeout(timeout_ms)
        logger.info(f"Clicking element: {selector}")

        waits.wait_for_visible(self.page, selector, timeout_ms)
        waits.wait_for_attached(self.page, selector, timeout_ms)
        locator = self._locator(selector)

        def attempt_click() -> None:
            self._guard_closed(lambda: locator.click(timeout=timeout_ms), selector, "click")

        try:
            retry(
                attempt_click,
                self.retry_policy,
                sleep=self._sleep,
                description=f"click '{selector}'",
            )
        except ContextClosedError:
            raise
        except Exception as e:
            raise InteractionError(
                selector, "click", e, attempts=self.retry_policy.max_attempts
            ) from e

        logger.debug(f"Successfully clicked: {selector}")

    @allure.step("Fill input: {selector}")
    def type(self, selector: str, text: str, timeout_ms: Optional[float] = None) -> None:
        """
        Replace the content of an input in one atomic fill.

        Existing content is cleared first, so the field ends up holding
        exactly ``text``. No per-key events are dispatched; use
        ``type_keystrokes`` when the page listens for them.
        """
        timeout_ms = self._timeout(timeout_ms)
        logger.info(f"Filling input: {selector} with '{text[:50]}'")

        waits.wait_for_visible(self.page, selector, timeout_ms)
        waits.wait_for_attached(self.page, selector, timeout_ms)
        locator = self._locator(selector)

        def clear_and_fill() -> None:
            locator.fill("", timeout=timeout_ms)
            locator.fill(text, timeout=timeout_ms)

        self._run_once(clear_and_fill, selector, "type")
        logger.debug(f"Successfully filled: {selector}")

    @allure.step("Type keystrokes: {selector}")
    def type_keystrokes(
        self,
        selector: str,
        text: str,
        delay_ms: float = 50,
        timeout_ms: Optional[float] = None,
    ) -> None:
        """
        Type text key by key, firing keydown/keypress/keyup for each character.

        Appends to the current content; call ``type(selector, "")`` first to
        start from an empty field.
        """
        timeout_ms = self._timeout(timeout_ms)
        logger.info(f"Typing into: {selector}")

        waits.wait_for_visible(self.page, selector, timeout_ms)
        locator = self._locator(selector)
        self._run_once(
            lambda: locator.press_sequentially(text, delay=delay_ms, timeout=timeout_ms),
            selector,
            "type_keystrokes",
        )

    @allure.step("Get text: {selector}")
    def read_text(self, selector: str, timeout_ms: Optional[float] = None) -> str:
        """
        Return the rendered text of a visible element.

        Raises:
            ElementNotFoundError: The element did not become visible in time,
                or detached before its text could be read
        """
        timeout_ms = self._timeout(timeout_ms)
        try:
            waits.wait_for_visible(self.page, selector, timeout_ms)
        except WaitTimeoutError as e:
            raise ElementNotFoundError(selector, timeout_ms) from e

        text = self._read(
            lambda: self._locator(selector).inner_text(timeout=timeout_ms),
            selector,
            "read_text",
            timeout_ms,
        )
        logger.debug(f"Got text from {selector}: '{text}'")
        return text

    def input_value(self, selector: str, timeout_ms: Optional[float] = None) -> str:
        """Return the current value of an input element."""
        timeout_ms = self._timeout(timeout_ms)
        try:
            waits.wait_for_attached(self.page, selector, timeout_ms)
        except WaitTimeoutError as e:
            raise ElementNotFoundError(selector, timeout_ms) from e
        return self._read(
            lambda: self._locator(selector).input_value(timeout=timeout_ms),
            selector,
            "input_value",
            timeout_ms,
        )

    def check_visibility(self, selector: str) -> Visibility:
        """
        Check visibility right now, without waiting.

        Lookup failures of any kind (bad selector, detached frame, closed
        page) are reported as ``Visibility.ERROR`` instead of raised.
        """
        try:
            visible = self._locator(selector).is_visible()
        except Exception as e:
            logger.debug(f"Visibility check failed for {selector}: {e}")
            return Visibility.ERROR
        return Visibility.VISIBLE if visible else Visibility.NOT_VISIBLE

    def is_visible(self, selector: str) -> bool:
        """Return True only when the element is visible at this instant."""
        return self.check_visibility(selector) is Visibility.VISIBLE

    @allure.step("Wait for element: {selector} ({state})")
    def wait_for(
        self,
        selector: str,
        state: waits.ElementState = waits.ElementState.VISIBLE,
        timeout_ms: Optional[float] = None,
    ) -> None:
        """Wait for an element to reach ``state``."""
        waits.wait_for_element(self.page, selector, state, self._timeout(timeout_ms))

    @allure.step("Navigate to: {url}")
    def navigate(self, url: str) -> None:
        """
        Open ``url`` and wait for the load event.

        Raises:
            WaitTimeoutError: Navigation or load did not finish in time
            InteractionError: Navigation failed (DNS, connection, ...)
        """
        logger.info(f"Navigating to: {url}")
        timeout_ms = self.navigation_timeout_ms
        with waits.translate_errors(self.page, url, "navigated", timeout_ms):
            try:
                self.page.goto(url, timeout=timeout_ms)
            except PlaywrightError as e:
                if isinstance(e, PlaywrightTimeoutError) or waits.is_closed_error(e, self.page):
                    raise
                raise InteractionError(url, "navigate", e) from e
        waits.wait_for_page_load(self.page, timeout_ms)

    @property
    def current_url(self) -> str:
        return self.page.url

    # ---------------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------------

    def _timeout(self, timeout_ms: Optional[float]) -> float:
        return self.default_timeout_ms if timeout_ms is None else timeout_ms

    def _locator(self, selector: str) -> Locator:
        return self.page.locator(selector)

    def _guard_closed(self, operation: Callable, selector: str, action: str):
        """Run ``operation``, turning closed-handle failures into ContextClosedError."""
        try:
            return operation()
        except PlaywrightError as e:
            if waits.is_closed_error(e, self.page):
                raise ContextClosedError(
                    f"{action} on '{selector}' issued against a closed context"
                ) from e
            raise

    def _read(self, operation: Callable, selector: str, action: str, timeout_ms: float):
        """Run a read; a target that can no longer be resolved is ElementNotFoundError."""
        try:
            return self._guard_closed(operation, selector, action)
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(selector, timeout_ms) from e

    def _run_once(self, operation: Callable, selector: str, action: str) -> None:
        """Single attempt; failures other than a closed context become InteractionError."""
        try:
            self._guard_closed(operation, selector, action)
        except ContextClosedError:
            raise
        except Exception as e:
            logger.error(f"{action} failed for {selector}: {e}")
            raise InteractionError(selector, action, e) from e


__all__ = [
    "ElementActions",
    "Visibility",
]

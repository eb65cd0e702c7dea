# ================================================================================
# Wait Primitives Module
# ================================================================================
#
# Single, deterministic waits over a Playwright page. Each call blocks the
# calling execution unit until the condition holds or the timeout elapses.
#
# Key Features:
#   - Element states: visible, hidden, attached, detached
#   - Page states: load event, network idle, URL fragment
#   - Playwright timeouts surface as WaitTimeoutError naming the target
#   - A closed page/browser surfaces as ContextClosedError, never a hang
#
# There are no retries here. Waiting for a spinner to vanish uses HIDDEN or
# DETACHED; existence and visibility are different conditions.
#
# ================================================================================

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Union

from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .config_loader import DEFAULT_TIMEOUT_MS
from .errors import ContextClosedError, WaitTimeoutError


class ElementState(str, Enum):
    """Target state of an element."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    ATTACHED = "attached"
    DETACHED = "detached"


class PageState(str, Enum):
    """Target load state of a page."""

    LOADED = "load"
    NETWORK_IDLE = "networkidle"


@dataclass(frozen=True)
class UrlContains:
    """Page condition: the current URL contains ``pattern``."""

    pattern: str

    @property
    def glob(self) -> str:
        return f"**{self.pattern}**"


WaitCondition = Union[ElementState, PageState, UrlContains]


_CLOSED_MARKERS = ("has been closed", "Target closed", "Browser closed")


def is_closed_error(error: BaseException, page: Optional[Page] = None) -> bool:
    """Tell whether ``error`` was caused by a closed page, browser or driver."""
    if isinstance(error, ContextClosedError):
        return True
    if page is not None:
        try:
            if page.is_closed():
                return True
        except PlaywrightError:
            return True
    message = str(error)
    return any(marker in message for marker in _CLOSED_MARKERS)


@contextmanager
def translate_errors(
    page: Page,
    target: str,
    condition: str,
    timeout_ms: float,
) -> Iterator[None]:
    """Map Playwright failures inside the block onto the framework taxonomy."""
    try:
        yield
    except PlaywrightTimeoutError as e:
        if is_closed_error(e, page):
            raise ContextClosedError(
                f"Context closed while waiting for '{target}' to be {condition}"
            ) from e
        raise WaitTimeoutError(target, condition, timeout_ms) from e
    except PlaywrightError as e:
        if is_closed_error(e, page):
            raise ContextClosedError(
                f"Context closed while waiting for '{target}' to be {condition}"
            ) from e
        raise


def wait_for_element(
    page: Page,
    selector: str,
    state: ElementState = ElementState.VISIBLE,
    timeout_ms: Optional[float] = None,
) -> None:
    """
    Wait for an element to reach ``state``.

    Args:
        page: Playwright Page
        selector: CSS or XPath selector
        state: Target element state
        timeout_ms: Timeout in milliseconds

    Raises:
        WaitTimeoutError: Condition not met in time
        ContextClosedError: Page or browser closed while waiting
    """
    timeout_ms = DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms
    state = ElementState(state)
    logger.debug(f"Waiting for '{selector}' to be {state.value} ({timeout_ms}ms)")
    with translate_errors(page, selector, state.value, timeout_ms):
        page.wait_for_selector(selector, state=state.value, timeout=timeout_ms)


def wait_for_visible(page: Page, selector: str, timeout_ms: Optional[float] = None) -> None:
    """Element exists in the DOM and is displayed."""
    wait_for_element(page, selector, ElementState.VISIBLE, timeout_ms)


def wait_for_hidden(page: Page, selector: str, timeout_ms: Optional[float] = None) -> None:
    """Element is not displayed or not present (loading spinners)."""
    wait_for_element(page, selector, ElementState.HIDDEN, timeout_ms)


def wait_for_attached(page: Page, selector: str, timeout_ms: Optional[float] = None) -> None:
    """Element exists in the DOM, visible or not."""
    wait_for_element(page, selector, ElementState.ATTACHED, timeout_ms)


def wait_for_detached(page: Page, selector: str, timeout_ms: Optional[float] = None) -> None:
    """Element removed from the DOM (closed modals and popups)."""
    wait_for_element(page, selector, ElementState.DETACHED, timeout_ms)


def wait_for_load_state(
    page: Page,
    state: PageState = PageState.LOADED,
    timeout_ms: Optional[float] = None,
) -> None:
    """Wait for the page to reach a load state."""
    timeout_ms = DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms
    state = PageState(state)
    logger.debug(f"Waiting for page load state '{state.value}' ({timeout_ms}ms)")
    with translate_errors(page, "page", state.value, timeout_ms):
        page.wait_for_load_state(state.value, timeout=timeout_ms)


def wait_for_page_load(page: Page, timeout_ms: Optional[float] = None) -> None:
    """HTML loaded; subresources may still be in flight."""
    wait_for_load_state(page, PageState.LOADED, timeout_ms)


def wait_for_network_idle(page: Page, timeout_ms: Optional[float] = None) -> None:
    """No network activity; use for pages that fetch data after load."""
    wait_for_load_state(page, PageState.NETWORK_IDLE, timeout_ms)


def wait_for_url_contains(
    page: Page,
    fragment: str,
    timeout_ms: Optional[float] = None,
) -> None:
    """Wait until the page URL contains ``fragment``."""
    timeout_ms = DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms
    condition = UrlContains(fragment)
    logger.debug(f"Waiting for URL to contain '{fragment}' ({timeout_ms}ms)")
    with translate_errors(page, "url", f"containing '{fragment}'", timeout_ms):
        page.wait_for_url(condition.glob, timeout=timeout_ms)


def wait_until(
    page: Page,
    condition: WaitCondition,
    selector: Optional[str] = None,
    timeout_ms: Optional[float] = None,
) -> None:
    """
    Wait for any WaitCondition.

    Element states require ``selector``; page states and UrlContains ignore it.
    """
    if isinstance(condition, UrlContains):
        wait_for_url_contains(page, condition.pattern, timeout_ms)
    elif isinstance(condition, PageState):
        wait_for_load_state(page, condition, timeout_ms)
    elif isinstance(condition, ElementState):
        if not selector:
            raise ValueError(f"Element condition {condition.value} requires a selector")
        wait_for_element(page, selector, condition, timeout_ms)
    else:
        raise TypeError(f"Unsupported wait condition: {condition!r}")


__all__ = [
    "ElementState",
    "PageState",
    "UrlContains",
    "WaitCondition",
    "is_closed_error",
    "translate_errors",
    "wait_for_element",
    "wait_for_visible",
    "wait_for_hidden",
    "wait_for_attached",
    "wait_for_detached",
    "wait_for_load_state",
    "wait_for_page_load",
    "wait_for_network_idle",
    "wait_for_url_contains",
    "wait_until",
]

"""
================================================================================
Execution Context
================================================================================

One (engine, browser, page) triple owned by a single execution unit.

    engine   Playwright driver connection  (owns)
    browser  launched browser process      (owns)
    page     the single tab scripts act on

A context is either fully constructed or absent: ``open`` closes whatever
it already started before raising SessionInitError. ``close`` tears down
page -> browser -> engine exactly once, attempting every step even when an
earlier one fails.

Playwright's sync API is bound to the thread that started the driver. The
context remembers that owner thread, and ``close`` from any other thread
raises ThreadAffinityError without touching a handle.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Hashable, List, Optional, Tuple

from loguru import logger
from playwright.sync_api import Browser, Page, Playwright, sync_playwright

from .config_loader import BrowserSettings, BrowserVariant
from .errors import SessionInitError, ThreadAffinityError


EngineFactory = Callable[[], Playwright]


def default_engine_factory() -> Playwright:
    """Start a Playwright driver for the calling thread."""
    return sync_playwright().start()


class ExecutionContext:
    """
    Browser handles for one execution unit.

    Usage:
        with ExecutionContext.open("unit-1", BrowserSettings()) as ctx:
            ctx.page.goto("https://example.com")
    """

    # Default browser launch arguments, per engine
    DEFAULT_LAUNCH_ARGS = {
        BrowserVariant.CHROMIUM: ["--ignore-certificate-errors"],
    }

    def __init__(
        self,
        unit_id: Hashable,
        engine: Playwright,
        browser: Browser,
        page: Page,
        variant: BrowserVariant = BrowserVariant.CHROMIUM,
    ):
        self.unit_id = unit_id
        self.engine = engine
        self.browser = browser
        self.page = page
        self.variant = variant
        self.owner_thread = threading.current_thread()
        self._closed = False
        self._close_lock = threading.Lock()

    @classmethod
    def open(
        cls,
        unit_id: Hashable,
        settings: Optional[BrowserSettings] = None,
        engine_factory: EngineFactory = default_engine_factory,
    ) -> "ExecutionContext":
        """
        Start engine, launch the configured browser and open one page.

        Args:
            unit_id: Identity of the owning execution unit
            settings: Browser variant, headless flag and timeouts
            engine_factory: Callable returning a started Playwright driver

        Raises:
            SessionInitError: Any construction step failed. Handles started
                before the failure have been closed.
        """
        settings = settings or BrowserSettings()
        variant_name = str(getattr(settings.browser, "value", settings.browser))
        started: List[Tuple[str, Any]] = []

        try:
            variant = BrowserVariant.resolve(settings.browser)
            variant_name = variant.value

            engine = engine_factory()
            started.append(("engine", engine))

            launcher = getattr(engine, variant.value, None)
            if launcher is None:
                raise SessionInitError(
                    f"Browser variant '{variant.value}' is not supported by the engine",
                    unit_id=unit_id,
                    variant=variant.value,
                )

            browser = launcher.launch(
                headless=settings.headless,
                args=cls.DEFAULT_LAUNCH_ARGS.get(variant, []),
            )
            started.append(("browser", browser))

            page = browser.new_page()
            page.set_default_timeout(settings.timeout_ms)
            page.set_default_navigation_timeout(settings.navigation_timeout_ms)
        except SessionInitError:
            _close_started(unit_id, started)
            raise
        except Exception as e:
            _close_started(unit_id, started)
            raise SessionInitError(
                f"Failed to initialize {variant_name} session for unit "
                f"{unit_id!r}: {e}",
                unit_id=unit_id,
                variant=variant_name,
            ) from e

        logger.debug(
            f"Context opened for unit {unit_id!r}: {variant.value} "
            f"(headless={settings.headless})"
        )
        return cls(unit_id, engine, browser, page, variant)

    @property
    def closed(self) -> bool:
        return self._closed

    def is_owned_by_current_thread(self) -> bool:
        return threading.current_thread() is self.owner_thread

    def close(self) -> None:
        """
        Close page, browser and engine, in that order.

        Every step is attempted; failures are logged and never raised.
        A second call is a no-op.

        Raises:
            ThreadAffinityError: Called from a thread other than the owner.
                Nothing has been closed.
        """
        with self._close_lock:
            if self._closed:
                return
            if not self.is_owned_by_current_thread():
                raise ThreadAffinityError(
                    self.unit_id,
                    owner=self.owner_thread.name,
                    caller=threading.current_thread().name,
                )
            self._closed = True

        _close_quietly(self.unit_id, "page", self.page.close)
        _close_quietly(self.unit_id, "browser", self.browser.close)
        _close_quietly(self.unit_id, "engine", self.engine.stop)
        logger.debug(f"Context closed for unit {self.unit_id!r}")

    def __enter__(self) -> "ExecutionContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ExecutionContext unit={self.unit_id!r} {self.variant.value} {state}>"


def _close_quietly(unit_id: Hashable, name: str, close: Callable[[], Any]) -> None:
    try:
        close()
    except Exception as e:
        logger.warning(f"Failed to close {name} for unit {unit_id!r}: {e}")


def _close_started(unit_id: Hashable, started: List[Tuple[str, Any]]) -> None:
    """Undo a partial construction, newest handle first."""
    for name, handle in reversed(started):
        close = handle.stop if name == "engine" else handle.close
        _close_quietly(unit_id, name, close)


__all__ = [
    "EngineFactory",
    "ExecutionContext",
    "default_engine_factory",
]

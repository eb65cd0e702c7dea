"""
================================================================================
Execution Context Registry
================================================================================

Process-wide table mapping an execution-unit identity to its ExecutionContext.

Features:
    - Lazy creation on first access, reuse until release
    - One context per unit; units never share browser state
    - Idempotent, best-effort teardown
    - Per-unit locking: one unit's launch or teardown never blocks another
    - Teardown runs on the thread that acquired the context

The registry is the only component that starts or stops browsers. Everything
else consumes ``context.page``.

Usage:
    registry = ExecutionContextRegistry()
    page = registry.get_page(request.node.nodeid)
    ...
    registry.close_context(request.node.nodeid)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List, Optional

from loguru import logger
from playwright.sync_api import Page

from .config_loader import BrowserSettings, ConfigLoader, load_browser_settings
from .errors import ThreadAffinityError
from .execution_context import EngineFactory, ExecutionContext, default_engine_factory


class _UnitLock:
    """Lock for one unit plus the number of callers holding or waiting on it."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


def current_unit_id() -> str:
    """Identity of the calling thread, for callers without an explicit unit key."""
    return f"thread-{threading.get_ident()}"


class ExecutionContextRegistry:
    """
    Thread-safe registry of execution contexts keyed by unit identity.

    The table itself is guarded by a short-held lock. Construction and
    teardown run under a lock private to the unit, so slow browser launches
    for one unit do not serialize other units.
    """

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        engine_factory: EngineFactory = default_engine_factory,
        config: Optional[ConfigLoader] = None,
    ):
        """
        Initialize the registry.

        Args:
            settings: Browser settings used for every new context.
                      Resolved from configuration when not given.
            engine_factory: Callable starting a Playwright driver
            config: ConfigLoader used to resolve settings lazily
        """
        self._settings = settings
        self._config = config
        self._engine_factory = engine_factory
        self._contexts: Dict[Hashable, ExecutionContext] = {}
        self._unit_locks: Dict[Hashable, _UnitLock] = {}
        self._table_lock = threading.Lock()

    @property
    def settings(self) -> BrowserSettings:
        if self._settings is None:
            self._settings = load_browser_settings(self._config)
        return self._settings

    @contextmanager
    def _unit_lock(self, unit_id: Hashable) -> Iterator[None]:
        """Hold the unit's lock; the entry is dropped once nobody uses it."""
        with self._table_lock:
            entry = self._unit_locks.get(unit_id)
            if entry is None:
                entry = self._unit_locks[unit_id] = _UnitLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._table_lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._unit_locks[unit_id]

    def acquire(self, unit_id: Hashable) -> ExecutionContext:
        """
        Return the unit's context, creating it on first use.

        Raises:
            SessionInitError: Construction failed; no entry is stored
        """
        with self._unit_lock(unit_id):
            with self._table_lock:
                context = self._contexts.get(unit_id)
            if context is not None:
                return context

            logger.info(
                f"Creating context for unit {unit_id!r} "
                f"({self.settings.browser.value}, headless={self.settings.headless})"
            )
            context = ExecutionContext.open(unit_id, self.settings, self._engine_factory)

            with self._table_lock:
                self._contexts[unit_id] = context
            return context

    def release(self, unit_id: Hashable) -> None:
        """
        Tear down the unit's context if it has one.

        Close failures are logged, never raised, and the entry is removed
        regardless. Releasing an unknown unit is a no-op.

        Raises:
            ThreadAffinityError: The context belongs to another thread. It is
                left open and registered so its owner can still release it.
        """
        with self._unit_lock(unit_id):
            with self._table_lock:
                context = self._contexts.get(unit_id)
            if context is None:
                logger.debug(f"No context to release for unit {unit_id!r}")
                return

            logger.info(f"Releasing context for unit {unit_id!r}")
            context.close()
            with self._table_lock:
                self._contexts.pop(unit_id, None)

    def get_page(self, unit_id: Hashable) -> Page:
        """Page of the unit's context, created lazily."""
        return self.acquire(unit_id).page

    def close_context(self, unit_id: Hashable) -> None:
        """Alias of ``release`` for the screen/orchestration layers."""
        self.release(unit_id)

    def release_all(self) -> List[Hashable]:
        """
        Release every registered unit the calling thread owns.

        Returns:
            Units left registered because another thread owns them
        """
        remaining = []
        for unit_id in self.active_units():
            try:
                self.release(unit_id)
            except ThreadAffinityError as e:
                logger.error(f"Context left open: {e}")
                remaining.append(unit_id)
        return remaining

    def active_units(self) -> List[Hashable]:
        with self._table_lock:
            return list(self._contexts)

    def __contains__(self, unit_id: Hashable) -> bool:
        with self._table_lock:
            return unit_id in self._contexts

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._contexts)


__all__ = [
    "ExecutionContextRegistry",
    "current_unit_id",
]

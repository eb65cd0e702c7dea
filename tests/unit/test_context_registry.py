import threading
import time

import pytest
from playwright.sync_api import Error as PlaywrightError

from tests.unit.fakes import EngineFactory, FakeEngine
from ui_automation.framework.config_loader import BrowserSettings, BrowserVariant
from ui_automation.framework.context_registry import ExecutionContextRegistry, current_unit_id
from ui_automation.framework.element_actions import ElementActions
from ui_automation.framework.errors import (
    ContextClosedError,
    SessionInitError,
    ThreadAffinityError,
)
from ui_automation.framework.execution_context import ExecutionContext


@pytest.fixture
def registry(settings, engine_factory):
    registry = ExecutionContextRegistry(settings=settings, engine_factory=engine_factory)
    yield registry
    registry.release_all()


def test_acquire_is_idempotent(registry, engine_factory):
    first = registry.acquire("u1")
    second = registry.acquire("u1")

    assert first is second
    assert len(engine_factory.engines) == 1
    assert "u1" in registry


def test_acquire_after_release_builds_new_context(registry, engine_factory):
    first = registry.acquire("u1")
    registry.release("u1")
    second = registry.acquire("u1")

    assert second is not first
    assert first.closed
    assert not second.closed
    assert second.page is not first.page
    assert len(engine_factory.engines) == 2


def test_release_unknown_unit_is_noop(registry):
    registry.release("never-acquired")
    registry.release("never-acquired")

    assert len(registry) == 0


def test_release_closes_page_browser_engine_in_order(registry, engine_factory):
    registry.acquire("u1")

    registry.release("u1")

    assert engine_factory.engines[0].events == [
        ("close", "page"),
        ("close", "browser"),
        ("close", "engine"),
    ]
    assert "u1" not in registry


def test_release_continues_past_close_failures(registry, engine_factory):
    context = registry.acquire("u1")
    context.page.close_error = PlaywrightError("page crashed")
    context.browser.close_error = PlaywrightError("browser gone")

    registry.release("u1")

    engine = engine_factory.engines[0]
    assert engine.stopped
    assert [e for e in engine.events if e[0] == "close"] == [
        ("close", "page"),
        ("close", "browser"),
        ("close", "engine"),
    ]
    assert "u1" not in registry


def test_launch_failure_leaves_no_entry_and_stops_engine(settings):
    factory = EngineFactory(fail_launch=True)
    registry = ExecutionContextRegistry(settings=settings, engine_factory=factory)

    with pytest.raises(SessionInitError) as exc_info:
        registry.acquire("u1")

    assert "u1" not in registry
    assert factory.engines[0].stopped
    assert exc_info.value.unit_id == "u1"
    assert exc_info.value.variant == "chromium"
    assert isinstance(exc_info.value.__cause__, PlaywrightError)


def test_page_failure_closes_browser_then_engine(settings):
    factory = EngineFactory(fail_new_page=True)
    registry = ExecutionContextRegistry(settings=settings, engine_factory=factory)

    with pytest.raises(SessionInitError):
        registry.acquire("u1")

    assert factory.engines[0].events == [("close", "browser"), ("close", "engine")]
    assert len(registry) == 0


def test_engine_start_failure_is_session_init_error(settings):
    def broken_factory():
        raise RuntimeError("driver not installed")

    registry = ExecutionContextRegistry(settings=settings, engine_factory=broken_factory)

    with pytest.raises(SessionInitError):
        registry.acquire("u1")
    assert len(registry) == 0


def test_unsupported_variant_is_session_init_error():
    engine = FakeEngine()
    engine.webkit = None
    registry = ExecutionContextRegistry(
        settings=BrowserSettings(browser=BrowserVariant.WEBKIT),
        engine_factory=lambda: engine,
    )

    with pytest.raises(SessionInitError) as exc_info:
        registry.acquire("u1")

    assert exc_info.value.variant == "webkit"
    assert engine.stopped


def test_variant_and_headless_reach_the_launcher(engine_factory):
    registry = ExecutionContextRegistry(
        settings=BrowserSettings(browser=BrowserVariant.FIREFOX, headless=False, timeout_ms=1500),
        engine_factory=engine_factory,
    )

    context = registry.acquire("u1")

    assert engine_factory.engines[0].launched == [("firefox", False)]
    assert context.variant is BrowserVariant.FIREFOX
    assert context.page.default_timeout == 1500
    registry.release_all()


@pytest.mark.parametrize(
    "name, launched",
    [("firefox", "firefox"), ("WebKit", "webkit"), ("edge", "chromium")],
)
def test_browser_given_by_name_is_resolved_before_launch(engine_factory, name, launched):
    registry = ExecutionContextRegistry(
        settings=BrowserSettings(browser=name, headless=True),
        engine_factory=engine_factory,
    )

    context = registry.acquire("u1")

    assert engine_factory.engines[0].launched == [(launched, True)]
    assert context.variant.value == launched
    registry.release_all()


def test_open_with_unresolvable_engine_is_session_init_error():
    engine = FakeEngine()
    engine.firefox = None

    with pytest.raises(SessionInitError) as exc_info:
        ExecutionContext.open("u1", BrowserSettings(browser="firefox"), lambda: engine)

    assert exc_info.value.variant == "firefox"
    assert engine.stopped


def test_get_page_and_close_context_aliases(registry):
    page = registry.get_page("u1")

    assert page is registry.acquire("u1").page
    registry.close_context("u1")
    assert page.is_closed()
    assert "u1" not in registry


def test_release_all(registry):
    contexts = [registry.acquire(unit) for unit in ("a", "b", "c")]

    registry.release_all()

    assert len(registry) == 0
    assert all(context.closed for context in contexts)


def test_distinct_units_construct_concurrently(settings):
    # Both launches must be in flight at the same time to pass the barrier.
    launching = threading.Barrier(2, timeout=5)
    acquired = threading.Barrier(3, timeout=5)
    done = threading.Event()

    def factory():
        launching.wait()
        return FakeEngine()

    registry = ExecutionContextRegistry(settings=settings, engine_factory=factory)
    results = {}
    errors = []

    def worker(unit_id):
        try:
            results[unit_id] = registry.acquire(unit_id)
            acquired.wait()
            done.wait(timeout=10)
            registry.release(unit_id)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(unit,)) for unit in ("u1", "u2")]
    for thread in threads:
        thread.start()
    acquired.wait()

    assert results["u1"] is not results["u2"]
    assert results["u1"].page is not results["u2"].page

    done.set()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert results["u1"].closed and results["u2"].closed
    assert len(registry) == 0


def test_release_of_one_unit_leaves_others_usable(registry):
    first = registry.acquire("u1")
    second = registry.acquire("u2")

    registry.release("u1")

    assert first.closed
    assert not second.closed
    assert not second.page.is_closed()
    second.page.visible.add("#still-alive")
    assert ElementActions(second.page).is_visible("#still-alive")


def test_release_from_foreign_thread_keeps_context_open(registry):
    contexts = []
    release_now = threading.Event()
    owner_errors = []

    def owner():
        contexts.append(registry.acquire("u1"))
        release_now.wait(timeout=10)
        try:
            registry.release("u1")
        except Exception as e:
            owner_errors.append(e)

    thread = threading.Thread(target=owner, name="unit-owner")
    thread.start()
    while not contexts and thread.is_alive():
        time.sleep(0.01)
    context = contexts[0]

    with pytest.raises(ThreadAffinityError) as exc_info:
        registry.release("u1")

    assert exc_info.value.owner == "unit-owner"
    assert exc_info.value.unit_id == "u1"
    assert "u1" in registry
    assert not context.closed
    assert ("close", "page") not in context.page.events
    assert registry.release_all() == ["u1"]

    release_now.set()
    thread.join(timeout=10)

    assert owner_errors == []
    assert context.closed
    assert "u1" not in registry
    assert [e for e in context.page.events if e[0] == "close"] == [
        ("close", "page"),
        ("close", "browser"),
        ("close", "engine"),
    ]


def test_context_close_from_foreign_thread_raises(settings, engine_factory):
    context = ExecutionContext.open("u1", settings, engine_factory)
    errors = []

    def close_elsewhere():
        try:
            context.close()
        except ThreadAffinityError as e:
            errors.append(e)

    thread = threading.Thread(target=close_elsewhere)
    thread.start()
    thread.join(timeout=10)

    assert len(errors) == 1
    assert not context.closed
    context.close()
    assert context.closed


def test_unit_locks_are_dropped_after_use(registry):
    for _ in range(100):
        registry.acquire("u1")
        registry.release("u1")
    registry.release("never-acquired")

    assert registry._unit_locks == {}

def test_same_unit_concurrent_acquire_constructs_once(settings):
    factory_calls = []

    def slow_factory():
        factory_calls.append(1)
        time.sleep(0.05)
        return FakeEngine()

    registry = ExecutionContextRegistry(settings=settings, engine_factory=slow_factory)
    results = []

    threads = [
        threading.Thread(target=lambda: results.append(registry.acquire("shared")))
        for _ in range(5)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(factory_calls) == 1
    assert len(results) == 5
    assert all(context is results[0] for context in results)
    # The builder thread has exited, so nobody can tear the context down.
    assert registry.release_all() == ["shared"]
    assert "shared" in registry


def test_operations_after_forced_release_fail_explicitly(registry):
    context = registry.acquire("u1")
    context.page.visible.add("#submit")
    actions = ElementActions(context.page, default_timeout_ms=100)

    registry.release("u1")

    with pytest.raises(ContextClosedError):
        actions.click("#submit")
    assert actions.is_visible("#submit") is False


def test_context_close_is_idempotent(settings, engine_factory):
    context = ExecutionContext.open("u1", settings, engine_factory)

    context.close()
    context.close()

    assert engine_factory.engines[0].events.count(("close", "page")) == 1
    assert engine_factory.engines[0].events.count(("close", "engine")) == 1


def test_context_manager_closes(settings, engine_factory):
    with ExecutionContext.open("u1", settings, engine_factory) as context:
        assert not context.closed

    assert context.closed
    assert "closed" in repr(context)


def test_current_unit_id_is_per_thread():
    ids = []
    thread = threading.Thread(target=lambda: ids.append(current_unit_id()))
    thread.start()
    thread.join()

    assert ids[0] != current_unit_id()
    assert current_unit_id() == current_unit_id()

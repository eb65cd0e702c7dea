"""
================================================================================
UI Automation Pytest Plugin
================================================================================

Wires the execution-context registry into the pytest lifecycle.

Key Features:
- One execution context per test item, keyed by its node id
- Lazy browser start on first use of the ``page``/``actions`` fixtures
- Screenshot attached to Allure on failure, before teardown
- Page object fixtures composed over ElementActions

Enable it from a root conftest:

    pytest_plugins = ["ui_automation.plugin"]

================================================================================
"""

from __future__ import annotations

from typing import Generator

import allure
import pytest
from loguru import logger
from playwright.sync_api import Page

from ui_automation.framework.config_loader import (
    BrowserSettings,
    ConfigLoader,
    load_browser_settings,
)
from ui_automation.framework.context_registry import ExecutionContextRegistry
from ui_automation.framework.element_actions import ElementActions
from ui_automation.framework.execution_context import ExecutionContext
from ui_automation.framework.logging_setup import init_logger
from ui_automation.pages import (
    CartPage,
    CheckoutCompletePage,
    CheckoutOverviewPage,
    CheckoutPage,
    InventoryPage,
    LoginPage,
)


# ================================================================================
# Pytest Configuration
# ================================================================================

def pytest_configure(config):
    """Register markers and initialize logging."""
    config.addinivalue_line("markers", "ui: test drives a real browser")
    config.addinivalue_line("markers", "e2e: end-to-end business flow")
    config.addinivalue_line("markers", "smoke: quick verification tests")
    config.addinivalue_line("markers", "regression: full regression suite")
    init_logger()


# ================================================================================
# Lifecycle Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def ui_config() -> ConfigLoader:
    """Process-wide configuration."""
    return ConfigLoader()


@pytest.fixture(scope="session")
def browser_settings(ui_config: ConfigLoader) -> BrowserSettings:
    return load_browser_settings(ui_config)


@pytest.fixture(scope="session")
def context_registry(
    browser_settings: BrowserSettings,
) -> Generator[ExecutionContextRegistry, None, None]:
    """
    Session-scoped registry.

    Releases anything still open when the session ends, covering tests
    aborted before their own teardown ran.
    """
    registry = ExecutionContextRegistry(settings=browser_settings)
    yield registry
    registry.release_all()


@pytest.fixture
def execution_context(
    request: pytest.FixtureRequest,
    context_registry: ExecutionContextRegistry,
) -> Generator[ExecutionContext, None, None]:
    """Context for the current test, released when the test finishes."""
    unit_id = request.node.nodeid
    context = context_registry.acquire(unit_id)
    yield context
    context_registry.release(unit_id)


@pytest.fixture
def page(execution_context: ExecutionContext) -> Page:
    return execution_context.page


@pytest.fixture
def actions(page: Page, ui_config: ConfigLoader) -> ElementActions:
    """Resilient action capability for the current test's page."""
    return ElementActions.from_config(page, ui_config)


@pytest.fixture(scope="session")
def app_base_url(browser_settings: BrowserSettings) -> str:
    return browser_settings.base_url or "https://www.saucedemo.com"


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(actions: ElementActions, app_base_url: str) -> LoginPage:
    return LoginPage(actions, app_base_url)


@pytest.fixture
def inventory_page(actions: ElementActions, app_base_url: str) -> InventoryPage:
    return InventoryPage(actions, app_base_url)


@pytest.fixture
def cart_page(actions: ElementActions) -> CartPage:
    return CartPage(actions)


@pytest.fixture
def checkout_page(actions: ElementActions) -> CheckoutPage:
    return CheckoutPage(actions)


@pytest.fixture
def checkout_overview_page(actions: ElementActions) -> CheckoutOverviewPage:
    return CheckoutOverviewPage(actions)


@pytest.fixture
def checkout_complete_page(actions: ElementActions) -> CheckoutCompletePage:
    return CheckoutCompletePage(actions)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Attach a full-page screenshot to Allure when a UI test fails.

    Runs before fixture teardown, so the context is still open.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when != "call" or not report.failed:
        return

    context = getattr(item, "funcargs", {}).get("execution_context")
    if context is None or context.closed:
        return

    try:
        screenshot = context.page.screenshot(full_page=True)
        allure.attach(
            screenshot,
            name="failure_screenshot",
            attachment_type=allure.attachment_type.PNG,
        )
    except Exception as e:
        logger.warning(f"Failed to capture screenshot on failure: {e}")

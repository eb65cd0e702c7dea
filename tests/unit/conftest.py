"""Fixtures shared by the unit tests."""

import pytest

from tests.unit.fakes import EngineFactory, FakeClock, FakePage
from ui_automation.framework.config_loader import BrowserSettings, ConfigLoader
from ui_automation.framework.element_actions import ElementActions
from ui_automation.framework.retry import RetryPolicy


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def clock(fake_page: FakePage) -> FakeClock:
    return FakeClock(fake_page.events)


@pytest.fixture
def element_actions(fake_page: FakePage, clock: FakeClock) -> ElementActions:
    return ElementActions(
        fake_page,
        default_timeout_ms=1000,
        retry_policy=RetryPolicy(max_attempts=3, backoff_delay=0.2),
        sleep=clock.sleep,
    )


@pytest.fixture
def engine_factory() -> EngineFactory:
    return EngineFactory()


@pytest.fixture
def settings() -> BrowserSettings:
    return BrowserSettings(headless=True, timeout_ms=5000)


@pytest.fixture
def isolated_config():
    """Reset the configuration singleton around a test."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()

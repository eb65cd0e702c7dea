"""
================================================================================
Checkout Page Objects
================================================================================

The three checkout screens: customer information, overview, completion.

================================================================================
"""

from __future__ import annotations

import allure

from ui_automation.framework.element_actions import ElementActions
from ui_automation.framework.waits import wait_for_network_idle


class CheckoutPage:
    """Checkout step one: customer information form."""

    FIRST_NAME_INPUT = "[data-test='firstName']"
    LAST_NAME_INPUT = "[data-test='lastName']"
    POSTAL_CODE_INPUT = "[data-test='postalCode']"
    CONTINUE_BUTTON = "[data-test='continue']"
    CANCEL_BUTTON = "[data-test='cancel']"
    ERROR_MESSAGE = "[data-test='error']"

    def __init__(self, actions: ElementActions):
        self.actions = actions

    def is_loaded(self) -> bool:
        return all(
            self.actions.is_visible(selector)
            for selector in (
                self.FIRST_NAME_INPUT,
                self.LAST_NAME_INPUT,
                self.POSTAL_CODE_INPUT,
                self.CONTINUE_BUTTON,
            )
        )

    @allure.step("Fill checkout information")
    def fill_information(self, first_name: str, last_name: str, postal_code: str) -> None:
        self.actions.type(self.FIRST_NAME_INPUT, first_name)
        self.actions.type(self.LAST_NAME_INPUT, last_name)
        self.actions.type(self.POSTAL_CODE_INPUT, postal_code)

    def is_form_filled(self) -> bool:
        return all(
            self.actions.input_value(selector)
            for selector in (
                self.FIRST_NAME_INPUT,
                self.LAST_NAME_INPUT,
                self.POSTAL_CODE_INPUT,
            )
        )

    @allure.step("Continue to overview")
    def continue_to_overview(self) -> None:
        self.actions.click(self.CONTINUE_BUTTON)
        wait_for_network_idle(self.actions.page, self.actions.default_timeout_ms)

    @allure.step("Cancel checkout")
    def cancel(self) -> None:
        self.actions.click(self.CANCEL_BUTTON)
        wait_for_network_idle(self.actions.page, self.actions.default_timeout_ms)

    def is_error_visible(self) -> bool:
        return self.actions.is_visible(self.ERROR_MESSAGE)

    def get_error_text(self) -> str:
        return self.actions.read_text(self.ERROR_MESSAGE)

    def has_error(self, expected: str) -> bool:
        return self.is_error_visible() and expected in self.get_error_text()

    @allure.step("Continue with empty checkout fields")
    def attempt_continue_with_empty_fields(self) -> None:
        """Clear every field and submit, leaving the validation error on screen."""
        self.fill_information("", "", "")
        self.actions.click(self.CONTINUE_BUTTON)


class CheckoutOverviewPage:
    """Checkout step two: order summary."""

    FINISH_BUTTON = "[data-test='finish']"

    def __init__(self, actions: ElementActions):
        self.actions = actions

    def is_loaded(self) -> bool:
        return self.actions.is_visible(self.FINISH_BUTTON)

    @allure.step("Finish order")
    def finish_order(self) -> None:
        self.actions.click(self.FINISH_BUTTON)
        wait_for_network_idle(self.actions.page, self.actions.default_timeout_ms)


class CheckoutCompletePage:
    """Order confirmation."""

    COMPLETE_HEADER = "[data-test='complete-header']"

    def __init__(self, actions: ElementActions):
        self.actions = actions

    def is_loaded(self) -> bool:
        return self.actions.is_visible(self.COMPLETE_HEADER)

    def get_confirmation_text(self) -> str:
        return self.actions.read_text(self.COMPLETE_HEADER)

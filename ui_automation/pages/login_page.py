"""
================================================================================
Login Page Object
================================================================================

Login screen of the demo store. Holds an ElementActions capability object
instead of extending a base page.

================================================================================
"""

from __future__ import annotations

import allure
from loguru import logger

from ui_automation.framework.element_actions import ElementActions


class LoginPage:
    """Login page object."""

    USERNAME_INPUT = "[data-test='username']"
    PASSWORD_INPUT = "[data-test='password']"
    LOGIN_BUTTON = "[data-test='login-button']"
    ERROR_MESSAGE = "[data-test='error']"

    def __init__(self, actions: ElementActions, base_url: str):
        self.actions = actions
        self.base_url = base_url.rstrip("/")

    @allure.step("Open login page")
    def open(self) -> "LoginPage":
        """Navigate to the login page and wait for the form."""
        self.actions.navigate(self.base_url + "/")
        self.actions.wait_for(self.USERNAME_INPUT)
        return self

    @allure.step("Login (username={username})")
    def login_as(self, username: str, password: str) -> None:
        """Submit credentials. Does not assert the outcome."""
        self.actions.type(self.USERNAME_INPUT, username)
        self.actions.type(self.PASSWORD_INPUT, password)
        self.actions.click(self.LOGIN_BUTTON)
        logger.info(f"Submitted login for {username}")

    def is_error_visible(self) -> bool:
        return self.actions.is_visible(self.ERROR_MESSAGE)

    def get_error_text(self) -> str:
        return self.actions.read_text(self.ERROR_MESSAGE)

"""
================================================================================
Inventory Page Object
================================================================================

Product catalog shown after login: add/remove items, cart badge, cart link.

Duplicate adds are not decided here. ``add_item_to_cart`` clicks the add
button and fails loudly when it is absent (e.g. the item is already in the
cart); callers that want "add if missing" check ``is_in_cart`` first.

================================================================================
"""

from __future__ import annotations

from typing import Iterable

import allure
from loguru import logger

from ui_automation.framework.element_actions import ElementActions
from ui_automation.framework.waits import wait_for_network_idle


class InventoryPage:
    """Inventory page object."""

    URL_PATH = "/inventory.html"

    INVENTORY_CONTAINER = "[data-test='inventory-container']"
    CART_LINK = ".shopping_cart_link"
    CART_BADGE = ".shopping_cart_badge"

    _ITEM_BUTTON = (
        "xpath=//div[@class='inventory_item'][.//div[text()=\"{name}\"]]"
        "//button[contains(@data-test,'{kind}')]"
    )

    def __init__(self, actions: ElementActions, base_url: str):
        self.actions = actions
        self.base_url = base_url.rstrip("/")

    def open(self) -> "InventoryPage":
        self.actions.navigate(self.base_url + self.URL_PATH)
        return self

    def is_loaded(self) -> bool:
        """Wait for the catalog, then report whether it is visible."""
        self.actions.wait_for(self.INVENTORY_CONTAINER)
        return self.actions.is_visible(self.INVENTORY_CONTAINER)

    @classmethod
    def add_button(cls, item_name: str) -> str:
        return cls._ITEM_BUTTON.format(name=item_name, kind="add-to-cart")

    @classmethod
    def remove_button(cls, item_name: str) -> str:
        return cls._ITEM_BUTTON.format(name=item_name, kind="remove")

    @allure.step("Add to cart: {item_name}")
    def add_item_to_cart(self, item_name: str) -> None:
        self.actions.click(self.add_button(item_name))
        logger.info(f"Added to cart: {item_name}")

    @allure.step("Remove from cart: {item_name}")
    def remove_item_from_cart(self, item_name: str) -> None:
        self.actions.click(self.remove_button(item_name))
        logger.info(f"Removed from cart: {item_name}")

    def add_items_to_cart(self, item_names: Iterable[str]) -> None:
        for item_name in item_names:
            self.add_item_to_cart(item_name.strip())

    def remove_items_from_cart(self, item_names: Iterable[str]) -> None:
        for item_name in item_names:
            self.remove_item_from_cart(item_name.strip())

    @allure.step("Clear cart")
    def clear_cart(self, item_names: Iterable[str]) -> None:
        """Remove whichever of ``item_names`` are currently in the cart."""
        for item_name in item_names:
            if self.is_in_cart(item_name):
                self.remove_item_from_cart(item_name)

    def is_product_displayed(self, item_name: str) -> bool:
        """The item is listed, whether or not it is in the cart."""
        return self.actions.is_visible(self.add_button(item_name)) or self.is_in_cart(item_name)

    def is_in_cart(self, item_name: str) -> bool:
        """The item's button has switched to 'Remove'."""
        return self.actions.is_visible(self.remove_button(item_name))

    def get_cart_count(self) -> int:
        """Badge count, 0 when the badge is not shown."""
        if not self.actions.is_visible(self.CART_BADGE):
            return 0
        return int(self.actions.read_text(self.CART_BADGE).strip())

    @allure.step("Go to cart")
    def go_to_cart(self) -> None:
        self.actions.click(self.CART_LINK)
        wait_for_network_idle(self.actions.page, self.actions.default_timeout_ms)

"""Shopping cart page object."""

from __future__ import annotations

from typing import List

import allure
from loguru import logger

from ui_automation.framework.element_actions import ElementActions
from ui_automation.framework.waits import wait_for_network_idle


class CartPage:
    """Cart page: listed items, the cart badge and the checkout button."""

    CHECKOUT_BUTTON = "[data-test='checkout']"
    ITEM_NAME = ".inventory_item_name"
    CART_BADGE = ".shopping_cart_badge"

    def __init__(self, actions: ElementActions):
        self.actions = actions

    def is_loaded(self) -> bool:
        return self.actions.is_visible(self.CHECKOUT_BUTTON)

    def get_item_names(self) -> List[str]:
        self.actions.wait_for(self.CHECKOUT_BUTTON)
        return [name.strip() for name in self.actions.page.locator(self.ITEM_NAME).all_inner_texts()]

    def get_item_count(self) -> int:
        return len(self.get_item_names())

    def is_empty(self) -> bool:
        return self.get_item_count() == 0

    def get_badge_count(self) -> int:
        """Badge count in the header, 0 when the badge is not shown."""
        if not self.actions.is_visible(self.CART_BADGE):
            return 0
        return int(self.actions.read_text(self.CART_BADGE).strip())

    def is_cart_count_consistent(self) -> bool:
        """The header badge agrees with the number of listed items."""
        badge, listed = self.get_badge_count(), self.get_item_count()
        if badge != listed:
            logger.warning(f"Cart badge shows {badge} but {listed} items are listed")
        return badge == listed

    @allure.step("Proceed to checkout")
    def proceed_to_checkout(self) -> None:
        self.actions.click(self.CHECKOUT_BUTTON)
        wait_for_network_idle(self.actions.page, self.actions.default_timeout_ms)

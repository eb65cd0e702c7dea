"""
Page objects for the demo store.

Each page composes an ElementActions instance; none inherits a base page.
"""

from .cart_page import CartPage
from .checkout_page import CheckoutCompletePage, CheckoutOverviewPage, CheckoutPage
from .inventory_page import InventoryPage
from .login_page import LoginPage

__all__ = [
    "CartPage",
    "CheckoutCompletePage",
    "CheckoutOverviewPage",
    "CheckoutPage",
    "InventoryPage",
    "LoginPage",
]

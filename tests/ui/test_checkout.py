"""
================================================================================
Checkout Flow UI Tests
================================================================================

End-to-end purchase: login -> add products -> cart -> checkout -> confirmation.

================================================================================
"""

import allure
import pytest

from ui_automation.framework.waits import wait_for_url_contains

pytestmark = pytest.mark.ui


@allure.epic("UI Testing")
@allure.feature("Checkout")
class TestCheckout:
    """Checkout flow suite."""

    @pytest.fixture(autouse=True)
    def logged_in(self, login_page, inventory_page, test_data):
        user = test_data["valid_user"]
        login_page.open()
        login_page.login_as(user["username"], user["password"])
        assert inventory_page.is_loaded()

    @allure.story("Happy Path")
    @allure.title("Order completes for two products")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.e2e
    def test_complete_order(
        self,
        page,
        inventory_page,
        cart_page,
        checkout_page,
        checkout_overview_page,
        checkout_complete_page,
        test_data,
    ):
        products = test_data["products"]
        customer = test_data["customer"]

        with allure.step("Add products"):
            for product in products:
                inventory_page.add_item_to_cart(product)
            assert inventory_page.get_cart_count() == len(products)

        with allure.step("Review cart"):
            inventory_page.go_to_cart()
            assert cart_page.is_loaded()
            assert sorted(cart_page.get_item_names()) == sorted(products)

        with allure.step("Enter customer information"):
            cart_page.proceed_to_checkout()
            assert checkout_page.is_loaded()
            checkout_page.fill_information(
                customer["first_name"], customer["last_name"], customer["postal_code"]
            )
            assert checkout_page.is_form_filled()
            checkout_page.continue_to_overview()

        with allure.step("Finish order"):
            assert checkout_overview_page.is_loaded()
            checkout_overview_page.finish_order()
            wait_for_url_contains(page, "checkout-complete")
            assert "Thank you" in checkout_complete_page.get_confirmation_text()

    @allure.story("Form Validation")
    @allure.title("Missing postal code blocks checkout")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.regression
    def test_missing_postal_code(self, inventory_page, cart_page, checkout_page, test_data):
        customer = test_data["customer"]

        inventory_page.add_item_to_cart(test_data["products"][0])
        inventory_page.go_to_cart()
        cart_page.proceed_to_checkout()
        checkout_page.fill_information(customer["first_name"], customer["last_name"], "")
        checkout_page.continue_to_overview()

        assert checkout_page.is_error_visible()
        assert "Postal Code is required" in checkout_page.get_error_text()

    @allure.story("Form Validation")
    @allure.title("Invalid customer data shows a validation error")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.regression
    @pytest.mark.parametrize(
        "first_name, last_name, postal_code, expected_error",
        [
            ("", "Smith", "12345", "First Name is required"),
            ("John", "", "12345", "Last Name is required"),
            ("John", "Smith", "", "Postal Code is required"),
        ],
    )
    def test_invalid_customer_data(
        self,
        inventory_page,
        cart_page,
        checkout_page,
        test_data,
        first_name,
        last_name,
        postal_code,
        expected_error,
    ):
        inventory_page.add_item_to_cart(test_data["products"][0])
        inventory_page.go_to_cart()
        cart_page.proceed_to_checkout()

        checkout_page.fill_information(first_name, last_name, postal_code)
        checkout_page.continue_to_overview()

        assert checkout_page.has_error(expected_error)

    @allure.story("Form Validation")
    @allure.title("Submitting empty fields asks for the first name")
    @pytest.mark.regression
    def test_continue_with_empty_fields(self, inventory_page, cart_page, checkout_page, test_data):
        inventory_page.add_item_to_cart(test_data["products"][0])
        inventory_page.go_to_cart()
        cart_page.proceed_to_checkout()

        checkout_page.attempt_continue_with_empty_fields()

        assert checkout_page.has_error("First Name is required")

    @allure.story("Cart")
    @allure.title("Removing an item clears the badge")
    @pytest.mark.regression
    def test_add_then_remove(self, inventory_page, test_data):
        product = test_data["products"][0]

        inventory_page.add_item_to_cart(product)
        assert inventory_page.is_in_cart(product)

        inventory_page.remove_item_from_cart(product)
        assert inventory_page.get_cart_count() == 0

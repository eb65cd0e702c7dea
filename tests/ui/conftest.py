"""
================================================================================
Live UI Suite Configuration
================================================================================

Every test below this directory drives a real browser against the demo
store and is marked ``ui``. The default run deselects them; run with:

    pytest -m ui
    HEADLESS=true BROWSER=firefox pytest -m ui

================================================================================
"""

import pytest


@pytest.fixture
def test_data():
    """Accounts and customer data published by the demo store."""
    return {
        "valid_user": {"username": "standard_user", "password": "secret_sauce"},
        "locked_user": {"username": "locked_out_user", "password": "secret_sauce"},
        "customer": {"first_name": "Ada", "last_name": "Lovelace", "postal_code": "10115"},
        "products": ["Sauce Labs Backpack", "Sauce Labs Bike Light"],
    }

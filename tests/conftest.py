from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from modules.products.models import Product


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def make_product():
    """Factory persisting a Product with sensible defaults."""

    def _make(**overrides) -> Product:
        defaults = {
            "code": "SKU-001",
            "name": "Widget",
            "price": Decimal("19.99"),
            "stock_quantity": 10,
        }
        defaults.update(overrides)
        product = Product(**defaults)
        product.mark_created(timezone.now())
        product.save()
        return product

    return _make

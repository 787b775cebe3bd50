"""Product model with code uniqueness and price constraints.

Business rules backed by the database:
- RN-PRO-001: ``code`` is unique (UNIQUE INDEX, case-sensitive).
- RN-PRO-002: ``price`` is strictly positive (CHECK constraint).
- RN-PRO-003: ``stock_quantity`` cannot be negative (unsigned column).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import TimestampedModel

CODE_MAX_LENGTH = 50
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 50
PRICE_MAX_DIGITS = 10
PRICE_DECIMAL_PLACES = 2


class Product(TimestampedModel):
    """Catalog product.

    ``id`` is a database-assigned ``BigAutoField``.  Timestamps are set by
    ``ProductService``, never by the database.
    """

    code = models.CharField(max_length=CODE_MAX_LENGTH, unique=True)
    name = models.CharField(max_length=NAME_MAX_LENGTH)
    description = models.CharField(
        max_length=DESCRIPTION_MAX_LENGTH, null=True, blank=True, default=None
    )
    price = models.DecimalField(
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    category = models.CharField(
        max_length=CATEGORY_MAX_LENGTH, null=True, blank=True, default=None
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(fields=["is_active"], name="products_is_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

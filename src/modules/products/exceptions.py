"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Dict, List


class ProductError(Exception):
    """Base class for product business-rule violations."""


class ProductValidationError(ProductError):
    """Request data breaks one or more field constraints.

    ``errors`` maps every offending field to its messages, so a caller
    sees all problems at once.
    """

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid product data: {fields}.")


class DuplicateProductCode(ProductError):
    """A product with the same code already exists (RN-PRO-001)."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Product with code '{code}' already exists.")


class ProductNotFound(ProductError):
    """The requested product does not exist."""

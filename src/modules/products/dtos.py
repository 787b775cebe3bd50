"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Views) and the
Service layer.  DTOs are immutable (``frozen=True``).

- ``ProductRequestDTO``: input for product creation and full updates.
- ``ProductResponseDTO``: output with all product fields.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from modules.products.models import (
    CATEGORY_MAX_LENGTH,
    CODE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PRICE_DECIMAL_PLACES,
    PRICE_MAX_DIGITS,
)

if TYPE_CHECKING:
    from modules.products.models import Product

PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_DECIMAL_PLACES)


# ---------------------------------------------------------------------------
# Input DTO
# ---------------------------------------------------------------------------


class ProductRequestDTO(BaseModel):
    """Immutable DTO for create and update requests.

    Validates:
    - ``code`` / ``name`` are non-blank and within their length ceilings.
    - ``price`` is greater than zero with at most two fractional digits.
    - ``stock_quantity`` is non-negative.

    ``stock_quantity`` and ``is_active`` fall back to their defaults when
    sent as ``null``.  Unknown keys (``id``, ``created_at``...) are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    code: str = Field(max_length=CODE_MAX_LENGTH)
    name: str = Field(max_length=NAME_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    price: Decimal = Field(
        gt=0, max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES
    )
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True

    @field_validator("code", "name")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def float_price_via_str(cls, v: Any) -> Any:
        # shortest repr: 9.99, not its binary expansion
        return str(v) if isinstance(v, float) else v

    @field_validator("price")
    @classmethod
    def price_at_fixed_scale(cls, v: Decimal) -> Decimal:
        return v.quantize(PRICE_QUANTUM)

    @field_validator("stock_quantity", "is_active", mode="before")
    @classmethod
    def null_means_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class ProductResponseDTO(BaseModel):
    """Immutable DTO for product API responses."""

    model_config = ConfigDict(frozen=True)

    id: int
    code: str
    name: str
    description: Optional[str]
    price: Decimal
    category: Optional[str]
    stock_quantity: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> ProductResponseDTO:
        """Build an output DTO from a Product model instance."""
        return cls(
            id=product.id,
            code=product.code,
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            stock_quantity=product.stock_quantity,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

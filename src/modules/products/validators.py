"""Product rule engine.

Structural checks run before any storage interaction and report every
violated field at once.  The code-uniqueness rule is an advisory pre-check:
the UNIQUE constraint on ``products.code`` remains authoritative (see
``ProductDjangoRepository.save``).
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import structlog
from django.conf import settings
from pydantic import ValidationError as PydanticValidationError

from modules.core.pagination import Direction, PageRequest
from modules.products.dtos import ProductRequestDTO
from modules.products.exceptions import DuplicateProductCode, ProductValidationError

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

SORTABLE_FIELDS: Dict[str, str] = {
    "id": "id",
    "code": "code",
    "name": "name",
    "description": "description",
    "price": "price",
    "category": "category",
    "stock_quantity": "stock_quantity",
    "stockQuantity": "stock_quantity",
    "is_active": "is_active",
    "isActive": "is_active",
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
}

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def _pydantic_errors(exc: PydanticValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        message = error["msg"].removeprefix("Value error, ")
        errors.setdefault(field, []).append(message)
    return errors


def _parse_int(value: Any, default: int) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_decimal(value: Any) -> Optional[Decimal]:
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


class ProductValidator:
    """Field, paging and uniqueness rules for product requests."""

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Request bodies
    # ------------------------------------------------------------------

    def validate(self, payload: Any) -> ProductRequestDTO:
        """Turn a raw request body into a ``ProductRequestDTO``.

        Raises:
            ProductValidationError: listing every invalid field.
        """
        if isinstance(payload, Mapping):
            payload = dict(payload.items())
        try:
            return ProductRequestDTO.model_validate(payload)
        except PydanticValidationError as exc:
            errors = _pydantic_errors(exc)
            logger.info("product.validation_failed", fields=sorted(errors))
            raise ProductValidationError(errors) from exc

    def ensure_code_available(
        self, code: str, current_code: Optional[str] = None
    ) -> None:
        """Reject ``code`` if another product already uses it.

        An unchanged code (``code == current_code``) is never checked, so a
        product cannot conflict with itself.

        Raises:
            DuplicateProductCode: if the code is taken.
        """
        if current_code is not None and code == current_code:
            return
        if self._repo.exists_by_code(code):
            logger.warning("product.duplicate_code", code=code)
            raise DuplicateProductCode(code)

    # ------------------------------------------------------------------
    # Query parameters
    # ------------------------------------------------------------------

    def page_request(
        self,
        page: Any = None,
        size: Any = None,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None,
        default_sort: str = "id",
    ) -> PageRequest:
        """Build a ``PageRequest`` from raw query-string values.

        ``sort_by`` must name a known product attribute and falls back to
        ``default_sort`` when absent; ``sort_dir`` is lenient and falls back
        to ascending.
        """
        errors: Dict[str, List[str]] = {}
        max_size = settings.MAX_PAGE_SIZE

        page_number = _parse_int(page, 0)
        if page_number is None or page_number < 0:
            errors["page"] = ["Page must be a non-negative integer."]

        page_size = _parse_int(size, settings.DEFAULT_PAGE_SIZE)
        if page_size is None or not 1 <= page_size <= max_size:
            errors["size"] = [f"Size must be an integer between 1 and {max_size}."]

        field = SORTABLE_FIELDS.get((sort_by or default_sort).strip())
        if field is None:
            errors["sortBy"] = [
                f"Cannot sort by '{sort_by}'. Allowed: "
                + ", ".join(sorted(set(SORTABLE_FIELDS.values())))
                + "."
            ]

        if errors:
            raise ProductValidationError(errors)
        return PageRequest(
            page=page_number,
            size=page_size,
            sort_by=field,
            direction=Direction.parse(sort_dir),
        )

    def price_range(self, min_price: Any, max_price: Any) -> Tuple[Decimal, Decimal]:
        """Parse an inclusive ``[min_price, max_price]`` range."""
        errors: Dict[str, List[str]] = {}
        low = high = None
        for key, raw in (("minPrice", min_price), ("maxPrice", max_price)):
            if raw is None or raw == "":
                errors[key] = ["This parameter is required."]
                continue
            value = _parse_decimal(raw)
            if value is None:
                errors[key] = ["A valid number is required."]
            elif key == "minPrice":
                low = value
            else:
                high = value

        if low is not None and high is not None and low > high:
            errors["minPrice"] = ["minPrice must not be greater than maxPrice."]

        if errors:
            raise ProductValidationError(errors)
        return low, high

    def threshold(self, value: Any = None) -> int:
        threshold = _parse_int(value, settings.LOW_STOCK_THRESHOLD)
        if threshold is None:
            raise ProductValidationError(
                {"threshold": ["A valid integer is required."]}
            )
        return threshold

    def active_flag(self, value: Any = None) -> Optional[bool]:
        """Parse an optional ``active`` query flag."""
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return value
        normalised = str(value).strip().lower()
        if normalised in _TRUE_VALUES:
            return True
        if normalised in _FALSE_VALUES:
            return False
        raise ProductValidationError({"active": ["Must be 'true' or 'false'."]})

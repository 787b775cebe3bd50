"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository`` and field rules to
``ProductValidator``.

Business rules enforced here:
- RN-PRO-001: code must be unique (pre-check; the database constraint wins).
- RN-PRO-002: price must be greater than zero (validated by DTO).
- RN-PRO-003: stock cannot be negative (validated by DTO).
- RN-PRO-004: timestamps are stamped here, never by storage.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.db import transaction
from django.utils import timezone

from modules.products.dtos import ProductResponseDTO
from modules.products.exceptions import ProductNotFound
from modules.products.models import Product
from modules.products.validators import ProductValidator

if TYPE_CHECKING:
    from modules.core.pagination import Page, PageRequest
    from modules.products.dtos import ProductRequestDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

_MUTABLE_FIELDS = (
    "code",
    "name",
    "description",
    "price",
    "category",
    "stock_quantity",
    "is_active",
)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IProductRepository,
        validator: Optional[ProductValidator] = None,
    ) -> None:
        self._repo = repository
        self.validator = validator or ProductValidator(repository)

    def _get_or_raise(self, id: int) -> Product:
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product not found with id: {id}")
        return product

    @staticmethod
    def _apply(product: Product, dto: ProductRequestDTO) -> Product:
        for field in _MUTABLE_FIELDS:
            setattr(product, field, getattr(dto, field))
        return product

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, payload: Any) -> ProductResponseDTO:
        """Validate, check code uniqueness and persist a new product.

        Raises:
            ProductValidationError: if any field is invalid.
            DuplicateProductCode: if the code is already taken.
        """
        dto = self.validator.validate(payload)
        log = logger.bind(code=dto.code)

        self.validator.ensure_code_available(dto.code)

        product = self._apply(Product(), dto)
        product.mark_created(timezone.now())
        product = self._repo.save(product)
        log.info("product.created", product_id=product.id)
        return ProductResponseDTO.from_entity(product)

    @transaction.atomic
    def update_product(self, id: int, payload: Any) -> ProductResponseDTO:
        """Replace every mutable field of an existing product.

        The uniqueness check only runs when the code changes.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductValidationError: if any field is invalid.
            DuplicateProductCode: if the new code is already taken.
        """
        product = self._get_or_raise(id)
        dto = self.validator.validate(payload)
        log = logger.bind(product_id=id, code=dto.code)

        self.validator.ensure_code_available(dto.code, current_code=product.code)

        self._apply(product, dto)
        product.mark_updated(timezone.now())
        product = self._repo.save(product)
        log.info("product.updated")
        return ProductResponseDTO.from_entity(product)

    @transaction.atomic
    def delete_product(self, id: int) -> None:
        """Hard-delete a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        self._get_or_raise(id)
        self._repo.delete(id)
        logger.info("product.deleted", product_id=id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: int) -> ProductResponseDTO:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        return ProductResponseDTO.from_entity(self._get_or_raise(id))

    def get_product_by_code(self, code: str) -> ProductResponseDTO:
        """Retrieve a single product by its exact code.

        Raises:
            ProductNotFound: if no product has this code.
        """
        product = self._repo.get_by_code(code)
        if not product:
            raise ProductNotFound(f"Product not found with code: {code}")
        return ProductResponseDTO.from_entity(product)

    def list_products(self, page_request: PageRequest) -> Page[ProductResponseDTO]:
        return self._repo.list(page_request).map(ProductResponseDTO.from_entity)

    def search_products(
        self, term: str, page_request: PageRequest
    ) -> Page[ProductResponseDTO]:
        """Match ``term`` against name and description, ignoring case."""
        page = self._repo.search(term or "", page_request)
        return page.map(ProductResponseDTO.from_entity)

    def products_by_category(
        self,
        category: str,
        page_request: PageRequest,
        is_active: Optional[bool] = None,
    ) -> Page[ProductResponseDTO]:
        page = self._repo.by_category(category, page_request, is_active=is_active)
        return page.map(ProductResponseDTO.from_entity)

    def products_by_price_range(
        self, min_price: Decimal, max_price: Decimal, page_request: PageRequest
    ) -> Page[ProductResponseDTO]:
        """Inclusive on both bounds."""
        page = self._repo.by_price_range(min_price, max_price, page_request)
        return page.map(ProductResponseDTO.from_entity)

    def active_products(self, page_request: PageRequest) -> Page[ProductResponseDTO]:
        return self._repo.active(page_request).map(ProductResponseDTO.from_entity)

    def all_categories(self) -> List[str]:
        return self._repo.categories()

    def low_stock_products(self, threshold: int) -> List[ProductResponseDTO]:
        return [
            ProductResponseDTO.from_entity(product)
            for product in self._repo.low_stock(threshold)
        ]

"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups required by the code
uniqueness rule (RN-PRO-001) and the catalog query endpoints.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.core.pagination import Page, PageRequest
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[Product]:
        """Retrieve a product by its exact (case-sensitive) code."""

    @abstractmethod
    def exists_by_code(self, code: str) -> bool:
        """Return ``True`` if any product uses ``code``."""

    @abstractmethod
    def search(self, term: str, page_request: PageRequest) -> Page[Product]:
        """Case-insensitive substring match on name or description."""

    @abstractmethod
    def by_category(
        self,
        category: str,
        page_request: PageRequest,
        is_active: Optional[bool] = None,
    ) -> Page[Product]:
        """Case-insensitive exact match on category, optionally by status."""

    @abstractmethod
    def by_price_range(
        self, min_price: Decimal, max_price: Decimal, page_request: PageRequest
    ) -> Page[Product]:
        """Products priced within ``[min_price, max_price]``."""

    @abstractmethod
    def active(self, page_request: PageRequest) -> Page[Product]:
        """Products with ``is_active = True``."""

    @abstractmethod
    def categories(self) -> List[str]:
        """Distinct non-empty categories in ascending order."""

    @abstractmethod
    def low_stock(self, threshold: int) -> List[Product]:
        """Active products with ``stock_quantity <= threshold``."""

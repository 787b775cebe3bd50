"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API and the
``ProductFilter`` FilterSet.  Error handling follows the Null Object
pattern for look-ups: methods return ``None`` instead of raising; the
Service Layer decides how to translate a missing entity into an API
response.  The one exception is ``save``: a UNIQUE violation on ``code``
surfaces as ``DuplicateProductCode``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, models, transaction

from modules.core.pagination import Page, PageRequest, paginate
from modules.products.exceptions import DuplicateProductCode
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def _filtered(self, **params: Any) -> models.QuerySet:
        return ProductFilter(params, queryset=Product.objects.all()).qs

    # ------------------------------------------------------------------
    # Point look-ups
    # ------------------------------------------------------------------

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(pk=id).first()
        except (TypeError, ValueError):
            return None

    def get_by_code(self, code: str) -> Optional[Product]:
        return Product.objects.filter(code=code).first()

    def exists_by_code(self, code: str) -> bool:
        return Product.objects.filter(code=code).exists()

    # ------------------------------------------------------------------
    # Paged queries
    # ------------------------------------------------------------------

    def list(self, page_request: PageRequest) -> Page[Product]:
        return paginate(Product.objects.all(), page_request)

    def search(self, term: str, page_request: PageRequest) -> Page[Product]:
        return paginate(self._filtered(q=term), page_request)

    def by_category(
        self,
        category: str,
        page_request: PageRequest,
        is_active: Optional[bool] = None,
    ) -> Page[Product]:
        params: Dict[str, Any] = {"category": category}
        if is_active is not None:
            params["is_active"] = "true" if is_active else "false"
        return paginate(self._filtered(**params), page_request)

    def by_price_range(
        self, min_price: Decimal, max_price: Decimal, page_request: PageRequest
    ) -> Page[Product]:
        queryset = self._filtered(min_price=str(min_price), max_price=str(max_price))
        return paginate(queryset, page_request)

    def active(self, page_request: PageRequest) -> Page[Product]:
        return paginate(self._filtered(is_active="true"), page_request)

    # ------------------------------------------------------------------
    # Unpaged queries
    # ------------------------------------------------------------------

    def categories(self) -> List[str]:
        return list(
            Product.objects.exclude(category__isnull=True)
            .exclude(category="")
            .order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )

    def low_stock(self, threshold: int) -> List[Product]:
        queryset = self._filtered(max_stock=str(threshold), is_active="true")
        return list(queryset.order_by("stock_quantity", "id"))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product.

        The write runs in its own savepoint so a constraint violation
        leaves any enclosing transaction usable.

        Raises:
            DuplicateProductCode: if another row already holds ``entity.code``.
        """
        try:
            with transaction.atomic():
                entity.save()
        except IntegrityError as exc:
            clash = Product.objects.filter(code=entity.code)
            if entity.pk is not None:
                clash = clash.exclude(pk=entity.pk)
            if clash.exists():
                logger.warning("product.code_conflict", code=entity.code)
                raise DuplicateProductCode(entity.code) from exc
            raise
        logger.info("product.saved", product_id=entity.pk, code=entity.code)
        return entity

    def delete(self, id: int) -> bool:
        """Hard-delete a product by ID.

        Returns ``True`` if a row was removed, ``False`` otherwise.
        """
        deleted, _ = Product.objects.filter(pk=id).delete()
        if deleted:
            logger.info("product.deleted", product_id=id)
        return bool(deleted)

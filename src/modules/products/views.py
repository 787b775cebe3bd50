"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into appropriate
HTTP status codes. The view never swallows generic exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.pagination import Page
from modules.products.dtos import ProductRequestDTO, ProductResponseDTO
from modules.products.exceptions import (
    DuplicateProductCode,
    ProductNotFound,
    ProductValidationError,
)
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService


def _serialize(dto: ProductResponseDTO) -> Dict[str, Any]:
    return dto.model_dump(mode="json")


def _page_body(page: Page[ProductResponseDTO]) -> Dict[str, Any]:
    return page.to_dict(_serialize)


def _error(
    http_status: int, detail: str, errors: Optional[Dict[str, Any]] = None
) -> Response:
    body: Dict[str, Any] = {"detail": detail}
    if errors is not None:
        body["errors"] = errors
    return Response(body, status=http_status)


def _validation_error(exc: ProductValidationError) -> Response:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), exc.errors)


def _not_found(exc: ProductNotFound) -> Response:
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


def _conflict(exc: DuplicateProductCode) -> Response:
    return _error(status.HTTP_409_CONFLICT, str(exc))


# ---------------------------------------------------------------------------
# OpenAPI documentation
# ---------------------------------------------------------------------------

ERROR = OpenApiResponse(
    OpenApiTypes.OBJECT,
    description="``detail`` message, plus ``errors`` per field on 400.",
)
PAGE = OpenApiResponse(
    OpenApiTypes.OBJECT,
    description="``content``, ``page``, ``size``, ``total_elements``, ``total_pages``.",
)
PRODUCT_LIST = OpenApiResponse(
    {"type": "array", "items": {"type": "object"}},
    description="Products ordered by stock quantity, then id.",
)
ID_PARAMETER = OpenApiParameter("id", OpenApiTypes.INT, OpenApiParameter.PATH)


def _paging_parameters(default_sort: str):
    return [
        OpenApiParameter("page", OpenApiTypes.INT, description="Zero-based page index."),
        OpenApiParameter("size", OpenApiTypes.INT, description="Items per page."),
        OpenApiParameter(
            "sortBy",
            OpenApiTypes.STR,
            description=f"Product attribute to sort by (default ``{default_sort}``).",
        ),
        OpenApiParameter("sortDir", OpenApiTypes.STR, enum=["asc", "desc"]),
    ]


@extend_schema(tags=["products"])
class ProductViewSet(ViewSet):
    """ViewSet for the product catalog.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    All ORM access goes through the service/repository layer.
    """

    lookup_value_regex = r"[0-9]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def _page_request(self, request: Request, default_sort: str = "id"):
        params = request.query_params
        return self._service.validator.page_request(
            page=params.get("page"),
            size=params.get("size"),
            sort_by=params.get("sortBy"),
            sort_dir=params.get("sortDir"),
            default_sort=default_sort,
        )

    # ------------------------------------------------------------------
    # Create / Retrieve / Update / Destroy
    # ------------------------------------------------------------------

    @extend_schema(
        request=ProductRequestDTO,
        responses={201: ProductResponseDTO, 400: ERROR, 409: ERROR},
    )
    def create(self, request: Request) -> Response:
        """POST /api/v1/products"""
        try:
            product = self._service.create_product(request.data)
        except ProductValidationError as exc:
            return _validation_error(exc)
        except DuplicateProductCode as exc:
            return _conflict(exc)
        return Response(_serialize(product), status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[ID_PARAMETER], responses={200: ProductResponseDTO, 404: ERROR}
    )
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}"""
        try:
            product = self._service.get_product(int(pk))
        except ProductNotFound as exc:
            return _not_found(exc)
        return Response(_serialize(product))

    @extend_schema(
        parameters=[ID_PARAMETER],
        request=ProductRequestDTO,
        responses={200: ProductResponseDTO, 400: ERROR, 404: ERROR, 409: ERROR},
    )
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}"""
        try:
            product = self._service.update_product(int(pk), request.data)
        except ProductNotFound as exc:
            return _not_found(exc)
        except ProductValidationError as exc:
            return _validation_error(exc)
        except DuplicateProductCode as exc:
            return _conflict(exc)
        return Response(_serialize(product))

    @extend_schema(parameters=[ID_PARAMETER], responses={204: None, 404: ERROR})
    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}"""
        try:
            self._service.delete_product(int(pk))
        except ProductNotFound as exc:
            return _not_found(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[OpenApiParameter("code", OpenApiTypes.STR, OpenApiParameter.PATH)],
        responses={200: ProductResponseDTO, 404: ERROR},
    )
    @action(detail=False, methods=["get"], url_path=r"code/(?P<code>[^/]+)")
    def by_code(self, request: Request, code: str) -> Response:
        """GET /api/v1/products/code/{code}"""
        try:
            product = self._service.get_product_by_code(code)
        except ProductNotFound as exc:
            return _not_found(exc)
        return Response(_serialize(product))

    # ------------------------------------------------------------------
    # Paged queries
    # ------------------------------------------------------------------

    @extend_schema(
        parameters=_paging_parameters("id"), responses={200: PAGE, 400: ERROR}
    )
    def list(self, request: Request) -> Response:
        """GET /api/v1/products?page&size&sortBy&sortDir"""
        try:
            page = self._service.list_products(self._page_request(request))
        except ProductValidationError as exc:
            return _validation_error(exc)
        return Response(_page_body(page))

    @extend_schema(
        parameters=[
            OpenApiParameter(
                "q",
                OpenApiTypes.STR,
                description="Case-insensitive substring of name or description.",
            ),
            *_paging_parameters("name"),
        ],
        responses={200: PAGE, 400: ERROR},
    )
    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request: Request) -> Response:
        """GET /api/v1/products/search?q"""
        try:
            page = self._service.search_products(
                request.query_params.get("q", ""),
                self._page_request(request, default_sort="name"),
            )
        except ProductValidationError as exc:
            return _validation_error(exc)
        return Response(_page_body(page))

    @extend_schema(
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, OpenApiParameter.PATH),
            OpenApiParameter("active", OpenApiTypes.BOOL),
            *_paging_parameters("name"),
        ],
        responses={200: PAGE, 400: ERROR},
    )
    @action(
        detail=False, methods=["get"], url_path=r"category/(?P<category>[^/]+)"
    )
    def by_category(self, request: Request, category: str) -> Response:
        """GET /api/v1/products/category/{category}?active"""
        try:
            is_active = self._service.validator.active_flag(
                request.query_params.get("active")
            )
            page = self._service.products_by_category(
                category,
                self._page_request(request, default_sort="name"),
                is_active=is_active,
            )
        except ProductValidationError as exc:
            return _validation_error(exc)
        return Response(_page_body(page))

    @extend_schema(
        parameters=[
            OpenApiParameter("minPrice", OpenApiTypes.DECIMAL, required=True),
            OpenApiParameter("maxPrice", OpenApiTypes.DECIMAL, required=True),
            *_paging_parameters("price"),
        ],
        responses={200: PAGE, 400: ERROR},
    )
    @action(detail=False, methods=["get"], url_path="price-range")
    def price_range(self, request: Request) -> Response:
        """GET /api/v1/products/price-range?minPrice&maxPrice"""
        params = request.query_params
        try:
            min_price, max_price = self._service.validator.price_range(
                params.get("minPrice"), params.get("maxPrice")
            )
            page = self._service.products_by_price_range(
                min_price,
                max_price,
                self._page_request(request, default_sort="price"),
            )
        except ProductValidationError as exc:
            return _validation_error(exc)
        return Response(_page_body(page))

    @extend_schema(
        parameters=_paging_parameters("name"), responses={200: PAGE, 400: ERROR}
    )
    @action(detail=False, methods=["get"], url_path="active")
    def active(self, request: Request) -> Response:
        """GET /api/v1/products/active"""
        try:
            page = self._service.active_products(
                self._page_request(request, default_sort="name")
            )
        except ProductValidationError as exc:
            return _validation_error(exc)
        return Response(_page_body(page))

    # ------------------------------------------------------------------
    # Unpaged queries
    # ------------------------------------------------------------------

    @extend_schema(responses={200: {"type": "array", "items": {"type": "string"}}})
    @action(detail=False, methods=["get"], url_path="categories")
    def categories(self, request: Request) -> Response:
        """GET /api/v1/products/categories"""
        return Response(self._service.all_categories())

    @extend_schema(
        parameters=[OpenApiParameter("threshold", OpenApiTypes.INT)],
        responses={200: PRODUCT_LIST, 400: ERROR},
    )
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request: Request) -> Response:
        """GET /api/v1/products/low-stock?threshold"""
        try:
            threshold = self._service.validator.threshold(
                request.query_params.get("threshold")
            )
        except ProductValidationError as exc:
            return _validation_error(exc)
        products = self._service.low_stock_products(threshold)
        return Response([_serialize(product) for product in products])

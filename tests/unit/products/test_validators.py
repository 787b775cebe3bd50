"""Unit tests for ProductValidator.

Covers:
- validate: all violations reported together, field keys, non-mapping bodies.
- ensure_code_available: duplicate detection, unchanged code skips look-up.
- page_request: defaults, bounds, sort-field whitelist, direction fallback.
- price_range / threshold / active_flag parsing.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from django.http import QueryDict

from modules.core.pagination import Direction
from modules.products.exceptions import DuplicateProductCode, ProductValidationError
from modules.products.validators import ProductValidator

pytestmark = pytest.mark.unit


@pytest.fixture()
def mock_repo():
    repo = MagicMock()
    repo.exists_by_code.return_value = False
    return repo


@pytest.fixture()
def validator(mock_repo):
    return ProductValidator(mock_repo)


# ===========================================================================
# validate
# ===========================================================================


class TestValidate:
    def test_valid_payload(self, validator):
        dto = validator.validate({"code": "SKU1", "name": "Widget", "price": "9.99"})
        assert dto.code == "SKU1"
        assert dto.price == Decimal("9.99")

    def test_reports_every_invalid_field(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.validate(
                {"code": "", "name": "N" * 101, "price": "-1", "description": "d" * 501}
            )

        assert set(exc_info.value.errors) == {"code", "name", "price", "description"}

    def test_missing_required_fields(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.validate({})

        assert set(exc_info.value.errors) == {"code", "name", "price"}

    def test_value_error_prefix_stripped(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.validate({"code": " ", "name": "Widget", "price": "1.00"})

        assert exc_info.value.errors["code"] == ["must not be blank"]

    def test_non_mapping_body_rejected(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.validate(["not", "an", "object"])

        assert "non_field_errors" in exc_info.value.errors

    def test_accepts_query_dict(self, validator):
        data = QueryDict("code=SKU1&name=Widget&price=5.00")
        dto = validator.validate(data)
        assert dto.name == "Widget"

    def test_never_touches_storage(self, validator, mock_repo):
        with pytest.raises(ProductValidationError):
            validator.validate({})
        mock_repo.assert_not_called()
        mock_repo.exists_by_code.assert_not_called()


# ===========================================================================
# ensure_code_available
# ===========================================================================


class TestEnsureCodeAvailable:
    def test_free_code_passes(self, validator, mock_repo):
        validator.ensure_code_available("SKU1")
        mock_repo.exists_by_code.assert_called_once_with("SKU1")

    def test_taken_code_raises(self, validator, mock_repo):
        mock_repo.exists_by_code.return_value = True

        with pytest.raises(DuplicateProductCode, match="SKU1") as exc_info:
            validator.ensure_code_available("SKU1")

        assert exc_info.value.code == "SKU1"

    def test_unchanged_code_skips_lookup(self, validator, mock_repo):
        mock_repo.exists_by_code.return_value = True

        validator.ensure_code_available("SKU1", current_code="SKU1")

        mock_repo.exists_by_code.assert_not_called()

    def test_code_comparison_is_case_sensitive(self, validator, mock_repo):
        validator.ensure_code_available("sku1", current_code="SKU1")
        mock_repo.exists_by_code.assert_called_once_with("sku1")


# ===========================================================================
# page_request
# ===========================================================================


class TestPageRequest:
    def test_defaults(self, validator, settings):
        settings.DEFAULT_PAGE_SIZE = 10
        request = validator.page_request()
        assert request.page == 0
        assert request.size == 10
        assert request.sort_by == "id"
        assert request.direction is Direction.ASC

    def test_parses_query_strings(self, validator):
        request = validator.page_request(page="2", size="5", sort_by="price", sort_dir="DESC")
        assert request.page == 2
        assert request.size == 5
        assert request.sort_by == "price"
        assert request.direction is Direction.DESC

    def test_default_sort_used_when_absent(self, validator):
        assert validator.page_request(default_sort="name").sort_by == "name"
        assert validator.page_request(sort_by="", default_sort="price").sort_by == "price"

    def test_explicit_sort_beats_default(self, validator):
        request = validator.page_request(sort_by="code", default_sort="name")
        assert request.sort_by == "code"

    def test_camel_case_sort_alias(self, validator):
        request = validator.page_request(sort_by="stockQuantity")
        assert request.sort_by == "stock_quantity"

    def test_unknown_direction_is_ascending(self, validator):
        request = validator.page_request(sort_dir="upwards")
        assert request.direction is Direction.ASC

    def test_unknown_sort_field_rejected(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.page_request(sort_by="password")
        assert "sortBy" in exc_info.value.errors

    def test_orm_lookup_injection_rejected(self, validator):
        with pytest.raises(ProductValidationError):
            validator.page_request(sort_by="name__icontains")

    @pytest.mark.parametrize("page", ["-1", "abc"])
    def test_bad_page(self, validator, page):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.page_request(page=page)
        assert "page" in exc_info.value.errors

    @pytest.mark.parametrize("size", ["0", "101", "x"])
    def test_bad_size(self, validator, settings, size):
        settings.MAX_PAGE_SIZE = 100
        with pytest.raises(ProductValidationError) as exc_info:
            validator.page_request(size=size)
        assert "size" in exc_info.value.errors

    def test_all_paging_errors_reported_together(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.page_request(page="-1", size="0", sort_by="nope")
        assert set(exc_info.value.errors) == {"page", "size", "sortBy"}


# ===========================================================================
# price_range / threshold / active_flag
# ===========================================================================


class TestPriceRange:
    def test_parses_bounds(self, validator):
        assert validator.price_range("10.00", "20") == (Decimal("10.00"), Decimal("20"))

    def test_equal_bounds_allowed(self, validator):
        assert validator.price_range("5", "5") == (Decimal("5"), Decimal("5"))

    def test_missing_bounds(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.price_range(None, "")
        assert set(exc_info.value.errors) == {"minPrice", "maxPrice"}

    @pytest.mark.parametrize("raw", ["cheap", "NaN", "Infinity"])
    def test_non_numeric_bound(self, validator, raw):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.price_range(raw, "10")
        assert "minPrice" in exc_info.value.errors

    def test_inverted_range(self, validator):
        with pytest.raises(ProductValidationError) as exc_info:
            validator.price_range("20", "10")
        assert "minPrice" in exc_info.value.errors


class TestThreshold:
    def test_default_from_settings(self, validator, settings):
        settings.LOW_STOCK_THRESHOLD = 7
        assert validator.threshold() == 7

    def test_explicit_value(self, validator):
        assert validator.threshold("5") == 5

    def test_invalid_value(self, validator):
        with pytest.raises(ProductValidationError):
            validator.threshold("few")


class TestActiveFlag:
    @pytest.mark.parametrize("raw,expected", [("true", True), ("False", False), ("1", True), (None, None)])
    def test_parses(self, validator, raw, expected):
        assert validator.active_flag(raw) is expected

    def test_invalid(self, validator):
        with pytest.raises(ProductValidationError):
            validator.active_flag("maybe")

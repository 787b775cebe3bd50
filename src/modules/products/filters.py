import django_filters
from django.db.models import Q

from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method="filter_search", strip=False)
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    max_stock = django_filters.NumberFilter(
        field_name="stock_quantity", lookup_expr="lte"
    )
    is_active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Product
        fields = ["q", "category", "min_price", "max_price", "max_stock", "is_active"]

    def filter_search(self, queryset, name, value):
        # name OR description, case-insensitive substring
        return queryset.filter(
            Q(name__icontains=value) | Q(description__icontains=value)
        )

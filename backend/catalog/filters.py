import django_filters
from django.db.models import Q, F
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Product list filters"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    status = django_filters.ChoiceFilter(choices=Product.STATUS_CHOICES)
    low_stock = django_filters.BooleanFilter(method='filter_low_stock', label='Low Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'status', 'low_stock']

    def filter_search(self, queryset, name, value):
        """Match name or SKU, case-insensitive"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(sku__icontains=value))

    def filter_low_stock(self, queryset, name, value):
        if value:
            return queryset.filter(min_stock__gt=0, stock__lte=F('min_stock'))
        return queryset

import django_filters
from django.conf import settings
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Basic search - searches across name, description and category
    search = django_filters.CharFilter(method='filter_search', label='Search')

    # Direct field filters
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    farmer = django_filters.NumberFilter(field_name='farmer_id', lookup_expr='exact')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    # Stock status filter
    low_stock = django_filters.BooleanFilter(method='filter_low_stock', label='Low Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'farmer', 'min_price', 'max_price', 'low_stock']

    def filter_search(self, queryset, name, value):
        """Multi-word search: every word must appear in the name, description or category"""
        if not value or not value.strip():
            return queryset
        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) | Q(description__icontains=word) | Q(category__icontains=word)
            )
        return queryset.distinct()

    def filter_low_stock(self, queryset, name, value):
        threshold = settings.AGROMARKET['PRODUCT_LOW_STOCK_KG']
        if value is True:
            return queryset.filter(quantity__lt=threshold)
        if value is False:
            return queryset.filter(quantity__gte=threshold)
        return queryset

import django_filters
from django.db.models import Q
from .models import InventoryItem


class InventoryItemFilter(django_filters.FilterSet):
    """Filter for warehouse inventory"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    warehouse_location = django_filters.CharFilter(field_name='warehouse_location', lookup_expr='iexact')
    stored_from = django_filters.DateFilter(field_name='stored_date', lookup_expr='date__gte')
    stored_to = django_filters.DateFilter(field_name='stored_date', lookup_expr='date__lte')

    class Meta:
        model = InventoryItem
        fields = ['search', 'warehouse_location', 'stored_from', 'stored_to']

    def filter_search(self, queryset, name, value):
        if not value or not value.strip():
            return queryset
        for word in value.split():
            queryset = queryset.filter(Q(item_name__icontains=word) | Q(warehouse_location__icontains=word))
        return queryset

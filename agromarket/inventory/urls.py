from django.urls import path
from .views import inventory_list_create, inventory_low_stock, inventory_expiring, inventory_detail

urlpatterns = [
    path('inventory/', inventory_list_create, name='inventory-list-create'),
    path('inventory/low-stock/', inventory_low_stock, name='inventory-low-stock'),
    path('inventory/expiring/', inventory_expiring, name='inventory-expiring'),
    path('inventory/<int:pk>/', inventory_detail, name='inventory-detail'),
]

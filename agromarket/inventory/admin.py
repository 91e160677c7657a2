from django.contrib import admin
from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['item_name', 'quantity', 'warehouse_location', 'stored_date', 'expiration_date']
    list_filter = ['warehouse_location', 'stored_date']
    search_fields = ['item_name', 'warehouse_location']
    readonly_fields = ['created_at', 'updated_at']

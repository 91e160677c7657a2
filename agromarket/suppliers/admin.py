from django.contrib import admin
from .models import Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['supplier', 'contact', 'email', 'delivery_count', 'collected_amount', 'quality_rating',
                    'last_delivery_date']
    search_fields = ['supplier', 'contact', 'email']
    list_filter = ['quality_rating']
    readonly_fields = ['created_at', 'updated_at']

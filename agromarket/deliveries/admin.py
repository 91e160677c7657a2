from django.contrib import admin
from .models import Delivery


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer', 'status', 'scheduled_date', 'assigned_to']
    list_filter = ['status', 'scheduled_date']
    search_fields = ['order_number', 'customer', 'address']
    readonly_fields = ['created_at', 'updated_at']

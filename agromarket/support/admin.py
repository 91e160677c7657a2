from django.contrib import admin
from .models import SupportTicket, FarmerSupportTicket


class BaseTicketAdmin(admin.ModelAdmin):
    list_display = ['subject', 'category', 'priority', 'farmer_id', 'is_answered', 'created_at']
    list_filter = ['category', 'priority', 'created_at']
    search_fields = ['subject', 'description', 'farmer_id']
    readonly_fields = ['created_at', 'updated_at', 'replied_at']

    @admin.display(boolean=True, description='Answered')
    def is_answered(self, obj):
        return obj.is_answered


admin.site.register(SupportTicket, BaseTicketAdmin)
admin.site.register(FarmerSupportTicket, BaseTicketAdmin)

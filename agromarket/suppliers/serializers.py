from decimal import Decimal
from rest_framework import serializers
from .models import Supplier


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'supplier', 'contact', 'email', 'collected_amount', 'delivery_count', 'quality_rating',
                  'last_delivery_date', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_email(self, value):
        return value.strip().lower()


class SupplierDeliverySerializer(serializers.Serializer):
    """Input for recording a delivery received from a supplier"""
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    delivered_at = serializers.DateTimeField(required=False)
    quality_rating = serializers.DecimalField(
        max_digits=3, decimal_places=1, required=False,
        min_value=Decimal('0'), max_value=Decimal('5')
    )

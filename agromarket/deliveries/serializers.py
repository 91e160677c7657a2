from rest_framework import serializers
from .models import Delivery


class DeliverySerializer(serializers.ModelSerializer):
    assigned_to_name = serializers.CharField(source='assigned_to.username', read_only=True, allow_null=True)

    class Meta:
        model = Delivery
        fields = ['id', 'order', 'order_number', 'customer', 'address', 'items', 'scheduled_date', 'status',
                  'assigned_to', 'assigned_to_name', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_assigned_to(self, value):
        if value is not None and value.role not in ('delivery', 'admin'):
            raise serializers.ValidationError("Deliveries can only be assigned to delivery staff")
        return value


class DeliveryStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Delivery.STATUS_CHOICES)

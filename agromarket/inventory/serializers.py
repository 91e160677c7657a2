from rest_framework import serializers
from .models import InventoryItem


class InventoryItemSerializer(serializers.ModelSerializer):
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = ['id', 'item_name', 'quantity', 'warehouse_location', 'stored_date', 'expiration_date',
                  'is_expired', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        stored_date = attrs.get('stored_date', getattr(self.instance, 'stored_date', None))
        expiration_date = attrs.get('expiration_date', getattr(self.instance, 'expiration_date', None))
        if stored_date and expiration_date and expiration_date < stored_date:
            raise serializers.ValidationError({'expiration_date': 'Expiration date cannot be before the stored date'})
        return attrs

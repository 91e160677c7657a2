from decimal import Decimal, ROUND_HALF_UP
from django.db import transaction
from rest_framework import serializers
from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal('0.00'))
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=Decimal('0.001'))
    image = serializers.CharField(required=False, allow_blank=True, max_length=500)
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'name', 'price', 'quantity', 'image', 'line_total']

    def get_line_total(self, obj):
        return float(obj.get_line_total())

    def validate(self, attrs):
        product = attrs.get('product')
        if product is None and (not attrs.get('name') or attrs.get('price') is None):
            raise serializers.ValidationError("Each item needs a product or an explicit name and price")
        if product is not None:
            # Snapshot catalog data the client did not send
            if not attrs.get('name'):
                attrs['name'] = product.name
            if attrs.get('price') is None:
                attrs['price'] = product.price
            if not attrs.get('image'):
                attrs['image'] = product.image_url
        return attrs


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True)
    order_number = serializers.CharField(read_only=True)
    customer_name = serializers.CharField(source='customer.username', read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'customer', 'customer_name', 'items', 'total_amount', 'status',
                  'shipping_address', 'payment_method', 'created_at', 'updated_at']
        read_only_fields = ['customer', 'total_amount', 'status', 'created_at', 'updated_at']

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("An order must contain at least one item")
        return value

    def _replace_items(self, order, items_data):
        order.items.all().delete()
        OrderItem.objects.bulk_create([OrderItem(order=order, **item_data) for item_data in items_data])
        order.total_amount = order.get_total().quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        order.save(update_fields=['total_amount', 'updated_at'])

    @transaction.atomic
    def create(self, validated_data):
        items_data = validated_data.pop('items')
        order = Order.objects.create(**validated_data)
        self._replace_items(order, items_data)
        return order

    @transaction.atomic
    def update(self, instance, validated_data):
        items_data = validated_data.pop('items', None)
        instance = super().update(instance, validated_data)
        if items_data is not None:
            self._replace_items(instance, items_data)
        return instance


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)

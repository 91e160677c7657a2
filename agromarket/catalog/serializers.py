from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    farmer_name = serializers.CharField(source='farmer.username', read_only=True)
    image = serializers.ImageField(required=False, allow_null=True, use_url=False)
    image_url = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'category', 'price', 'quantity', 'image', 'image_url',
                  'farmer', 'farmer_name', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def update(self, instance, validated_data):
        # Keep the existing image unless a new file was uploaded
        if validated_data.get('image', None) is None:
            validated_data.pop('image', None)
            return super().update(instance, validated_data)

        old_image = instance.image.name if instance.image else None
        old_url = instance.image_url
        product = super().update(instance, validated_data)
        # Order lines keep pointing at the image they were placed with
        if old_image and old_image != product.image.name and not product.order_items.filter(image=old_url).exists():
            product.image.storage.delete(old_image)
        return product

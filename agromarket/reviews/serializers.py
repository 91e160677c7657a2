from rest_framework import serializers
from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'product', 'product_name', 'user', 'username', 'rating', 'comment', 'created_at']
        read_only_fields = ['user', 'created_at']

    def validate(self, attrs):
        request = self.context.get('request')
        product = attrs.get('product')
        if self.instance is None and request and product is not None:
            if Review.objects.filter(product=product, user=request.user).exists():
                raise serializers.ValidationError({'product': 'You have already reviewed this product'})
        return attrs

import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer
from agromarket.core.cache_utils import (
    make_cache_key, get_cached, set_cached, PRODUCT_LIST_PREFIX, PRODUCT_LIST_CACHE_TTL,
)
from agromarket.core.permissions import is_admin_user, is_farmer_or_admin

logger = logging.getLogger('agromarket.catalog')


def can_manage_product(user, product):
    """Admins manage every product, farmers only their own"""
    if is_admin_user(user):
        return True
    return user.is_farmer and product.farmer_id == user.id


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List active products or create a new product (farmers and admins)"""
    if request.method == 'GET':
        cache_key = make_cache_key(PRODUCT_LIST_PREFIX, tuple(sorted(request.query_params.items())))
        cached_data = get_cached(cache_key)
        if cached_data is not None:
            response = Response(cached_data)
            response['X-Cache'] = 'HIT'
            return response

        queryset = Product.objects.select_related('farmer').filter(is_active=True)
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

        serializer = ProductSerializer(filterset.qs, many=True)
        set_cached(cache_key, serializer.data, PRODUCT_LIST_CACHE_TTL)
        response = Response(serializer.data)
        response['X-Cache'] = 'MISS'
        return response

    if not is_farmer_or_admin(request.user):
        logger.warning(f"User {request.user.username} attempted to create a product without farmer role")
        return Response({'error': 'Only farmers and administrators can add products'}, status=status.HTTP_403_FORBIDDEN)

    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        try:
            if is_admin_user(request.user) and serializer.validated_data.get('farmer'):
                product = serializer.save()
            else:
                product = serializer.save(farmer=request.user)
        except Exception as e:
            logger.error(f"Failed to create product: {e}", exc_info=True)
            return Response({'error': 'Failed to create product'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.info(f"Product '{product.name}' created by {request.user.username}")
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Product creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)

    if not can_manage_product(request.user, product):
        logger.warning(f"User {request.user.username} attempted to modify product {pk}")
        return Response({'error': 'You can only modify your own products'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            try:
                if is_admin_user(request.user):
                    serializer.save()
                else:
                    serializer.save(farmer=request.user)
            except Exception as e:
                logger.error(f"Failed to update product {pk}: {e}", exc_info=True)
                return Response({'error': 'Failed to update product'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
            logger.info(f"Product {pk} updated by {request.user.username}")
            return Response(serializer.data)
        logger.warning(f"Product update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleting product {pk} ({product.name})")
        try:
            product.delete()
        except Exception as e:
            logger.error(f"Failed to delete product {pk}: {e}", exc_info=True)
            return Response({'error': 'Failed to delete product'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({'message': 'Product deleted successfully'}, status=status.HTTP_200_OK)

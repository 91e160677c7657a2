import logging
from datetime import timedelta
from django.conf import settings
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .filters import InventoryItemFilter
from .models import InventoryItem
from .serializers import InventoryItemSerializer
from agromarket.core.permissions import is_farmer_or_admin
from agromarket.core.utils import create_audit_log

logger = logging.getLogger('agromarket.inventory')


def get_low_stock_items(threshold=None):
    """Items at or below the low stock threshold, lowest quantity first"""
    if threshold is None:
        threshold = settings.AGROMARKET['LOW_STOCK_THRESHOLD']
    return InventoryItem.objects.filter(quantity__lte=threshold).order_by('quantity', 'item_name')


def get_expiring_items(days=None, now=None):
    """Items expiring between now and now + days; already expired items are excluded"""
    if days is None:
        days = settings.AGROMARKET['EXPIRY_WINDOW_DAYS']
    now = now or timezone.now()
    return InventoryItem.objects.filter(
        expiration_date__isnull=False,
        expiration_date__gte=now,
        expiration_date__lte=now + timedelta(days=days),
    ).order_by('expiration_date')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inventory_list_create(request):
    """List inventory items or add stock to a warehouse"""
    if request.method == 'GET':
        filterset = InventoryItemFilter(request.query_params, queryset=InventoryItem.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = InventoryItemSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    if not is_farmer_or_admin(request.user):
        return Response({'error': 'Only farmers and administrators can manage inventory'}, status=status.HTTP_403_FORBIDDEN)

    serializer = InventoryItemSerializer(data=request.data)
    if serializer.is_valid():
        try:
            item = serializer.save()
        except Exception as e:
            logger.error(f"Failed to create inventory item: {e}", exc_info=True)
            return Response({'error': 'Failed to create inventory item'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.info(f"Inventory item '{item.item_name}' ({item.quantity}) added at {item.warehouse_location} by {request.user.username}")
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Inventory creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_low_stock(request):
    """Items running low"""
    threshold = settings.AGROMARKET['LOW_STOCK_THRESHOLD']
    serializer = InventoryItemSerializer(get_low_stock_items(threshold), many=True)
    return Response({'threshold': threshold, 'count': len(serializer.data), 'items': serializer.data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_expiring(request):
    """Items about to expire; ?days= overrides the default window"""
    days = settings.AGROMARKET['EXPIRY_WINDOW_DAYS']
    days_param = request.query_params.get('days')
    if days_param:
        try:
            days = int(days_param)
        except ValueError:
            return Response({'error': 'days must be a whole number'}, status=status.HTTP_400_BAD_REQUEST)
        if days < 0:
            return Response({'error': 'days cannot be negative'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        items = get_expiring_items(days)
    except OverflowError:
        return Response({'error': 'days is too large'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = InventoryItemSerializer(items, many=True)
    return Response({'days': days, 'count': len(serializer.data), 'items': serializer.data})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_detail(request, pk):
    """Retrieve, update or delete an inventory item"""
    item = get_object_or_404(InventoryItem, pk=pk)

    if request.method == 'GET':
        return Response(InventoryItemSerializer(item).data)

    if not is_farmer_or_admin(request.user):
        return Response({'error': 'Only farmers and administrators can manage inventory'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = InventoryItemSerializer(item, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            try:
                serializer.save()
            except Exception as e:
                logger.error(f"Failed to update inventory item {pk}: {e}", exc_info=True)
                return Response({'error': 'Failed to update inventory item'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
            logger.info(f"Inventory item {pk} updated by {request.user.username}")
            return Response(serializer.data)
        logger.warning(f"Inventory update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleting inventory item {pk} ({item.item_name})")
        try:
            item.delete()
        except Exception as e:
            logger.error(f"Failed to delete inventory item {pk}: {e}", exc_info=True)
            return Response({'error': 'Failed to delete inventory item'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        create_audit_log(
            request=request,
            action='delete',
            model_name='InventoryItem',
            object_id=str(pk),
            object_name=item.item_name,
            changes={'quantity': item.quantity, 'warehouse_location': item.warehouse_location},
        )
        return Response({'message': 'Inventory item deleted successfully'}, status=status.HTTP_200_OK)

import logging
from decimal import Decimal
from django.db.models import Sum
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .models import Order
from .serializers import OrderSerializer, OrderStatusSerializer
from agromarket.core.permissions import is_admin_user
from agromarket.core.utils import create_audit_log

logger = logging.getLogger('agromarket.orders')


def get_order_queryset():
    return Order.objects.select_related('customer').prefetch_related('items')


def can_access_order(user, order):
    return is_admin_user(user) or order.customer_id == user.id


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders (admins see all, customers their own) or place a new order"""
    if request.method == 'GET':
        queryset = get_order_queryset()
        if not is_admin_user(request.user):
            queryset = queryset.filter(customer=request.user)

        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        serializer = OrderSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = OrderSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Order creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order = serializer.save(customer=request.user)
    except Exception as e:
        logger.error(f"Failed to create order for {request.user.username}: {e}", exc_info=True)
        return Response({'error': 'Failed to create order'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='order_create',
        model_name='Order',
        object_id=str(order.id),
        object_name=order.order_number,
        changes={'total_amount': str(order.total_amount), 'items': order.items.count()},
    )
    logger.info(f"Order {order.order_number} placed by {request.user.username} (total {order.total_amount})")
    return Response({
        'message': 'Order created successfully',
        'order': OrderSerializer(order).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_user_list(request, user_id):
    """Orders placed by a single customer"""
    if not is_admin_user(request.user) and request.user.id != user_id:
        return Response({'error': 'You can only view your own orders'}, status=status.HTTP_403_FORBIDDEN)

    orders = get_order_queryset().filter(customer_id=user_id)
    serializer = OrderSerializer(orders, many=True)
    return Response(serializer.data)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve an order, or edit its items and shipping details while it is pending"""
    order = get_object_or_404(get_order_queryset(), pk=pk)

    if not can_access_order(request.user, order):
        logger.warning(f"User {request.user.username} attempted to access order {pk}")
        return Response({'error': 'You do not have access to this order'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        return Response(OrderSerializer(order).data)

    if order.status != 'pending':
        return Response(
            {'error': f'Only pending orders can be modified (order is {order.status})'},
            status=status.HTTP_400_BAD_REQUEST
        )

    serializer = OrderSerializer(order, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        logger.warning(f"Order update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_total = order.total_amount
    try:
        order = serializer.save()
    except Exception as e:
        logger.error(f"Failed to update order {pk}: {e}", exc_info=True)
        return Response({'error': 'Failed to update order'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    create_audit_log(
        request=request,
        action='order_update',
        model_name='Order',
        object_id=str(order.id),
        object_name=order.order_number,
        changes={'total_amount': {'old': str(old_total), 'new': str(order.total_amount)}},
    )
    logger.info(f"Order {order.order_number} updated by {request.user.username}")
    return Response({
        'message': 'Order updated successfully',
        'order': OrderSerializer(order).data,
    })


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def order_status_update(request, pk):
    """Write a new status directly onto the order"""
    order = get_object_or_404(get_order_queryset(), pk=pk)

    if not can_access_order(request.user, order):
        return Response({'error': 'You do not have access to this order'}, status=status.HTTP_403_FORBIDDEN)

    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = order.status
    order.status = serializer.validated_data['status']
    try:
        order.save(update_fields=['status', 'updated_at'])
    except Exception as e:
        logger.error(f"Failed to update status of order {pk}: {e}", exc_info=True)
        return Response({'error': 'Failed to update order status'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='order_status',
        model_name='Order',
        object_id=str(order.id),
        object_name=order.order_number,
        changes={'status': {'old': old_status, 'new': order.status}},
    )
    logger.info(f"Order {order.order_number} status {old_status} -> {order.status} by {request.user.username}")
    return Response({
        'message': 'Order status updated successfully',
        'order': OrderSerializer(order).data,
    })


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_cancel(request, pk):
    """Mark an order as cancelled; the record is kept"""
    order = get_object_or_404(get_order_queryset(), pk=pk)

    if not can_access_order(request.user, order):
        return Response({'error': 'You do not have access to this order'}, status=status.HTTP_403_FORBIDDEN)

    if order.status == 'completed':
        return Response({'error': 'Completed orders cannot be cancelled'}, status=status.HTTP_400_BAD_REQUEST)

    if order.status == 'cancelled':
        return Response({
            'message': 'Order is already cancelled',
            'order': OrderSerializer(order).data,
        })

    order.status = 'cancelled'
    try:
        order.save(update_fields=['status', 'updated_at'])
    except Exception as e:
        logger.error(f"Failed to cancel order {pk}: {e}", exc_info=True)
        return Response({'error': 'Failed to cancel order'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    create_audit_log(
        request=request,
        action='order_cancel',
        model_name='Order',
        object_id=str(order.id),
        object_name=order.order_number,
        changes={'status': {'old': 'pending', 'new': 'cancelled'}},
    )
    logger.info(f"Order {order.order_number} cancelled by {request.user.username}")
    return Response({
        'message': 'Order cancelled successfully',
        'order': OrderSerializer(order).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_total_amount(request):
    """Revenue across all orders that were not cancelled"""
    queryset = Order.objects.exclude(status='cancelled')
    if not is_admin_user(request.user):
        queryset = queryset.filter(customer=request.user)

    total = queryset.aggregate(total=Sum('total_amount'))['total'] or Decimal('0.00')
    return Response({'totalAmount': float(total)})

import logging
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .models import Delivery
from .serializers import DeliverySerializer, DeliveryStatusSerializer
from agromarket.core.permissions import is_admin_user
from agromarket.core.utils import create_audit_log

logger = logging.getLogger('agromarket.deliveries')


def can_view_deliveries(user):
    return is_admin_user(user) or user.role == 'delivery'


def get_visible_deliveries(user):
    """Admins see every delivery, couriers those assigned to them or not yet assigned"""
    queryset = Delivery.objects.select_related('assigned_to', 'order')
    if is_admin_user(user):
        return queryset
    return queryset.filter(Q(assigned_to=user) | Q(assigned_to__isnull=True))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def delivery_list_create(request):
    """List deliveries or schedule a new one"""
    if not can_view_deliveries(request.user):
        return Response({'error': 'Only delivery staff can access deliveries'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        queryset = get_visible_deliveries(request.user)
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        serializer = DeliverySerializer(queryset, many=True)
        return Response(serializer.data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can schedule deliveries'}, status=status.HTTP_403_FORBIDDEN)

    serializer = DeliverySerializer(data=request.data)
    if serializer.is_valid():
        try:
            delivery = serializer.save()
        except Exception as e:
            logger.error(f"Failed to create delivery: {e}", exc_info=True)
            return Response({'error': 'Failed to create delivery'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.info(f"Delivery {delivery.id} for {delivery.customer} scheduled by {request.user.username}")
        return Response(DeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Delivery creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def delivery_metrics(request):
    """Delivery counts per status"""
    if not can_view_deliveries(request.user):
        return Response({'error': 'Only delivery staff can access deliveries'}, status=status.HTTP_403_FORBIDDEN)

    counts = {key: 0 for key, _ in Delivery.STATUS_CHOICES}
    rows = get_visible_deliveries(request.user).values('status').annotate(count=Count('id'))
    for row in rows:
        counts[row['status']] = row['count']

    return Response({
        'total': sum(counts.values()),
        'pending': counts['pending'],
        'in_transit': counts['in_transit'],
        'completed': counts['completed'],
    })


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def delivery_detail(request, pk):
    """Retrieve, update or delete a delivery"""
    if not can_view_deliveries(request.user):
        return Response({'error': 'Only delivery staff can access deliveries'}, status=status.HTTP_403_FORBIDDEN)

    delivery = get_object_or_404(get_visible_deliveries(request.user), pk=pk)

    if request.method == 'GET':
        return Response(DeliverySerializer(delivery).data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can modify deliveries'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = DeliverySerializer(delivery, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            try:
                serializer.save()
            except Exception as e:
                logger.error(f"Failed to update delivery {pk}: {e}", exc_info=True)
                return Response({'error': 'Failed to update delivery'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
            logger.info(f"Delivery {pk} updated by {request.user.username}")
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleting delivery {pk}")
        try:
            delivery.delete()
        except Exception as e:
            logger.error(f"Failed to delete delivery {pk}: {e}", exc_info=True)
            return Response({'error': 'Failed to delete delivery'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({'message': 'Delivery deleted successfully'}, status=status.HTTP_200_OK)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def delivery_status_update(request, pk):
    """Move a delivery between pending, in transit and completed"""
    if not can_view_deliveries(request.user):
        return Response({'error': 'Only delivery staff can access deliveries'}, status=status.HTTP_403_FORBIDDEN)

    delivery = get_object_or_404(get_visible_deliveries(request.user), pk=pk)

    serializer = DeliveryStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = delivery.status
    delivery.status = serializer.validated_data['status']
    update_fields = ['status', 'updated_at']
    # A courier picking up an unassigned delivery takes it over
    if delivery.assigned_to_id is None and not is_admin_user(request.user):
        delivery.assigned_to = request.user
        update_fields.append('assigned_to')
    try:
        delivery.save(update_fields=update_fields)
    except Exception as e:
        logger.error(f"Failed to update status of delivery {pk}: {e}", exc_info=True)
        return Response({'error': 'Failed to update delivery status'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='delivery_status',
        model_name='Delivery',
        object_id=str(delivery.id),
        object_name=str(delivery),
        changes={'status': {'old': old_status, 'new': delivery.status}},
    )
    logger.info(f"Delivery {pk} status {old_status} -> {delivery.status} by {request.user.username}")
    return Response(DeliverySerializer(delivery).data)

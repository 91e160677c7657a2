import logging
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from .models import Supplier
from .serializers import SupplierSerializer, SupplierDeliverySerializer
from agromarket.core.permissions import is_admin_user
from agromarket.core.utils import create_audit_log

logger = logging.getLogger('agromarket.suppliers')


def integrity_error_response(e, operation):
    error_msg = str(e)
    logger.error(f"IntegrityError {operation} supplier: {error_msg}", exc_info=True)
    if 'unique' in error_msg.lower():
        return Response({'error': 'A supplier with this email already exists'}, status=status.HTTP_400_BAD_REQUEST)
    return Response({'error': f'Database error occurred while {operation} supplier'}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List suppliers or register a new one (admins)"""
    if request.method == 'GET':
        queryset = Supplier.objects.all()
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(supplier__icontains=search) | Q(contact__icontains=search) | Q(email__icontains=search)
            )
        serializer = SupplierSerializer(queryset, many=True)
        return Response(serializer.data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can manage suppliers'}, status=status.HTTP_403_FORBIDDEN)

    serializer = SupplierSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Supplier creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            supplier = serializer.save()
    except IntegrityError as e:
        return integrity_error_response(e, 'creating')
    except Exception as e:
        logger.error(f"Failed to create supplier: {e}", exc_info=True)
        return Response({'error': 'Failed to create supplier'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Supplier '{supplier.supplier}' created by {request.user.username}")
    return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        return Response(SupplierSerializer(supplier).data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can manage suppliers'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            logger.warning(f"Supplier update validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError as e:
            return integrity_error_response(e, 'updating')
        except Exception as e:
            logger.error(f"Failed to update supplier {pk}: {e}", exc_info=True)
            return Response({'error': 'Failed to update supplier'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.info(f"Supplier {pk} updated by {request.user.username}")
        return Response(serializer.data)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleting supplier {pk} ({supplier.supplier})")
        try:
            supplier.delete()
        except Exception as e:
            logger.error(f"Failed to delete supplier {pk}: {e}", exc_info=True)
            return Response({'error': 'Failed to delete supplier'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        create_audit_log(
            request=request,
            action='delete',
            model_name='Supplier',
            object_id=str(pk),
            object_name=supplier.supplier,
            changes={'email': supplier.email, 'delivery_count': supplier.delivery_count},
        )
        return Response({'message': 'Supplier deleted successfully'}, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def supplier_record_delivery(request, pk):
    """Record a delivery: add to the collected amount and bump the delivery count"""
    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can manage suppliers'}, status=status.HTTP_403_FORBIDDEN)

    serializer = SupplierDeliverySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        with transaction.atomic():
            supplier = Supplier.objects.select_for_update().get(pk=pk)
            supplier.collected_amount = F('collected_amount') + data['amount']
            supplier.delivery_count = F('delivery_count') + 1
            supplier.last_delivery_date = data.get('delivered_at') or timezone.now()
            update_fields = ['collected_amount', 'delivery_count', 'last_delivery_date', 'updated_at']
            if 'quality_rating' in data:
                supplier.quality_rating = data['quality_rating']
                update_fields.append('quality_rating')
            supplier.save(update_fields=update_fields)
            supplier.refresh_from_db()
    except Supplier.DoesNotExist:
        return Response({'error': 'Supplier not found'}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"Failed to record delivery for supplier {pk}: {e}", exc_info=True)
        return Response({'error': 'Failed to record supplier delivery'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='supplier_delivery',
        model_name='Supplier',
        object_id=str(supplier.id),
        object_name=supplier.supplier,
        changes={'amount': str(data['amount']), 'delivery_count': supplier.delivery_count},
    )
    logger.info(f"Delivery of {data['amount']} recorded for supplier {supplier.supplier} by {request.user.username}")
    return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)

import csv
import logging
from decimal import Decimal
from django.conf import settings
from django.db.models import Avg, Count, Sum
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from agromarket.core.cache_utils import (
    make_cache_key, get_cached, set_cached,
    INVENTORY_REPORT_PREFIX, INVENTORY_REPORT_CACHE_TTL, REPORTS_PREFIX, REPORTS_CACHE_TTL,
)
from agromarket.core.permissions import IsAdminRole, is_farmer_or_admin
from agromarket.core.utils import parse_date_param
from agromarket.inventory.models import InventoryItem
from agromarket.inventory.serializers import InventoryItemSerializer
from agromarket.orders.models import Order
from agromarket.suppliers.models import Supplier

logger = logging.getLogger('agromarket.reports')


class InvalidPeriod(ValueError):
    pass


def get_report_period(request):
    """Read date_from/date_to (YYYY-MM-DD, both optional) from the query string"""
    try:
        date_from = parse_date_param(request.query_params.get('date_from'))
        date_to = parse_date_param(request.query_params.get('date_to'))
    except ValueError:
        raise InvalidPeriod('Invalid date format. Use YYYY-MM-DD')
    if date_from and date_to and date_from > date_to:
        raise InvalidPeriod('date_from cannot be after date_to')
    return date_from, date_to


def filter_by_period(queryset, field, date_from, date_to):
    if date_from:
        queryset = queryset.filter(**{f'{field}__date__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{field}__date__lte': date_to})
    return queryset


def get_period_suppliers(date_from, date_to):
    """Suppliers whose last delivery falls in the period; all suppliers without one"""
    suppliers = Supplier.objects.all()
    # Suppliers that never delivered cannot fall inside a period
    if date_from or date_to:
        suppliers = filter_by_period(suppliers.exclude(last_delivery_date__isnull=True),
                                     'last_delivery_date', date_from, date_to)
    return suppliers.order_by('supplier', 'id')


def supplier_report_row(supplier):
    return {
        'id': supplier.id,
        'supplier': supplier.supplier,
        'contact': supplier.contact,
        'email': supplier.email,
        'collected_amount': float(supplier.collected_amount),
        'delivery_count': supplier.delivery_count,
        'quality_rating': float(supplier.quality_rating),
        'last_delivery_date': supplier.last_delivery_date.isoformat() if supplier.last_delivery_date else None,
    }


def forbidden_report():
    return Response({'error': 'Only farmers and administrators can view reports'}, status=status.HTTP_403_FORBIDDEN)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_report(request):
    """Every inventory item"""
    if not is_farmer_or_admin(request.user):
        return forbidden_report()

    cache_key = make_cache_key(INVENTORY_REPORT_PREFIX, 'all')
    cached_data = get_cached(cache_key)
    if cached_data is not None:
        response = Response(cached_data)
        response['X-Cache'] = 'HIT'
        return response

    serializer = InventoryItemSerializer(InventoryItem.objects.all(), many=True)
    data = {'inventory': serializer.data}
    set_cached(cache_key, data, INVENTORY_REPORT_CACHE_TTL)
    response = Response(data)
    response['X-Cache'] = 'MISS'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_summary(request):
    """Inventory and supplier KPIs for an optional stored/delivered date range"""
    if not is_farmer_or_admin(request.user):
        return forbidden_report()

    try:
        date_from, date_to = get_report_period(request)
    except InvalidPeriod as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    cache_key = make_cache_key(REPORTS_PREFIX, 'summary', date_from=str(date_from), date_to=str(date_to))
    cached_data = get_cached(cache_key)
    if cached_data is not None:
        return Response(cached_data)

    inventory = filter_by_period(InventoryItem.objects.all(), 'stored_date', date_from, date_to)
    suppliers = get_period_suppliers(date_from, date_to)

    supplier_stats = suppliers.aggregate(count=Count('id'), average=Avg('quality_rating'))
    average_quality = supplier_stats['average']
    limit = settings.AGROMARKET['TOP_LOW_STOCK_LIMIT']
    top_low_stock = inventory.order_by('quantity', 'item_name')[:limit]

    data = {
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'total_inventory_items': inventory.count(),
        'average_supplier_quality': round(float(average_quality), 1) if average_quality is not None else None,
        'top_low_stock_items': InventoryItemSerializer(top_low_stock, many=True).data,
        'supplier_deliveries_in_period': supplier_stats['count'],
        'suppliers': [supplier_report_row(supplier) for supplier in suppliers],
    }
    set_cached(cache_key, data, REPORTS_CACHE_TTL)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_export(request):
    """CSV download of the inventory, optionally limited to a stored date range"""
    if not is_farmer_or_admin(request.user):
        return forbidden_report()

    try:
        date_from, date_to = get_report_period(request)
    except InvalidPeriod as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    items = filter_by_period(InventoryItem.objects.all(), 'stored_date', date_from, date_to)

    filename = f"inventory_{timezone.now().strftime('%Y%m%d')}.csv"
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    writer = csv.writer(response)
    writer.writerow(['item_name', 'quantity', 'warehouse_location', 'stored_date', 'expiration_date'])
    for item in items.order_by('item_name'):
        writer.writerow([
            item.item_name,
            item.quantity,
            item.warehouse_location,
            item.stored_date.date().isoformat(),
            item.expiration_date.date().isoformat() if item.expiration_date else '',
        ])

    logger.info(f"Inventory export ({items.count()} rows) downloaded by {request.user.username}")
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_export(request):
    """CSV download of the suppliers that delivered in an optional date range"""
    if not is_farmer_or_admin(request.user):
        return forbidden_report()

    try:
        date_from, date_to = get_report_period(request)
    except InvalidPeriod as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    suppliers = get_period_suppliers(date_from, date_to)

    filename = f"suppliers_{timezone.now().strftime('%Y%m%d')}.csv"
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    writer = csv.writer(response)
    writer.writerow(['supplier', 'contact', 'email', 'collected_amount', 'delivery_count',
                     'quality_rating', 'last_delivery_date'])
    for supplier in suppliers:
        writer.writerow([
            supplier.supplier,
            supplier.contact,
            supplier.email,
            supplier.collected_amount,
            supplier.delivery_count,
            supplier.quality_rating,
            supplier.last_delivery_date.date().isoformat() if supplier.last_delivery_date else '',
        ])

    logger.info(f"Supplier export ({suppliers.count()} rows) downloaded by {request.user.username}")
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def sales_report(request):
    """Order count and revenue by status for the admin dashboard"""
    try:
        date_from, date_to = get_report_period(request)
    except InvalidPeriod as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    orders = filter_by_period(Order.objects.all(), 'created_at', date_from, date_to)

    by_status = {key: {'count': 0, 'amount': 0.0} for key, _ in Order.STATUS_CHOICES}
    for row in orders.values('status').annotate(count=Count('id'), amount=Sum('total_amount')):
        by_status[row['status']] = {
            'count': row['count'],
            'amount': float(row['amount'] or Decimal('0.00')),
        }

    revenue = orders.exclude(status='cancelled').aggregate(total=Sum('total_amount'))['total'] or Decimal('0.00')
    total_orders = sum(entry['count'] for entry in by_status.values())
    active_orders = total_orders - by_status['cancelled']['count']

    return Response({
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'summary': {
            'total_orders': total_orders,
            'total_revenue': float(revenue),
            'avg_order_value': float(revenue / active_orders) if active_orders else 0.0,
        },
        'by_status': by_status,
    })

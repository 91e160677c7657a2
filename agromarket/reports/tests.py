"""
Tests for inventory, supplier and sales reports
"""
import csv
import io
from datetime import datetime, timedelta
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.suppliers.models import Supplier


def aware(year, month, day):
    return timezone.make_aware(datetime(year, month, day, 12, 0))


class ReportsAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_customer_cannot_view_reports(self):
        self.client.authenticate_user(self.customer)
        self.assertEqual(self.client.get('/api/v1/reports/inventory/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/reports/sales/').status_code, status.HTTP_403_FORBIDDEN)

    def test_inventory_report_cached_until_inventory_changes(self):
        TestDataFactory.create_inventory_item(item_name='Wheat')
        response = self.client.get('/api/v1/reports/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([i['item_name'] for i in response.data['inventory']], ['Wheat'])
        self.assertEqual(response['X-Cache'], 'MISS')
        self.assertEqual(self.client.get('/api/v1/reports/inventory/')['X-Cache'], 'HIT')

        TestDataFactory.create_inventory_item(item_name='Rice')
        response = self.client.get('/api/v1/reports/inventory/')
        self.assertEqual(response['X-Cache'], 'MISS')
        self.assertEqual(len(response.data['inventory']), 2)

    def test_summary_without_period(self):
        for name, quantity in [('A', 50), ('B', 3), ('C', 12), ('D', 7), ('E', 90), ('F', 1)]:
            TestDataFactory.create_inventory_item(item_name=name, quantity=quantity)
        TestDataFactory.create_supplier(quality_rating=Decimal('4.0'))
        TestDataFactory.create_supplier(quality_rating=Decimal('3.5'))
        TestDataFactory.create_supplier(quality_rating=Decimal('2.0'))

        response = self.client.get('/api/v1/reports/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_inventory_items'], 6)
        self.assertEqual(response.data['average_supplier_quality'], 3.2)
        self.assertEqual([i['item_name'] for i in response.data['top_low_stock_items']], ['F', 'B', 'D', 'C', 'A'])
        self.assertEqual(response.data['supplier_deliveries_in_period'], 3)
        self.assertEqual(response.data['period'], {'from': None, 'to': None})

    def test_summary_with_period(self):
        TestDataFactory.create_inventory_item(item_name='In', stored_date=aware(2024, 3, 10))
        TestDataFactory.create_inventory_item(item_name='Out', stored_date=aware(2024, 4, 10))
        TestDataFactory.create_supplier(quality_rating=Decimal('5.0'), last_delivery_date=aware(2024, 3, 1))
        TestDataFactory.create_supplier(quality_rating=Decimal('1.0'), last_delivery_date=aware(2024, 5, 1))
        TestDataFactory.create_supplier(quality_rating=Decimal('1.0'))

        response = self.client.get('/api/v1/reports/summary/', {'date_from': '2024-03-01', 'date_to': '2024-03-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_inventory_items'], 1)
        self.assertEqual(response.data['average_supplier_quality'], 5.0)
        self.assertEqual(response.data['supplier_deliveries_in_period'], 1)

    def test_summary_without_suppliers(self):
        response = self.client.get('/api/v1/reports/summary/')
        self.assertIsNone(response.data['average_supplier_quality'])
        self.assertEqual(response.data['top_low_stock_items'], [])

    def test_invalid_dates(self):
        response = self.client.get('/api/v1/reports/summary/', {'date_from': '31-03-2024'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/summary/', {'date_from': '2024-04-01', 'date_to': '2024-03-01'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/inventory/export/', {'date_to': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inventory_export_csv(self):
        TestDataFactory.create_inventory_item(item_name='Wheat', quantity=120, warehouse_location='North',
                                              stored_date=aware(2024, 1, 10),
                                              expiration_date=aware(2024, 6, 1))
        TestDataFactory.create_inventory_item(item_name='Barley', stored_date=aware(2023, 1, 10))
        response = self.client.get('/api/v1/reports/inventory/export/', {'date_from': '2024-01-01'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment;', response['Content-Disposition'])
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0], ['item_name', 'quantity', 'warehouse_location', 'stored_date', 'expiration_date'])
        self.assertEqual(rows[1:], [['Wheat', '120', 'North', '2024-01-10', '2024-06-01']])

    def test_sales_report(self):
        tomatoes = TestDataFactory.create_product(price=Decimal('30.00'))
        TestDataFactory.create_order(self.customer, items=[(tomatoes, 2)])
        TestDataFactory.create_order(self.customer, items=[(tomatoes, 1)], status='completed')
        TestDataFactory.create_order(self.customer, items=[(tomatoes, 5)], status='cancelled')

        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_orders'], 3)
        self.assertEqual(response.data['summary']['total_revenue'], 90.0)
        self.assertEqual(response.data['summary']['avg_order_value'], 45.0)
        self.assertEqual(response.data['by_status']['cancelled'], {'count': 1, 'amount': 150.0})

    def test_sales_report_period_excludes_old_orders(self):
        tomatoes = TestDataFactory.create_product(price=Decimal('30.00'))
        TestDataFactory.create_order(self.customer, items=[(tomatoes, 1)])
        tomorrow = (timezone.now() + timedelta(days=1)).date().isoformat()
        response = self.client.get('/api/v1/reports/sales/', {'date_from': tomorrow})
        self.assertEqual(response.data['summary']['total_orders'], 0)
        self.assertEqual(response.data['summary']['avg_order_value'], 0.0)

    def test_summary_lists_suppliers_in_period(self):
        green = TestDataFactory.create_supplier(supplier='Green Valley', quality_rating=Decimal('4.5'),
                                                last_delivery_date=aware(2024, 3, 5))
        Supplier.objects.filter(pk=green.pk).update(collected_amount=Decimal('2500.00'), delivery_count=4)
        TestDataFactory.create_supplier(supplier='Late Harvest', last_delivery_date=aware(2024, 6, 1))
        TestDataFactory.create_supplier(supplier='Never Delivered')

        response = self.client.get('/api/v1/reports/summary/', {'date_from': '2024-03-01', 'date_to': '2024-03-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['suppliers']), 1)
        row = response.data['suppliers'][0]
        self.assertEqual(row['supplier'], 'Green Valley')
        self.assertEqual(row['email'], green.email)
        self.assertEqual(row['collected_amount'], 2500.0)
        self.assertEqual(row['delivery_count'], 4)
        self.assertEqual(row['quality_rating'], 4.5)
        self.assertTrue(row['last_delivery_date'].startswith('2024-03-05'))

        response = self.client.get('/api/v1/reports/summary/')
        self.assertEqual([s['supplier'] for s in response.data['suppliers']],
                         ['Green Valley', 'Late Harvest', 'Never Delivered'])

    def test_supplier_export_csv(self):
        green = TestDataFactory.create_supplier(supplier='Green Valley', quality_rating=Decimal('4.5'),
                                                last_delivery_date=aware(2024, 3, 5))
        Supplier.objects.filter(pk=green.pk).update(collected_amount=Decimal('2500.00'), delivery_count=4)
        TestDataFactory.create_supplier(supplier='Late Harvest', last_delivery_date=aware(2024, 6, 1))

        response = self.client.get('/api/v1/reports/suppliers/export/', {'date_to': '2024-03-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('suppliers_', response['Content-Disposition'])
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0], ['supplier', 'contact', 'email', 'collected_amount', 'delivery_count',
                                   'quality_rating', 'last_delivery_date'])
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[1][0], 'Green Valley')
        self.assertEqual(rows[1][2], green.email)
        self.assertEqual(Decimal(rows[1][3]), Decimal('2500'))
        self.assertEqual(rows[1][4], '4')
        self.assertEqual(Decimal(rows[1][5]), Decimal('4.5'))
        self.assertEqual(rows[1][6], '2024-03-05')

    def test_supplier_export_rules(self):
        response = self.client.get('/api/v1/reports/suppliers/export/', {'date_from': 'March'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/reports/suppliers/export/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

"""
Tests for warehouse inventory: CRUD, low stock, expiry window and CSV import
"""
import os
import tempfile
from datetime import timedelta
from io import StringIO
from unittest import mock
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from agromarket.core.models import AuditLog
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.inventory.models import InventoryItem
from agromarket.inventory.views import get_expiring_items, get_low_stock_items


class InventoryQueryTests(TestCase):

    def test_low_stock_includes_threshold_and_sorts_ascending(self):
        TestDataFactory.create_inventory_item(item_name='Wheat', quantity=20)
        TestDataFactory.create_inventory_item(item_name='Maize', quantity=5)
        TestDataFactory.create_inventory_item(item_name='Barley', quantity=21)
        self.assertEqual([item.item_name for item in get_low_stock_items(20)], ['Maize', 'Wheat'])

    def test_expiring_window(self):
        now = timezone.now()
        TestDataFactory.create_inventory_item(item_name='Milk', expiration_date=now + timedelta(days=1))
        TestDataFactory.create_inventory_item(item_name='Cheese', expiration_date=now + timedelta(days=10))
        TestDataFactory.create_inventory_item(item_name='Spoiled', expiration_date=now - timedelta(days=1))
        TestDataFactory.create_inventory_item(item_name='Salt')
        self.assertEqual([item.item_name for item in get_expiring_items(3, now=now)], ['Milk'])
        self.assertEqual([item.item_name for item in get_expiring_items(30, now=now)], ['Milk', 'Cheese'])

    def test_is_expired(self):
        item = TestDataFactory.create_inventory_item(expiration_date=timezone.now() - timedelta(hours=1))
        self.assertTrue(item.is_expired)
        self.assertFalse(TestDataFactory.create_inventory_item().is_expired)


class InventoryAPITests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_item_defaults_stored_date(self):
        response = self.client.post('/api/v1/inventory/', {
            'item_name': 'Potatoes',
            'quantity': 300,
            'warehouse_location': 'Cold Store 1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNotNone(response.data['stored_date'])
        self.assertIsNone(response.data['expiration_date'])

    def test_negative_quantity_rejected(self):
        response = self.client.post('/api/v1/inventory/', {
            'item_name': 'Potatoes',
            'quantity': -1,
            'warehouse_location': 'Cold Store 1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_expiration_before_stored_date_rejected(self):
        response = self.client.post('/api/v1/inventory/', {
            'item_name': 'Milk',
            'quantity': 10,
            'warehouse_location': 'Dairy',
            'stored_date': '2024-05-10T00:00:00Z',
            'expiration_date': '2024-05-01T00:00:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('expiration_date', response.data)

    def test_customer_cannot_modify_inventory(self):
        item = TestDataFactory.create_inventory_item()
        self.client.authenticate_user(self.customer)
        self.assertEqual(self.client.get(f'/api/v1/inventory/{item.id}/').status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/inventory/{item.id}/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        TestDataFactory.create_inventory_item(item_name='Red Onions', warehouse_location='North')
        TestDataFactory.create_inventory_item(item_name='Garlic', warehouse_location='South')
        response = self.client.get('/api/v1/inventory/', {'warehouse_location': 'north'})
        self.assertEqual([i['item_name'] for i in response.data], ['Red Onions'])
        response = self.client.get('/api/v1/inventory/', {'search': 'garl'})
        self.assertEqual([i['item_name'] for i in response.data], ['Garlic'])

    def test_delete_returns_message_and_audits(self):
        item = TestDataFactory.create_inventory_item(item_name='Beans')
        response = self.client.delete(f'/api/v1/inventory/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'message': 'Inventory item deleted successfully'})
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='InventoryItem').exists())

    @override_settings(AGROMARKET={'LOW_STOCK_THRESHOLD': 20, 'EXPIRY_WINDOW_DAYS': 3,
                                   'PRODUCT_LOW_STOCK_KG': 100, 'TOP_LOW_STOCK_LIMIT': 5})
    def test_low_stock_endpoint(self):
        TestDataFactory.create_inventory_item(item_name='Wheat', quantity=15)
        TestDataFactory.create_inventory_item(item_name='Rice', quantity=200)
        response = self.client.get('/api/v1/inventory/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['threshold'], 20)
        self.assertEqual([i['item_name'] for i in response.data['items']], ['Wheat'])

    def test_expiring_endpoint_with_days_override(self):
        now = timezone.now()
        TestDataFactory.create_inventory_item(item_name='Yogurt', expiration_date=now + timedelta(days=5))
        response = self.client.get('/api/v1/inventory/expiring/')
        self.assertEqual(response.data['count'], 0)
        response = self.client.get('/api/v1/inventory/expiring/', {'days': 7})
        self.assertEqual(response.data['days'], 7)
        self.assertEqual([i['item_name'] for i in response.data['items']], ['Yogurt'])

    def test_expiring_endpoint_rejects_bad_days(self):
        response = self.client.get('/api/v1/inventory/expiring/', {'days': 'soon'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_expiring_endpoint_rejects_out_of_range_days(self):
        for days in ('99999999999', '999999999'):
            response = self.client.get('/api/v1/inventory/expiring/', {'days': days})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error'], 'days is too large')

    def test_failed_update_returns_error(self):
        item = TestDataFactory.create_inventory_item(item_name='Lentils', quantity=40)
        with mock.patch.object(InventoryItem, 'save', side_effect=RuntimeError('database gone')):
            response = self.client.patch(f'/api/v1/inventory/{item.id}/', {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Failed to update inventory item'})
        item.refresh_from_db()
        self.assertEqual(item.quantity, 40)


class ImportInventoryCommandTests(TestCase):

    def write_csv(self, content):
        handle, path = tempfile.mkstemp(suffix='.csv')
        with os.fdopen(handle, 'w', encoding='utf-8') as f:
            f.write(content)
        self.addCleanup(os.remove, path)
        return path

    def test_imports_valid_rows_and_reports_errors(self):
        path = self.write_csv(
            "item_name,quantity,warehouse_location,stored_date,expiration_date\n"
            "Wheat,120,North,2024-01-10,\n"
            "Milk,30,Dairy,2024-01-10,2024-01-15\n"
            "Broken,-5,North,,\n"
            ",,,,\n"
        )
        out = StringIO()
        call_command('import_inventory', path, stdout=out)
        self.assertEqual(InventoryItem.objects.count(), 2)
        milk = InventoryItem.objects.get(item_name='Milk')
        self.assertEqual(milk.expiration_date.date().isoformat(), '2024-01-15')
        output = out.getvalue()
        self.assertIn('Rows with Errors: 1', output)
        self.assertIn('Empty Rows Skipped: 1', output)

    def test_dry_run_saves_nothing(self):
        path = self.write_csv("item_name,quantity,warehouse_location\nWheat,120,North\n")
        call_command('import_inventory', path, '--dry-run', stdout=StringIO())
        self.assertEqual(InventoryItem.objects.count(), 0)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_inventory', '/nonexistent/inventory.csv', stdout=StringIO())

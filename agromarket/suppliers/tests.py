"""
Tests for supplier management and delivery recording
"""
from decimal import Decimal
from unittest import mock
from django.test import TestCase
from rest_framework import status
from agromarket.core.models import AuditLog
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.suppliers.models import Supplier


class SupplierAPITests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.farmer = TestDataFactory.create_farmer()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_supplier_with_defaults(self):
        response = self.client.post('/api/v1/suppliers/', {
            'supplier': 'Green Valley Farms',
            'contact': '9876500000',
            'email': 'Sales@GreenValley.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        supplier = Supplier.objects.get(pk=response.data['id'])
        self.assertEqual(supplier.email, 'sales@greenvalley.test')
        self.assertEqual(supplier.quality_rating, Decimal('3.0'))
        self.assertEqual(supplier.delivery_count, 0)
        self.assertEqual(supplier.collected_amount, Decimal('0.00'))

    def test_duplicate_email_rejected(self):
        TestDataFactory.create_supplier(email='dup@supplier.test')
        response = self.client.post('/api/v1/suppliers/', {
            'supplier': 'Copycat',
            'email': 'dup@supplier.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_email_differing_in_case_rejected(self):
        TestDataFactory.create_supplier(email='dup@supplier.test')
        response = self.client.post('/api/v1/suppliers/', {
            'supplier': 'Copycat',
            'email': 'DUP@supplier.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'A supplier with this email already exists')

    def test_quality_rating_bounds(self):
        response = self.client.post('/api/v1/suppliers/', {
            'supplier': 'Too Good',
            'email': 'good@supplier.test',
            'quality_rating': '5.5',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quality_rating', response.data)

    def test_search(self):
        TestDataFactory.create_supplier(supplier='Sunrise Dairy')
        TestDataFactory.create_supplier(supplier='Hill Spices')
        self.client.authenticate_user(self.farmer)
        response = self.client.get('/api/v1/suppliers/', {'search': 'dairy'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['supplier'] for s in response.data], ['Sunrise Dairy'])

    def test_farmer_cannot_modify(self):
        supplier = TestDataFactory.create_supplier()
        self.client.authenticate_user(self.farmer)
        response = self.client.patch(f'/api/v1/suppliers/{supplier.id}/', {'contact': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Supplier deleted successfully')
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='Supplier').exists())

    def test_record_delivery(self):
        supplier = TestDataFactory.create_supplier()
        for amount in ('1500.00', '500.50'):
            response = self.client.post(f'/api/v1/suppliers/{supplier.id}/deliveries/', {
                'amount': amount,
                'quality_rating': '4.5',
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        supplier.refresh_from_db()
        self.assertEqual(supplier.delivery_count, 2)
        self.assertEqual(supplier.collected_amount, Decimal('2000.50'))
        self.assertEqual(supplier.quality_rating, Decimal('4.5'))
        self.assertIsNotNone(supplier.last_delivery_date)
        self.assertEqual(AuditLog.objects.filter(action='supplier_delivery').count(), 2)

    def test_record_delivery_unknown_supplier(self):
        response = self.client.post('/api/v1/suppliers/9999/deliveries/', {'amount': '10'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Supplier not found')

    def test_failed_delete_returns_error(self):
        supplier = TestDataFactory.create_supplier()
        with mock.patch.object(Supplier, 'delete', side_effect=RuntimeError('database gone')):
            response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Failed to delete supplier'})
        self.assertTrue(Supplier.objects.filter(pk=supplier.id).exists())
        self.assertFalse(AuditLog.objects.filter(model_name='Supplier').exists())

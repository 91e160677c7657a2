"""
Tests for delivery scheduling and courier status updates
"""
from unittest import mock
from django.test import TestCase
from rest_framework import status
from agromarket.core.models import AuditLog
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.deliveries.models import Delivery


class DeliveryAPITests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.courier = TestDataFactory.create_user(role='delivery')
        self.other_courier = TestDataFactory.create_user(role='delivery')
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_admin_schedules_delivery_for_order(self):
        order = TestDataFactory.create_order(self.customer)
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/deliveries/', {
            'order': order.id,
            'customer': 'Asha Devi',
            'address': 'Village Road 4',
            'items': 'Tomatoes x 2kg',
            'scheduled_date': '2030-05-01T09:00:00Z',
            'assigned_to': self.courier.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order_number'], order.order_number)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['assigned_to_name'], self.courier.username)

    def test_cannot_assign_to_customer(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/deliveries/', {
            'customer': 'Asha Devi',
            'address': 'Village Road 4',
            'assigned_to': self.customer.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('assigned_to', response.data)

    def test_customer_has_no_access(self):
        self.client.authenticate_user(self.customer)
        self.assertEqual(self.client.get('/api/v1/deliveries/').status_code, status.HTTP_403_FORBIDDEN)

    def test_courier_sees_own_and_unassigned(self):
        mine = TestDataFactory.create_delivery(assigned_to=self.courier)
        open_delivery = TestDataFactory.create_delivery()
        TestDataFactory.create_delivery(assigned_to=self.other_courier)
        self.client.authenticate_user(self.courier)
        response = self.client.get('/api/v1/deliveries/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({d['id'] for d in response.data}, {mine.id, open_delivery.id})

    def test_courier_cannot_edit_details(self):
        delivery = TestDataFactory.create_delivery(assigned_to=self.courier)
        self.client.authenticate_user(self.courier)
        response = self.client.patch(f'/api/v1/deliveries/{delivery.id}/', {'address': 'Elsewhere'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_courier_picks_up_unassigned_delivery(self):
        delivery = TestDataFactory.create_delivery()
        self.client.authenticate_user(self.courier)
        response = self.client.patch(f'/api/v1/deliveries/{delivery.id}/status/', {'status': 'in_transit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        delivery.refresh_from_db()
        self.assertEqual(delivery.status, 'in_transit')
        self.assertEqual(delivery.assigned_to, self.courier)
        self.assertTrue(AuditLog.objects.filter(action='delivery_status', object_id=str(delivery.id)).exists())

    def test_invalid_status(self):
        delivery = TestDataFactory.create_delivery(assigned_to=self.courier)
        self.client.authenticate_user(self.courier)
        response = self.client.put(f'/api/v1/deliveries/{delivery.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_metrics(self):
        TestDataFactory.create_delivery(status='pending')
        TestDataFactory.create_delivery(status='in_transit')
        TestDataFactory.create_delivery(status='completed')
        TestDataFactory.create_delivery(status='completed')
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/deliveries/metrics/')
        self.assertEqual(response.data, {'total': 4, 'pending': 1, 'in_transit': 1, 'completed': 2})

    def test_admin_deletes_delivery(self):
        delivery = TestDataFactory.create_delivery()
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/deliveries/{delivery.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Delivery.objects.filter(pk=delivery.id).exists())

    def test_failed_status_update_returns_error(self):
        delivery = TestDataFactory.create_delivery(assigned_to=self.courier)
        self.client.authenticate_user(self.courier)
        with mock.patch.object(Delivery, 'save', side_effect=RuntimeError('database gone')):
            response = self.client.patch(f'/api/v1/deliveries/{delivery.id}/status/', {'status': 'in_transit'},
                                         format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Failed to update delivery status'})
        delivery.refresh_from_db()
        self.assertEqual(delivery.status, 'pending')

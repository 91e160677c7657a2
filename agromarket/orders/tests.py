"""
Tests for order placement, editing, status changes and cancellation
"""
from decimal import Decimal
from unittest import mock
from django.test import TestCase
from rest_framework import status
from agromarket.core.models import AuditLog
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.orders.models import Order


class OrderModelTests(TestCase):

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.tomatoes = TestDataFactory.create_product(name='Tomatoes', price=Decimal('30.00'))
        self.onions = TestDataFactory.create_product(name='Onions', price=Decimal('12.50'))

    def test_total_is_sum_of_lines(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 2), (self.onions, '1.5')])
        self.assertEqual(order.get_total(), Decimal('78.75'))
        self.assertEqual(order.total_amount, Decimal('78.75'))

    def test_order_number(self):
        order = TestDataFactory.create_order(self.customer)
        self.assertEqual(order.order_number, f'ORD-{order.pk:06d}')
        self.assertEqual(str(order), order.order_number)


class OrderAPITests(TestCase):

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.other_customer = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.tomatoes = TestDataFactory.create_product(name='Tomatoes', price=Decimal('30.00'))
        self.onions = TestDataFactory.create_product(name='Onions', price=Decimal('12.50'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def test_create_order_computes_total_and_snapshots_product(self):
        response = self.client.post('/api/v1/orders/', {
            'items': [
                {'product': self.tomatoes.id, 'quantity': '2'},
                {'product': self.onions.id, 'quantity': '3'},
            ],
            'shipping_address': '4 Mandi Street',
            'payment_method': 'card',
            'total_amount': '1.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Order created successfully')
        order = Order.objects.get(pk=response.data['order']['id'])
        self.assertEqual(order.customer, self.customer)
        self.assertEqual(order.total_amount, Decimal('97.50'))
        self.assertEqual(order.status, 'pending')
        self.assertEqual([item.name for item in order.items.all()], ['Tomatoes', 'Onions'])
        self.assertTrue(AuditLog.objects.filter(action='order_create', object_id=str(order.id)).exists())

    def test_snapshot_survives_product_price_change(self):
        response = self.client.post('/api/v1/orders/', {
            'items': [{'product': self.tomatoes.id, 'quantity': '1'}],
        }, format='json')
        self.tomatoes.price = Decimal('99.00')
        self.tomatoes.save()
        order = Order.objects.get(pk=response.data['order']['id'])
        self.assertEqual(order.items.get().price, Decimal('30.00'))

    def test_create_order_requires_items(self):
        response = self.client.post('/api/v1/orders/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_item_without_product_needs_name_and_price(self):
        response = self.client.post('/api/v1/orders/', {
            'items': [{'quantity': '1'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_sees_only_own_orders(self):
        mine = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        TestDataFactory.create_order(self.other_customer, items=[(self.onions, 1)])
        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o['id'] for o in response.data], [mine.id])

    def test_admin_sees_all_orders_filtered_by_status(self):
        TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        done = TestDataFactory.create_order(self.other_customer, items=[(self.onions, 1)], status='completed')
        self.client.authenticate_user(self.admin)
        self.assertEqual(len(self.client.get('/api/v1/orders/').data), 2)
        response = self.client.get('/api/v1/orders/', {'status': 'completed'})
        self.assertEqual([o['id'] for o in response.data], [done.id])

    def test_user_orders_endpoint(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        response = self.client.get(f'/api/v1/orders/user/{self.customer.id}/')
        self.assertEqual([o['id'] for o in response.data], [order.id])

        response = self.client.get(f'/api/v1/orders/user/{self.other_customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_other_customer_cannot_view_order(self):
        order = TestDataFactory.create_order(self.other_customer, items=[(self.onions, 1)])
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_pending_order_recomputes_total(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {
            'items': [{'product': self.onions.id, 'quantity': '4'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order updated successfully')
        order.refresh_from_db()
        self.assertEqual(order.total_amount, Decimal('50.00'))
        self.assertEqual(order.items.count(), 1)

    def test_cannot_update_completed_order(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)], status='completed')
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'shipping_address': 'Elsewhere'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_update(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['status'], 'completed')
        log = AuditLog.objects.get(action='order_status')
        self.assertEqual(log.changes['status'], {'old': 'pending', 'new': 'completed'})

    def test_status_update_rejects_unknown_status(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        response = self.client.put(f'/api/v1/orders/{order.id}/status/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_keeps_record(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, 'cancelled')

    def test_cancel_twice_is_noop(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)], status='cancelled')
        response = self.client.delete(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order is already cancelled')
        self.assertFalse(AuditLog.objects.filter(action='order_cancel').exists())

    def test_cannot_cancel_completed_order(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)], status='completed')
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_total_amount_excludes_cancelled(self):
        TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 2)])
        TestDataFactory.create_order(self.other_customer, items=[(self.onions, 2)], status='completed')
        TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 10)], status='cancelled')
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/orders/total-amount/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalAmount'], 85.0)

    def test_failed_cancel_returns_error(self):
        order = TestDataFactory.create_order(self.customer, items=[(self.tomatoes, 1)])
        with mock.patch.object(Order, 'save', side_effect=RuntimeError('database gone')):
            response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Failed to cancel order'})
        order.refresh_from_db()
        self.assertEqual(order.status, 'pending')
        self.assertFalse(AuditLog.objects.filter(action='order_cancel').exists())

"""
Tests for authentication, user management and audit logs
"""
from datetime import date
from django.test import TestCase, RequestFactory
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken
from agromarket.core.models import AuditLog, User
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.core.utils import create_audit_log, get_client_ip, parse_date_param


class AuthTests(TestCase):
    """Registration and login"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_returns_tokens(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'ravi',
            'email': 'ravi@farm.test',
            'password': 'Harvest#2024!',
            'password_confirm': 'Harvest#2024!',
            'role': 'farmer',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], 'farmer')
        self.assertTrue(User.objects.get(username='ravi').check_password('Harvest#2024!'))

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'ravi',
            'password': 'Harvest#2024!',
            'password_confirm': 'Different#2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_register_cannot_self_assign_admin(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'sneaky',
            'password': 'Harvest#2024!',
            'password_confirm': 'Harvest#2024!',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)

    def test_register_cannot_self_assign_delivery(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'courier',
            'password': 'Harvest#2024!',
            'password_confirm': 'Harvest#2024!',
            'role': 'delivery',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)
        self.assertFalse(User.objects.filter(username='courier').exists())

    def test_login_token_carries_role(self):
        TestDataFactory.create_farmer(username='meena', password='Harvest#2024!')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'meena',
            'password': 'Harvest#2024!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['username'], 'meena')
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], 'farmer')
        self.assertEqual(token['username'], 'meena')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='meena', password='Harvest#2024!')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'meena',
            'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], user.id)


class UserManagementTests(TestCase):
    """Admin user management and self-service updates"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.farmer = TestDataFactory.create_farmer()
        self.client = AuthenticatedAPIClient()

    def test_admin_lists_users_filtered_by_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/', {'role': 'farmer'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['id'] for u in response.data], [self.farmer.id])

    def test_customer_cannot_list_users(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_can_update_self_but_not_role(self):
        self.client.authenticate_user(self.customer)
        response = self.client.patch(f'/api/v1/users/{self.customer.id}/', {
            'phone': '9998887776',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.phone, '9998887776')
        self.assertEqual(self.customer.role, 'customer')

    def test_user_cannot_view_other_user(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get(f'/api/v1/users/{self.farmer.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_delivery_staff(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'rider1',
            'password': 'Harvest#2024!',
            'password_confirm': 'Harvest#2024!',
            'role': 'delivery',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username='rider1').role, 'delivery')

    def test_admin_changes_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/users/{self.customer.id}/', {'role': 'delivery'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'delivery')

    def test_admin_deletes_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User deleted successfully')
        self.assertFalse(User.objects.filter(pk=self.customer.id).exists())


class AuditLogTests(TestCase):
    """Audit helper and read-only endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.factory = RequestFactory()

    def test_create_audit_log_records_ip(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='10.0.0.5, 10.0.0.1')
        request.user = self.admin
        log = create_audit_log(request=request, action='delete', model_name='Supplier',
                               object_id=7, object_name='Green Farms')
        self.assertIsNotNone(log)
        self.assertEqual(log.ip_address, '10.0.0.5')
        self.assertEqual(log.object_id, '7')
        self.assertEqual(log.user, self.admin)

    def test_create_audit_log_skips_missing_fields(self):
        self.assertIsNone(create_audit_log(action='delete', model_name='Supplier'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_get_client_ip_without_request(self):
        self.assertIsNone(get_client_ip(None))

    def test_list_is_admin_only_and_filterable(self):
        create_audit_log(user=self.admin, action='order_cancel', model_name='Order', object_id='1')
        create_audit_log(user=self.admin, action='ticket_reply', model_name='SupportTicket', object_id='2')

        self.client.authenticate_user(self.customer)
        self.assertEqual(self.client.get('/api/v1/audit-logs/').status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'ticket_reply'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'SupportTicket')
        self.assertEqual(response.data[0]['username'], self.admin.username)


class ParseDateParamTests(TestCase):

    def test_valid_and_empty(self):
        self.assertEqual(parse_date_param('2024-03-01'), date(2024, 3, 1))
        self.assertIsNone(parse_date_param(''))
        self.assertIsNone(parse_date_param(None))

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_date_param('01/03/2024')

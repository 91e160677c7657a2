"""
Tests for the product catalog: permissions, filters, image uploads and list caching
"""
import shutil
import tempfile
from decimal import Decimal
from unittest import mock
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from agromarket.catalog.models import Product
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ProductAPITests(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        cache.clear()
        self.farmer = TestDataFactory.create_farmer()
        self.other_farmer = TestDataFactory.create_farmer()
        self.customer = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()

    def test_farmer_creates_product_with_image(self):
        self.client.authenticate_user(self.farmer)
        response = self.client.post('/api/v1/products/', {
            'name': 'Tomatoes',
            'description': 'Vine ripened',
            'category': 'Vegetables',
            'price': '35.50',
            'quantity': '120',
            'image': TestDataFactory.create_image_file('tomato.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(pk=response.data['id'])
        self.assertEqual(product.farmer, self.farmer)
        self.assertTrue(product.image.name.startswith('products/'))
        self.assertTrue(response.data['image_url'].startswith('/media/products/'))

    def test_customer_cannot_create_product(self):
        self.client.authenticate_user(self.customer)
        response = self.client.post('/api/v1/products/', {'name': 'Rice', 'price': '50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_negative_price_rejected(self):
        self.client.authenticate_user(self.farmer)
        response = self.client.post('/api/v1/products/', {'name': 'Rice', 'price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_farmer_cannot_edit_someone_elses_product(self):
        product = TestDataFactory.create_product(farmer=self.other_farmer)
        self.client.authenticate_user(self.farmer)
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_without_image_keeps_existing_image(self):
        self.client.authenticate_user(self.farmer)
        created = self.client.post('/api/v1/products/', {
            'name': 'Carrots',
            'price': '20',
            'quantity': '80',
            'image': TestDataFactory.create_image_file('carrot.png'),
        }, format='multipart')
        image_name = Product.objects.get(pk=created.data['id']).image.name

        response = self.client.patch(f"/api/v1/products/{created.data['id']}/", {'price': '22.00'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product = Product.objects.get(pk=created.data['id'])
        self.assertEqual(product.price, Decimal('22.00'))
        self.assertEqual(product.image.name, image_name)

    def test_admin_deletes_product(self):
        product = TestDataFactory.create_product(farmer=self.farmer)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Product deleted successfully')
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_list_filters(self):
        TestDataFactory.create_product(name='Basmati Rice', category='Grains', price=Decimal('90'),
                                       quantity=Decimal('40'))
        TestDataFactory.create_product(name='Spinach', category='Vegetables', price=Decimal('25'),
                                       quantity=Decimal('500'))
        TestDataFactory.create_product(name='Hidden', is_active=False)
        self.client.authenticate_user(self.customer)

        response = self.client.get('/api/v1/products/', {'category': 'grains'})
        self.assertEqual([p['name'] for p in response.data], ['Basmati Rice'])

        response = self.client.get('/api/v1/products/', {'low_stock': 'true'})
        self.assertEqual([p['name'] for p in response.data], ['Basmati Rice'])

        response = self.client.get('/api/v1/products/', {'max_price': '30'})
        self.assertEqual([p['name'] for p in response.data], ['Spinach'])

        response = self.client.get('/api/v1/products/', {'search': 'spin'})
        self.assertEqual([p['name'] for p in response.data], ['Spinach'])

    def test_list_is_cached_and_invalidated_on_change(self):
        TestDataFactory.create_product(name='Onions')
        self.client.authenticate_user(self.customer)

        first = self.client.get('/api/v1/products/')
        self.assertEqual(first['X-Cache'], 'MISS')
        second = self.client.get('/api/v1/products/')
        self.assertEqual(second['X-Cache'], 'HIT')

        TestDataFactory.create_product(name='Garlic')
        third = self.client.get('/api/v1/products/')
        self.assertEqual(third['X-Cache'], 'MISS')
        self.assertEqual(len(third.data), 2)

    def test_list_ignores_unknown_query_params(self):
        TestDataFactory.create_product(name='Okra')
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/', {'prefix': 'x', 'args': 'y'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.data], ['Okra'])

    def upload_product(self, filename):
        self.client.authenticate_user(self.farmer)
        created = self.client.post('/api/v1/products/', {
            'name': 'Beetroot',
            'price': '18',
            'quantity': '60',
            'image': TestDataFactory.create_image_file(filename),
        }, format='multipart')
        return Product.objects.get(pk=created.data['id'])

    def test_replacing_image_removes_old_file(self):
        product = self.upload_product('beet.png')
        old_name = product.image.name

        response = self.client.patch(f'/api/v1/products/{product.id}/', {
            'image': TestDataFactory.create_image_file('beet_new.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertNotEqual(product.image.name, old_name)
        self.assertTrue(product.image.storage.exists(product.image.name))
        self.assertFalse(product.image.storage.exists(old_name))

    def test_replaced_image_kept_while_order_lines_use_it(self):
        product = self.upload_product('beet.png')
        old_name = product.image.name
        TestDataFactory.create_order(self.customer, items=[(product, 2)])

        response = self.client.patch(f'/api/v1/products/{product.id}/', {
            'image': TestDataFactory.create_image_file('beet_new.png'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(product.image.storage.exists(old_name))

    def test_failed_delete_returns_error(self):
        product = TestDataFactory.create_product(farmer=self.farmer)
        self.client.authenticate_user(self.farmer)
        with mock.patch.object(Product, 'delete', side_effect=RuntimeError('disk full')):
            response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to delete product')
        self.assertTrue(Product.objects.filter(pk=product.id).exists())

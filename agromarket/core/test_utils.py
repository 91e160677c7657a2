"""
Test utilities and factories for creating test data
"""
import io
import random
import string
from datetime import timedelta
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from PIL import Image
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from agromarket.catalog.models import Product
from agromarket.deliveries.models import Delivery
from agromarket.inventory.models import InventoryItem
from agromarket.orders.models import Order, OrderItem
from agromarket.suppliers.models import Supplier
from agromarket.support.models import SupportTicket, FarmerSupportTicket

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='customer',
                    is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(**kwargs):
        return TestDataFactory.create_user(role='admin', **kwargs)

    @staticmethod
    def create_farmer(**kwargs):
        return TestDataFactory.create_user(role='farmer', **kwargs)

    @staticmethod
    def create_product(name=None, price=Decimal('40.00'), quantity=Decimal('250.000'), farmer=None,
                       category='Vegetables', is_active=True):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            description=f'Fresh {name}',
            category=category,
            price=price,
            quantity=quantity,
            farmer=farmer,
            is_active=is_active
        )

    @staticmethod
    def create_order(customer, items=None, status='pending', shipping_address='12 Market Road'):
        """Create an order; items is a list of (product, quantity) tuples"""
        order = Order.objects.create(customer=customer, status=status, shipping_address=shipping_address)
        for product, quantity in items or []:
            OrderItem.objects.create(
                order=order,
                product=product,
                name=product.name,
                price=product.price,
                quantity=Decimal(str(quantity)),
                image=product.image_url
            )
        order.total_amount = order.get_total()
        order.save()
        return order

    @staticmethod
    def create_delivery(order=None, customer='Asha Devi', status='pending', assigned_to=None, scheduled_date=None):
        """Create a test delivery"""
        return Delivery.objects.create(
            order=order,
            customer=customer,
            address='Village Road 4',
            items='Tomatoes x 5kg',
            scheduled_date=scheduled_date or timezone.now() + timedelta(days=1),
            status=status,
            assigned_to=assigned_to
        )

    @staticmethod
    def create_inventory_item(item_name=None, quantity=100, warehouse_location='Warehouse A',
                              stored_date=None, expiration_date=None):
        """Create a test inventory item"""
        if not item_name:
            item_name = f'Item_{TestDataFactory.random_string(6)}'
        return InventoryItem.objects.create(
            item_name=item_name,
            quantity=quantity,
            warehouse_location=warehouse_location,
            stored_date=stored_date or timezone.now(),
            expiration_date=expiration_date
        )

    @staticmethod
    def create_supplier(supplier=None, email=None, quality_rating=Decimal('3.0'), last_delivery_date=None):
        """Create a test supplier"""
        if not supplier:
            supplier = f'Supplier_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{supplier.lower()}@supplier.test'
        return Supplier.objects.create(
            supplier=supplier,
            contact='9876543210',
            email=email,
            quality_rating=quality_rating,
            last_delivery_date=last_delivery_date
        )

    @staticmethod
    def create_ticket(farmer_id, subject='Late delivery', category='Order Issue', priority='Medium', farmer=False):
        """Create a customer (or farmer) support ticket"""
        model = FarmerSupportTicket if farmer else SupportTicket
        return model.objects.create(
            subject=subject,
            category=category,
            description='My order has not arrived',
            priority=priority,
            farmer_id=str(farmer_id)
        )

    @staticmethod
    def create_image_file(name='test.png', size=(10, 10)):
        """Small in-memory PNG suitable for ImageField uploads"""
        buffer = io.BytesIO()
        Image.new('RGB', size, color=(34, 139, 34)).save(buffer, format='PNG')
        return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()

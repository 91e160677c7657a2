from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Product(models.Model):
    """Produce listed on the marketplace"""
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True, db_index=True)  # e.g. Vegetables, Fruits, Grains
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    quantity = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('0.000'),
                                   validators=[MinValueValidator(Decimal('0.000'))], help_text='Available stock in kg')
    image = models.ImageField(upload_to='products/', blank=True, null=True)
    farmer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def image_url(self):
        return self.image.url if self.image else ''

    class Meta:
        db_table = 'products'
        ordering = ['-updated_at', '-created_at']

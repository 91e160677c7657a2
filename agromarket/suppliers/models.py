from decimal import Decimal
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Supplier(models.Model):
    """Produce suppliers and their delivery track record"""
    supplier = models.CharField(max_length=200, help_text="Supplier name")
    contact = models.CharField(max_length=100, blank=True)
    email = models.EmailField(unique=True)
    collected_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    delivery_count = models.PositiveIntegerField(default=0)
    quality_rating = models.DecimalField(
        max_digits=3, decimal_places=1, default=Decimal('3.0'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))]
    )
    last_delivery_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.supplier

    class Meta:
        db_table = 'agro_suppliers'
        ordering = ['supplier']

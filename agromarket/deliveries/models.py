from django.conf import settings
from django.db import models
from agromarket.orders.models import Order


class Delivery(models.Model):
    """Shipment of an order to a customer address"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_transit', 'In Transit'),
        ('completed', 'Completed'),
    ]

    order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True, related_name='deliveries')
    order_number = models.CharField(max_length=50, blank=True, db_index=True)
    customer = models.CharField(max_length=200, help_text="Recipient name")
    address = models.TextField()
    items = models.TextField(blank=True, help_text="Summary of the delivered items")
    scheduled_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_deliveries'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.order_number or 'Delivery'} - {self.customer}"

    def save(self, *args, **kwargs):
        if self.order_id and not self.order_number:
            self.order_number = f"ORD-{self.order_id:06d}"
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'deliveries'
        ordering = ['scheduled_date', '-created_at']
        verbose_name_plural = 'deliveries'

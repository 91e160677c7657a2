from django.db import models
from django.utils import timezone


class InventoryItem(models.Model):
    """Stock held in a warehouse"""
    item_name = models.CharField(max_length=200, db_index=True)
    quantity = models.PositiveIntegerField(default=0)
    warehouse_location = models.CharField(max_length=200, db_index=True)
    stored_date = models.DateTimeField(default=timezone.now)
    expiration_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.item_name} ({self.quantity}) @ {self.warehouse_location}"

    @property
    def is_expired(self):
        return self.expiration_date is not None and self.expiration_date < timezone.now()

    class Meta:
        db_table = 'inventory_items'
        ordering = ['-stored_date', '-created_at']
        indexes = [
            models.Index(fields=['quantity'], name='inventory_quantity_idx'),
            models.Index(fields=['expiration_date'], name='inventory_expiry_idx'),
        ]

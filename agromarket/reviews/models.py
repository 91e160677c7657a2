from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from agromarket.catalog.models import Product


class Review(models.Model):
    """A customer's rating of a product"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product} - {self.rating}/5 by {self.user}"

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        unique_together = [['product', 'user']]

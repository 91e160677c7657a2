from django.db import models
from django.utils import timezone


class BaseTicket(models.Model):
    """Fields shared by customer and farmer support tickets"""
    CATEGORY_CHOICES = [
        ('Order Issue', 'Order Issue'),
        ('Payment Issue', 'Payment Issue'),
        ('Product Inquiry', 'Product Inquiry'),
    ]

    PRIORITY_CHOICES = [
        ('Low', 'Low'),
        ('Medium', 'Medium'),
        ('High', 'High'),
    ]

    subject = models.CharField(max_length=255)
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    description = models.TextField(blank=True, default='')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='Medium', db_index=True)
    farmer_id = models.CharField(max_length=100, db_index=True, help_text="Id of the submitting user")
    attachment = models.FileField(upload_to='support/', blank=True, null=True)
    reply = models.TextField(blank=True, default='')
    replied_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.subject} ({self.priority})"

    def save(self, *args, **kwargs):
        self.updated_at = timezone.now()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'updated_at' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['updated_at']
        super().save(*args, **kwargs)

    @property
    def is_answered(self):
        return bool(self.reply)

    class Meta:
        abstract = True
        ordering = ['-created_at']


class SupportTicket(BaseTicket):
    """Ticket raised by a customer"""

    class Meta(BaseTicket.Meta):
        db_table = 'support_tickets'


class FarmerSupportTicket(BaseTicket):
    """Ticket raised by a farmer"""

    class Meta(BaseTicket.Meta):
        db_table = 'farmer_support_tickets'

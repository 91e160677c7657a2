"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from agromarket.catalog.models import Product
from agromarket.inventory.models import InventoryItem
from agromarket.orders.models import Order
from agromarket.suppliers.models import Supplier
from .cache_utils import (
    invalidate_cache_prefix,
    PRODUCT_LIST_PREFIX, INVENTORY_REPORT_PREFIX, REPORTS_PREFIX,
)

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=Product)
def invalidate_product_cache(sender, instance, **kwargs):
    invalidate_cache_prefix(PRODUCT_LIST_PREFIX)
    logger.debug(f"Product {instance.pk} changed, product list cache invalidated")


@receiver([post_save, post_delete], sender=InventoryItem)
def invalidate_inventory_cache(sender, instance, **kwargs):
    invalidate_cache_prefix(INVENTORY_REPORT_PREFIX)
    invalidate_cache_prefix(REPORTS_PREFIX)


@receiver([post_save, post_delete], sender=Supplier)
def invalidate_supplier_cache(sender, instance, **kwargs):
    invalidate_cache_prefix(REPORTS_PREFIX)


@receiver([post_save, post_delete], sender=Order)
def invalidate_sales_cache(sender, instance, **kwargs):
    invalidate_cache_prefix(REPORTS_PREFIX)

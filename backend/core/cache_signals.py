"""
Cache invalidation signals
Dashboard figures are dropped whenever the documents they are computed from change
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from backend.core.cache_utils import invalidate_dashboard_cache

logger = logging.getLogger(__name__)

# models whose rows feed the dashboard
DASHBOARD_SOURCES = {
    ('sales', 'Invoice'),
    ('sales', 'InvoiceItem'),
    ('purchasing', 'PurchaseInvoice'),
    ('catalog', 'Product'),
    ('treasury', 'Payment'),
}


@receiver([post_save, post_delete])
def invalidate_dashboard_on_change(sender, instance, **kwargs):
    """Invalidate dashboard cache after the change is committed"""
    meta = getattr(sender, '_meta', None)
    if meta is None or (meta.app_label, meta.object_name) not in DASHBOARD_SOURCES:
        return
    # on_commit keeps the cache from being refilled with pre-commit data
    transaction.on_commit(invalidate_dashboard_cache)

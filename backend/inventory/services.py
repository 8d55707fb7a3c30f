"""
Stock changes shared by products, delivery notes, prélèvements and purchase orders.

Every change goes through ``apply_stock_change`` so product stock, product
status, the warehouse stock item and the movement log stay consistent.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from backend.catalog.models import Product
from backend.core.models import Notification
from backend.core.utils import create_notification
from .models import StockItem, StockMovement

logger = logging.getLogger(__name__)

LOW_STOCK_TITLE = 'Low Stock Alert'


def product_action_url(product):
    return f"/inventory/products/{product.pk}"


def notify_low_stock(product, message=None):
    """
    Warn about a product at or below its minimum unless an unread alert for
    it is still pending. Stock changes only call this for the low_stock
    status; the daily job also covers products that ran out.
    """
    if not product.is_low_stock:
        return None
    already_pending = Notification.objects.filter(
        title=LOW_STOCK_TITLE,
        action_url=product_action_url(product),
        read=False,
    ).exists()
    if already_pending:
        return None
    if message is None:
        message = f'Product "{product.name}" ({product.sku}) is running low. Current: {product.stock}, Min: {product.min_stock}'
    return create_notification(
        title=LOW_STOCK_TITLE,
        message=message,
        type='warning',
        action_url=product_action_url(product),
        action_label='View Product',
    )


@transaction.atomic
def apply_stock_change(product, quantity_change, warehouse=None, reference=None, description='', user=None, notify=True):
    """
    Add ``quantity_change`` (negative to remove) to a product's stock.

    Updates the product (stock, status, last movement), the warehouse stock
    item when a warehouse is given, and records a StockMovement.
    Returns the refreshed product.
    """
    quantity_change = Decimal(str(quantity_change))
    if quantity_change == 0:
        return product

    locked = Product.objects.select_for_update().get(pk=product.pk)
    locked.stock = locked.stock + quantity_change
    locked.last_movement = timezone.localdate()
    locked.save()

    if warehouse is not None:
        stock_item, _ = StockItem.objects.select_for_update().get_or_create(
            product=locked,
            warehouse=warehouse,
            defaults={'quantity': Decimal('0.00')},
        )
        stock_item.quantity = stock_item.quantity + quantity_change
        stock_item.movement = 'up' if quantity_change > 0 else 'down'
        stock_item.save()

    StockMovement.objects.create(
        product=locked,
        warehouse=warehouse,
        quantity=abs(quantity_change),
        type='in' if quantity_change > 0 else 'out',
        reference_id=reference,
        description=description,
        created_by=user if user is not None and getattr(user, 'is_authenticated', False) else None,
    )
    logger.info(f"Stock {'+' if quantity_change > 0 else ''}{quantity_change} for {locked.sku} ({reference or 'manual'}), now {locked.stock}")

    if notify and locked.status == 'low_stock':
        notify_low_stock(locked)

    product.stock = locked.stock
    product.status = locked.status
    product.last_movement = locked.last_movement
    return locked


def set_product_stock(product, new_quantity, user=None):
    """Manual stock correction: moves the difference so it appears in the log"""
    new_quantity = Decimal(str(new_quantity))
    difference = new_quantity - product.stock
    if difference != 0:
        product = apply_stock_change(
            product,
            difference,
            reference=None,
            description='Ajustement manuel',
            user=user,
            notify=False,
        )
    if product.status == 'low_stock':
        notify_low_stock(product, f'Product "{product.name}" stock manually updated. Current: {product.stock}, Min: {product.min_stock}')
    return product

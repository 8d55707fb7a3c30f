from django.db import models
from decimal import Decimal
from backend.catalog.models import Product
from backend.locations.models import Warehouse


class StockItem(models.Model):
    """Quantity of a product held in one warehouse"""
    MOVEMENT_CHOICES = [
        ('up', 'Up'),
        ('down', 'Down'),
        ('stable', 'Stable'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='stock_items')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.CASCADE, related_name='stock_items')
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    min_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    movement = models.CharField(max_length=10, choices=MOVEMENT_CHOICES, default='stable')
    last_updated = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.sku} @ {self.warehouse.code}: {self.quantity}"

    class Meta:
        db_table = 'stock_items'
        unique_together = [['product', 'warehouse']]
        indexes = [
            models.Index(fields=['warehouse'], name='idx_stockitem_warehouse'),
        ]


class StockMovement(models.Model):
    """Every stock change, with the document that caused it"""
    TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='movements')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements')
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    reference_id = models.CharField(max_length=100, blank=True, null=True, help_text="Document number that moved the stock")
    description = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.type} {self.quantity} {self.product.sku}"

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['product', '-created_at'], name='idx_movement_product_created'),
            models.Index(fields=['reference_id'], name='idx_movement_reference'),
        ]

from decimal import Decimal

from django.db import models


class ActiveProductManager(models.Manager):
    """Excludes soft-deleted products"""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class Product(models.Model):
    """Product master; stock is the company-wide quantity"""
    STATUS_CHOICES = [
        ('in_stock', 'In Stock'),
        ('low_stock', 'Low Stock'),
        ('out_of_stock', 'Out of Stock'),
    ]

    sku = models.CharField(max_length=100, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100, blank=True, default='')
    unit = models.CharField(max_length=50, default='Piece')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    stock = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    min_stock = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    image = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='in_stock')
    last_movement = models.DateField(blank=True, null=True)
    is_deleted = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active = ActiveProductManager()

    @staticmethod
    def compute_status(stock, min_stock):
        stock = Decimal(stock or 0)
        min_stock = Decimal(min_stock or 0)
        if stock <= 0:
            return 'out_of_stock'
        if min_stock > 0 and stock <= min_stock:
            return 'low_stock'
        return 'in_stock'

    def refresh_status(self):
        self.status = self.compute_status(self.stock, self.min_stock)
        return self.status

    @property
    def is_low_stock(self):
        return self.min_stock > 0 and self.stock <= self.min_stock

    def save(self, *args, **kwargs):
        self.refresh_status()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    class Meta:
        db_table = 'products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['category'], name='idx_product_category'),
            models.Index(fields=['status'], name='idx_product_status'),
        ]

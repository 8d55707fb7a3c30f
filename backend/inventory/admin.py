from django.contrib import admin
from .models import StockItem, StockMovement


@admin.register(StockItem)
class StockItemAdmin(admin.ModelAdmin):
    list_display = ['product', 'warehouse', 'quantity', 'min_quantity', 'movement', 'last_updated']
    list_filter = ['warehouse', 'movement']
    search_fields = ['product__name', 'product__sku']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['product', 'type', 'quantity', 'warehouse', 'reference_id', 'description', 'created_at']
    list_filter = ['type', 'warehouse', 'created_at']
    search_fields = ['product__name', 'product__sku', 'reference_id']
    ordering = ['-created_at']
    readonly_fields = ['product', 'warehouse', 'quantity', 'type', 'reference_id', 'description', 'created_by', 'created_at']

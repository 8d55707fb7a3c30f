from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'category', 'price', 'stock', 'min_stock', 'status', 'is_deleted']
    list_filter = ['status', 'category', 'is_deleted']
    search_fields = ['sku', 'name']
    ordering = ['name']
    readonly_fields = ['status', 'last_movement', 'created_at', 'updated_at']

from django.contrib import admin
from .models import Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'city', 'phone', 'email', 'created_at']
    list_filter = ['city', 'created_at']
    search_fields = ['name', 'code', 'city', 'email']
    ordering = ['name']
    readonly_fields = ['code']

from django.contrib import admin
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseInvoice, PurchaseInvoiceItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 1
    fields = ['product', 'description', 'quantity', 'unit_price', 'total']
    readonly_fields = ['total']


class PurchaseInvoiceItemInline(admin.TabularInline):
    model = PurchaseInvoiceItem
    extra = 1
    fields = ['product', 'description', 'quantity', 'unit_price', 'total']
    readonly_fields = ['total']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'supplier', 'date', 'status', 'subtotal', 'stock_received_at', 'created_at']
    list_filter = ['status', 'date']
    search_fields = ['document_id', 'supplier__name', 'note']
    ordering = ['-date', '-created_at']
    inlines = [PurchaseOrderItemInline]
    readonly_fields = ['stock_received_at', 'created_at', 'updated_at']


@admin.register(PurchaseInvoice)
class PurchaseInvoiceAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'supplier', 'date', 'status', 'get_total', 'amount_paid', 'created_at']
    list_filter = ['status', 'payment_method', 'date']
    search_fields = ['document_id', 'supplier__name', 'note']
    ordering = ['-date', '-created_at']
    inlines = [PurchaseInvoiceItemInline]
    readonly_fields = ['subtotal', 'vat_amount', 'total', 'created_at', 'updated_at']

    def get_total(self, obj):
        return f"{obj.total:.2f} MAD"
    get_total.short_description = 'Total TTC'

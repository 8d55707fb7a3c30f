from django.contrib import admin
from .models import BankAccount, WarehouseCash, Payment


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = ['name', 'bank', 'account_number', 'balance', 'updated_at']
    search_fields = ['name', 'bank', 'account_number']
    ordering = ['name']


@admin.register(WarehouseCash)
class WarehouseCashAdmin(admin.ModelAdmin):
    list_display = ['warehouse', 'amount', 'updated_at']
    raw_id_fields = ['warehouse']


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'entity', 'amount', 'payment_method', 'status', 'payment_type', 'payment_date']
    list_filter = ['payment_type', 'status', 'payment_method', 'payment_date']
    search_fields = ['invoice_number', 'entity', 'check_number']
    raw_id_fields = ['sales_invoice', 'purchase_invoice', 'bank_account', 'warehouse']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'payment_date'

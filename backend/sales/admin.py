from django.contrib import admin
from .models import (
    Invoice, InvoiceItem, Estimate, EstimateItem, DeliveryNote, DeliveryNoteItem,
    CreditNote, CreditNoteItem, Prelevement, PrelevementItem
)


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    raw_id_fields = ['product']


class EstimateItemInline(admin.TabularInline):
    model = EstimateItem
    extra = 0
    raw_id_fields = ['product']


class DeliveryNoteItemInline(admin.TabularInline):
    model = DeliveryNoteItem
    extra = 0
    raw_id_fields = ['product']


class CreditNoteItemInline(admin.TabularInline):
    model = CreditNoteItem
    extra = 0
    raw_id_fields = ['product']


class PrelevementItemInline(admin.TabularInline):
    model = PrelevementItem
    extra = 0
    raw_id_fields = ['product']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'client', 'date', 'due_date', 'total', 'amount_paid', 'status']
    list_filter = ['status', 'payment_method', 'date']
    search_fields = ['document_id', 'client__name', 'client__company']
    raw_id_fields = ['client', 'bank_account', 'payment_warehouse', 'created_by']
    readonly_fields = ['subtotal', 'vat_amount', 'total', 'created_at', 'updated_at']
    date_hierarchy = 'date'
    inlines = [InvoiceItemInline]


@admin.register(Estimate)
class EstimateAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'client', 'date', 'total', 'status', 'converted_invoice']
    list_filter = ['status', 'date']
    search_fields = ['document_id', 'client__name', 'client__company']
    raw_id_fields = ['client', 'converted_invoice', 'created_by']
    inlines = [EstimateItemInline]


@admin.register(DeliveryNote)
class DeliveryNoteAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'document_type', 'client', 'supplier', 'warehouse', 'date', 'subtotal', 'status']
    list_filter = ['document_type', 'status', 'date']
    search_fields = ['document_id', 'client__name', 'supplier__name']
    raw_id_fields = ['client', 'supplier', 'warehouse', 'created_by']
    inlines = [DeliveryNoteItemInline]


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'client', 'invoice', 'date', 'total', 'status']
    list_filter = ['status', 'date']
    search_fields = ['document_id', 'client__name']
    raw_id_fields = ['client', 'invoice', 'created_by']
    inlines = [CreditNoteItemInline]


@admin.register(Prelevement)
class PrelevementAdmin(admin.ModelAdmin):
    list_display = ['document_id', 'client', 'warehouse', 'date', 'subtotal', 'status']
    list_filter = ['status', 'date']
    search_fields = ['document_id']
    raw_id_fields = ['client', 'warehouse', 'created_by']
    inlines = [PrelevementItemInline]

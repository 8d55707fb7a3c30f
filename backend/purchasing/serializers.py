from django.db import transaction
from rest_framework import serializers

from backend.core.moroccan import calculate_invoice_totals
from backend.sales.serializers import (
    DocumentSerializer, BaseItemSerializer, ContactSummarySerializer,
    ITEM_FIELDS, DOCUMENT_FIELDS, TAXED_FIELDS, TOTALS_READ_ONLY
)
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseInvoice, PurchaseInvoiceItem
from . import services


class PurchaseOrderItemSerializer(BaseItemSerializer):
    class Meta:
        model = PurchaseOrderItem
        fields = ITEM_FIELDS


class PurchaseInvoiceItemSerializer(BaseItemSerializer):
    class Meta:
        model = PurchaseInvoiceItem
        fields = ITEM_FIELDS


class PurchaseOrderSerializer(DocumentSerializer):
    """Purchase orders; reaching ``received`` the first time adds the lines to stock"""
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    supplier_detail = ContactSummarySerializer(source='supplier', read_only=True)
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True, default=None)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = DOCUMENT_FIELDS + [
            'supplier', 'supplier_detail', 'warehouse', 'warehouse_code', 'total', 'stock_received_at'
        ]
        read_only_fields = ['subtotal', 'stock_received_at', 'created_by', 'created_at', 'updated_at']

    def after_create(self, document, items):
        if document.status == 'received':
            services.receive_purchase_order(document, user=self.request_user)

    def after_update(self, document, old_items, items):
        if document.status == 'received':
            services.receive_purchase_order(document, user=self.request_user)


class PurchaseInvoiceSerializer(DocumentSerializer):
    items = PurchaseInvoiceItemSerializer(many=True, read_only=True)
    supplier_detail = ContactSummarySerializer(source='supplier', read_only=True)
    bank_account_name = serializers.CharField(source='bank_account.name', read_only=True, default=None)
    delivery_note_document_id = serializers.CharField(source='delivery_note.document_id', read_only=True, default=None)
    balance_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseInvoice
        fields = TAXED_FIELDS + [
            'supplier', 'supplier_detail', 'due_date', 'payment_method', 'check_number', 'bank_account',
            'bank_account_name', 'amount_paid', 'balance_due', 'attachment_url', 'delivery_note',
            'delivery_note_document_id'
        ]
        read_only_fields = TOTALS_READ_ONLY

    def validate_amount_paid(self, value):
        if value < 0:
            raise serializers.ValidationError('Amount paid cannot be negative')
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if 'delivery_note' in attrs:
            services.check_delivery_note_not_invoiced(
                attrs['delivery_note'], exclude_pk=getattr(self.instance, 'pk', None))
        method = attrs.get('payment_method', getattr(self.instance, 'payment_method', None))
        if method != 'check' and ('check_number' in attrs or 'payment_method' in attrs):
            attrs['check_number'] = None
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        status_given = 'status' in validated_data
        invoice = super().create(validated_data)
        if invoice.status == 'paid':
            amount = invoice.total
        else:
            amount = invoice.amount_paid
            if amount > 0 and not status_given:
                invoice.status = services.derive_purchase_invoice_status(amount, invoice.total)
        if amount > 0:
            services.record_supplier_payment(invoice, amount)
            invoice.amount_paid = amount
            invoice.save(update_fields=['amount_paid', 'status', 'updated_at'])
        return invoice

    @transaction.atomic
    def update(self, instance, validated_data):
        previous_paid = instance.amount_paid
        if 'amount_paid' in validated_data and 'status' not in validated_data:
            total = instance.total
            if self._items is not None:
                _, _, total = calculate_invoice_totals(
                    self._items, validated_data.get('vat_rate', instance.vat_rate))
            validated_data['status'] = services.derive_purchase_invoice_status(validated_data['amount_paid'], total)
        invoice = super().update(instance, validated_data)
        difference = invoice.amount_paid - previous_paid
        if difference > 0:
            services.record_supplier_payment(invoice, difference)
        return invoice

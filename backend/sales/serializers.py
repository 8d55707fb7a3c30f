from django.db import transaction
from rest_framework import serializers

from backend.catalog.models import Product
from backend.core.exceptions import BusinessRuleError
from backend.core.moroccan import calculate_invoice_totals
from backend.core.numbering import generate_document_number, document_number_exists
from backend.core.status_mapper import resolve_status
from backend.parties.models import Contact
from .models import (
    Invoice, InvoiceItem, Estimate, EstimateItem, DeliveryNote, DeliveryNoteItem,
    CreditNote, CreditNoteItem, Prelevement, PrelevementItem
)
from . import services


class ItemInputSerializer(serializers.Serializer):
    """A line sent by the client; ``product_id`` is accepted for ``product``"""
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)

    def to_internal_value(self, data):
        if isinstance(data, dict) and 'product' not in data and 'product_id' in data:
            data = dict(data)
            data['product'] = data.pop('product_id')
        return super().to_internal_value(data)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than 0')
        return value

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Unit price cannot be negative')
        return value

    def validate(self, attrs):
        if not attrs.get('product') and not attrs.get('description'):
            raise serializers.ValidationError('Each item needs a product or a description')
        return attrs


ITEM_FIELDS = ['id', 'product', 'product_name', 'product_sku', 'description', 'quantity', 'unit_price', 'total']


class BaseItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    product_sku = serializers.CharField(source='product.sku', read_only=True, default=None)


class InvoiceItemSerializer(BaseItemSerializer):
    class Meta:
        model = InvoiceItem
        fields = ITEM_FIELDS


class EstimateItemSerializer(BaseItemSerializer):
    class Meta:
        model = EstimateItem
        fields = ITEM_FIELDS


class DeliveryNoteItemSerializer(BaseItemSerializer):
    class Meta:
        model = DeliveryNoteItem
        fields = ITEM_FIELDS


class CreditNoteItemSerializer(BaseItemSerializer):
    class Meta:
        model = CreditNoteItem
        fields = ITEM_FIELDS


class PrelevementItemSerializer(BaseItemSerializer):
    class Meta:
        model = PrelevementItem
        fields = ITEM_FIELDS


class DocumentSerializer(serializers.ModelSerializer):
    """
    Base for numbered documents.

    Items come through ``context['items_data']`` (None leaves existing items
    alone on update). The number is generated from the date when omitted and
    a number already in use is rejected with 409.
    """
    document_id = serializers.CharField(required=False, allow_blank=True, max_length=50)
    status = serializers.CharField(required=False)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    def numbering_type(self, attrs):
        return self.Meta.model.DOCUMENT_TYPE

    def validate_status(self, value):
        model = self.Meta.model
        stored = resolve_status(model.DOCUMENT_TYPE, value, {choice for choice, _ in model.STATUS_CHOICES})
        if stored is None:
            raise serializers.ValidationError(f'"{value}" is not a valid status')
        return stored

    def _validated_items(self):
        items_data = self.context.get('items_data')
        if items_data is None:
            return None
        if not isinstance(items_data, list):
            raise serializers.ValidationError({'items': ['Expected a list of items.']})
        item_serializer = ItemInputSerializer(data=items_data, many=True)
        if not item_serializer.is_valid():
            raise serializers.ValidationError({'items': item_serializer.errors})
        return item_serializer.validated_data

    def validate(self, attrs):
        items = self._validated_items()
        if self.instance is None and not items:
            raise serializers.ValidationError({'items': ['At least one item is required.']})
        self._items = items
        return attrs

    def _check_number(self, numbering_type, document_id, exclude_pk=None):
        if document_number_exists(numbering_type, document_id, exclude_pk=exclude_pk):
            raise BusinessRuleError(
                f'Document number {document_id} already exists',
                status_code=409,
                extra={'document_id': document_id},
            )

    @transaction.atomic
    def create(self, validated_data):
        numbering_type = self.numbering_type(validated_data)
        document_id = (validated_data.get('document_id') or '').strip()
        if document_id:
            self._check_number(numbering_type, document_id)
        else:
            document_id = generate_document_number(numbering_type, validated_data['date'])
        validated_data['document_id'] = document_id

        document = self.Meta.model(**validated_data)
        services.compute_totals(document, self._items)
        document.save()
        services.replace_items(document, self._items)
        self.after_create(document, self._items)
        return document

    @transaction.atomic
    def update(self, instance, validated_data):
        items = self._items
        old_items = list(instance.items.select_related('product')) if items is not None else None

        document_id = (validated_data.get('document_id') or '').strip()
        if document_id and document_id != instance.document_id:
            self._check_number(instance.numbering_type, document_id, exclude_pk=instance.pk)
        else:
            validated_data.pop('document_id', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if items is not None:
            services.compute_totals(instance, items)
        instance.save()
        if items is not None:
            services.replace_items(instance, items)
        self.after_update(instance, old_items, items)
        return instance

    def after_create(self, document, items):
        pass

    def after_update(self, document, old_items, items):
        pass

    @property
    def request_user(self):
        request = self.context.get('request')
        return request.user if request is not None else None


DOCUMENT_FIELDS = ['id', 'document_id', 'date', 'note', 'subtotal', 'status', 'items',
                   'created_by', 'created_by_name', 'created_at', 'updated_at']
TAXED_FIELDS = DOCUMENT_FIELDS + ['vat_rate', 'vat_amount', 'total']
TOTALS_READ_ONLY = ['subtotal', 'vat_amount', 'total', 'created_by', 'created_at', 'updated_at']


class ContactSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Contact
        fields = ['id', 'name', 'company', 'email', 'phone', 'ice', 'if_number', 'rc']


class InvoiceSerializer(DocumentSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    client_detail = ContactSummarySerializer(source='client', read_only=True)
    bank_account_name = serializers.CharField(source='bank_account.name', read_only=True, default=None)
    balance_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Invoice
        fields = TAXED_FIELDS + [
            'client', 'client_detail', 'due_date', 'payment_method', 'check_number', 'bank_account',
            'bank_account_name', 'payment_warehouse', 'amount_paid', 'balance_due'
        ]
        read_only_fields = TOTALS_READ_ONLY

    def validate_amount_paid(self, value):
        if value < 0:
            raise serializers.ValidationError('Amount paid cannot be negative')
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)
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
                invoice.status = services.derive_invoice_status(amount, invoice.total, invoice.status)
        if amount > 0:
            services.record_invoice_payment(invoice, amount)
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
            validated_data['status'] = services.derive_invoice_status(
                validated_data['amount_paid'], total, instance.status)
        invoice = super().update(instance, validated_data)
        difference = invoice.amount_paid - previous_paid
        if difference > 0:
            services.record_invoice_payment(invoice, difference)
        return invoice


class EstimateSerializer(DocumentSerializer):
    items = EstimateItemSerializer(many=True, read_only=True)
    client_detail = ContactSummarySerializer(source='client', read_only=True)
    converted_invoice_document_id = serializers.CharField(source='converted_invoice.document_id', read_only=True, default=None)

    class Meta:
        model = Estimate
        fields = TAXED_FIELDS + ['client', 'client_detail', 'converted_invoice', 'converted_invoice_document_id']
        read_only_fields = TOTALS_READ_ONLY + ['converted_invoice']


class DeliveryNoteSerializer(DocumentSerializer):
    """Delivery notes and divers documents; every save moves stock"""
    items = DeliveryNoteItemSerializer(many=True, read_only=True)
    client_detail = ContactSummarySerializer(source='client', read_only=True)
    supplier_detail = ContactSummarySerializer(source='supplier', read_only=True)
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True, default=None)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = DeliveryNote
        fields = DOCUMENT_FIELDS + [
            'client', 'client_detail', 'supplier', 'supplier_detail', 'warehouse', 'warehouse_code',
            'document_type', 'total'
        ]
        read_only_fields = ['subtotal', 'created_by', 'created_at', 'updated_at']

    def numbering_type(self, attrs):
        return attrs.get('document_type') or 'delivery_note'

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.instance is not None:
            # direction is fixed at creation; stock reverts would otherwise go the wrong way
            for field in ('client', 'supplier', 'document_type', 'warehouse'):
                attrs.pop(field, None)
            return attrs
        if attrs.get('client') and attrs.get('supplier'):
            raise serializers.ValidationError('A delivery note has either a client or a supplier, not both.')
        if attrs.get('document_type', 'delivery_note') == 'delivery_note' and not (attrs.get('client') or attrs.get('supplier')):
            raise serializers.ValidationError({'client': ['A client or a supplier is required.']})
        return attrs

    def after_create(self, document, items):
        services.move_items_stock(document, items, services.delivery_direction(document), user=self.request_user)

    def after_update(self, document, old_items, items):
        if items is None:
            return
        direction = services.delivery_direction(document)
        services.move_items_stock(document, old_items, -direction, user=self.request_user)
        services.move_items_stock(document, items, direction, user=self.request_user)


class CreditNoteSerializer(DocumentSerializer):
    items = CreditNoteItemSerializer(many=True, read_only=True)
    client_detail = ContactSummarySerializer(source='client', read_only=True)
    invoice_document_id = serializers.CharField(source='invoice.document_id', read_only=True, default=None)

    class Meta:
        model = CreditNote
        fields = TAXED_FIELDS + ['client', 'client_detail', 'invoice', 'invoice_document_id']
        read_only_fields = TOTALS_READ_ONLY

    def validate(self, attrs):
        attrs = super().validate(attrs)
        client = attrs.get('client', getattr(self.instance, 'client', None))
        invoice = attrs.get('invoice')
        if invoice is not None and client is not None and invoice.client_id != client.id:
            raise serializers.ValidationError({'invoice': ['Invoice belongs to another client.']})
        return attrs


class PrelevementSerializer(DocumentSerializer):
    """Prélèvements take their product lines out of stock"""
    items = PrelevementItemSerializer(many=True, read_only=True)
    client_detail = ContactSummarySerializer(source='client', read_only=True)
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True, default=None)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Prelevement
        fields = DOCUMENT_FIELDS + ['client', 'client_detail', 'warehouse', 'warehouse_code', 'total']
        read_only_fields = ['subtotal', 'created_by', 'created_at', 'updated_at']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.instance is not None:
            attrs.pop('warehouse', None)
        return attrs

    def after_create(self, document, items):
        services.move_items_stock(document, items, -1, user=self.request_user)

    def after_update(self, document, old_items, items):
        if items is None:
            return
        services.move_items_stock(document, old_items, 1, user=self.request_user)
        services.move_items_stock(document, items, -1, user=self.request_user)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()

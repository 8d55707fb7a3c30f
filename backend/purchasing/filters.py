import django_filters
from backend.sales.filters import DocumentFilter
from .models import PurchaseOrder, PurchaseInvoice


class SupplierDocumentFilter(DocumentFilter):
    supplier = django_filters.NumberFilter(field_name='supplier_id')
    supplierId = django_filters.NumberFilter(field_name='supplier_id')


class PurchaseOrderFilter(SupplierDocumentFilter):
    warehouse = django_filters.CharFilter(field_name='warehouse__code')

    class Meta:
        model = PurchaseOrder
        fields = []


class PurchaseInvoiceFilter(SupplierDocumentFilter):
    delivery_note = django_filters.NumberFilter(field_name='delivery_note_id')
    deliveryNoteId = django_filters.NumberFilter(field_name='delivery_note_id')

    class Meta:
        model = PurchaseInvoice
        fields = []

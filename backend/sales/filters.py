import django_filters
from backend.core.status_mapper import resolve_status
from .models import Invoice, Estimate, DeliveryNote, CreditNote, Prelevement


class DocumentFilter(django_filters.FilterSet):
    """
    Common document list filters.

    Dates accept both snake_case and the camelCase names the frontend sends
    (start_date/startDate, end_date/endDate). Status accepts stored or UI names.
    """
    status = django_filters.CharFilter(method='filter_status')
    start_date = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    startDate = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    endDate = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    search = django_filters.CharFilter(field_name='document_id', lookup_expr='icontains')

    def filter_status(self, queryset, name, value):
        model = queryset.model
        stored = resolve_status(model.DOCUMENT_TYPE, value, {choice for choice, _ in model.STATUS_CHOICES})
        return queryset.filter(status=stored or value.strip().lower())


class ClientDocumentFilter(DocumentFilter):
    client = django_filters.NumberFilter(field_name='client_id')
    clientId = django_filters.NumberFilter(field_name='client_id')


class InvoiceFilter(ClientDocumentFilter):
    class Meta:
        model = Invoice
        fields = []


class EstimateFilter(ClientDocumentFilter):
    class Meta:
        model = Estimate
        fields = []


class DeliveryNoteFilter(ClientDocumentFilter):
    supplier = django_filters.NumberFilter(field_name='supplier_id')
    supplierId = django_filters.NumberFilter(field_name='supplier_id')
    document_type = django_filters.ChoiceFilter(choices=DeliveryNote.DOCUMENT_TYPE_CHOICES)
    documentType = django_filters.ChoiceFilter(field_name='document_type', choices=DeliveryNote.DOCUMENT_TYPE_CHOICES)
    warehouse = django_filters.CharFilter(field_name='warehouse__code')

    class Meta:
        model = DeliveryNote
        fields = []


class CreditNoteFilter(ClientDocumentFilter):
    invoice = django_filters.NumberFilter(field_name='invoice_id')
    invoiceId = django_filters.NumberFilter(field_name='invoice_id')

    class Meta:
        model = CreditNote
        fields = []


class PrelevementFilter(ClientDocumentFilter):
    class Meta:
        model = Prelevement
        fields = []

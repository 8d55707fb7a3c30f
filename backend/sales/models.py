from django.db import models
from decimal import Decimal
from backend.catalog.models import Product
from backend.core.models import User
from backend.locations.models import Warehouse
from backend.parties.models import Contact


class BaseDocument(models.Model):
    """Fields shared by every numbered commercial document"""
    DOCUMENT_TYPE = None

    document_id = models.CharField(max_length=50, unique=True)
    date = models.DateField()
    note = models.TextField(blank=True, null=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.document_id

    @property
    def numbering_type(self):
        """Key used for numbering and status mapping"""
        return self.DOCUMENT_TYPE

    class Meta:
        abstract = True
        ordering = ['-date', '-created_at']


class TaxedDocument(BaseDocument):
    """Document carrying VAT (HT / TVA / TTC)"""
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('20.00'))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    class Meta(BaseDocument.Meta):
        abstract = True


class BaseDocumentItem(models.Model):
    """One line of a document; the product link is optional (free text lines)"""
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    description = models.CharField(max_length=500, blank=True, default='')
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.description or self.product_id} x {self.quantity}"

    class Meta:
        abstract = True
        ordering = ['id']


PAYMENT_METHOD_CHOICES = [
    ('cash', 'Espèces'),
    ('check', 'Chèque'),
    ('bank_transfer', 'Virement bancaire'),
]


class Invoice(TaxedDocument):
    """Client invoice (Facture Client)"""
    DOCUMENT_TYPE = 'invoice'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('partially_paid', 'Partially Paid'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]

    client = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='invoices')
    due_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True, null=True)
    check_number = models.CharField(max_length=100, blank=True, null=True)
    bank_account = models.ForeignKey('treasury.BankAccount', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    # cash box credited when a cash payment has no bank account
    payment_warehouse = models.ForeignKey(Warehouse, on_delete=models.SET_NULL, null=True, blank=True, related_name='cash_invoices')
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    @property
    def balance_due(self):
        return max(self.total - self.amount_paid, Decimal('0.00'))

    class Meta(TaxedDocument.Meta):
        db_table = 'invoices'
        indexes = [
            models.Index(fields=['status', '-date'], name='idx_invoice_status_date'),
            models.Index(fields=['client'], name='idx_invoice_client'),
            models.Index(fields=['due_date'], name='idx_invoice_due_date'),
        ]


class InvoiceItem(BaseDocumentItem):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'invoice_items'


class Estimate(TaxedDocument):
    """Quote (Devis)"""
    DOCUMENT_TYPE = 'estimate'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
        ('expired', 'Expired'),
    ]

    client = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='estimates')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    converted_invoice = models.ForeignKey(Invoice, on_delete=models.SET_NULL, null=True, blank=True, related_name='source_estimates')

    class Meta(TaxedDocument.Meta):
        db_table = 'estimates'
        indexes = [
            models.Index(fields=['status', '-date'], name='idx_estimate_status_date'),
            models.Index(fields=['client'], name='idx_estimate_client'),
        ]


class EstimateItem(BaseDocumentItem):
    estimate = models.ForeignKey(Estimate, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'estimate_items'


class DeliveryNote(BaseDocument):
    """
    Bon de Livraison, or a 'divers' stock exit.

    Client notes and divers documents take stock out, supplier notes bring it in.
    """
    DOCUMENT_TYPE = 'delivery_note'
    DOCUMENT_TYPE_CHOICES = [
        ('delivery_note', 'Bon de Livraison'),
        ('divers', 'Divers'),
    ]
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
    ]

    client = models.ForeignKey(Contact, on_delete=models.PROTECT, null=True, blank=True, related_name='delivery_notes')
    supplier = models.ForeignKey(Contact, on_delete=models.PROTECT, null=True, blank=True, related_name='supplier_delivery_notes')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.SET_NULL, null=True, blank=True, related_name='delivery_notes')
    document_type = models.CharField(max_length=20, choices=DOCUMENT_TYPE_CHOICES, default='delivery_note')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')

    @property
    def numbering_type(self):
        return self.document_type

    @property
    def is_outgoing(self):
        return bool(self.client_id) or self.document_type == 'divers'

    @property
    def total(self):
        return self.subtotal

    @property
    def movement_label(self):
        label = 'Divers' if self.document_type == 'divers' else 'Bon de Livraison'
        return f"{label} #{self.document_id}"

    class Meta(BaseDocument.Meta):
        db_table = 'delivery_notes'
        indexes = [
            models.Index(fields=['document_type', '-date'], name='idx_delivery_type_date'),
            models.Index(fields=['client'], name='idx_delivery_client'),
            models.Index(fields=['supplier'], name='idx_delivery_supplier'),
        ]


class DeliveryNoteItem(BaseDocumentItem):
    delivery_note = models.ForeignKey(DeliveryNote, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'delivery_note_items'


class CreditNote(TaxedDocument):
    """Avoir issued to a client, optionally against an invoice"""
    DOCUMENT_TYPE = 'credit_note'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('applied', 'Applied'),
        ('cancelled', 'Cancelled'),
    ]

    client = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='credit_notes')
    invoice = models.ForeignKey(Invoice, on_delete=models.SET_NULL, null=True, blank=True, related_name='credit_notes')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')

    class Meta(TaxedDocument.Meta):
        db_table = 'credit_notes'
        indexes = [
            models.Index(fields=['status', '-date'], name='idx_credit_note_status_date'),
            models.Index(fields=['client'], name='idx_credit_note_client'),
        ]


class CreditNoteItem(BaseDocumentItem):
    credit_note = models.ForeignKey(CreditNote, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'credit_note_items'


class Prelevement(BaseDocument):
    """Stock withdrawal (Prélèvement), optionally for a client"""
    DOCUMENT_TYPE = 'prelevement'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('validated', 'Validated'),
        ('cancelled', 'Cancelled'),
    ]

    client = models.ForeignKey(Contact, on_delete=models.PROTECT, null=True, blank=True, related_name='prelevements')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.SET_NULL, null=True, blank=True, related_name='prelevements')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')

    @property
    def total(self):
        return self.subtotal

    @property
    def movement_label(self):
        return f"Prélèvement #{self.document_id}"

    class Meta(BaseDocument.Meta):
        db_table = 'prelevements'
        indexes = [
            models.Index(fields=['status', '-date'], name='idx_prelevement_status_date'),
        ]


class PrelevementItem(BaseDocumentItem):
    prelevement = models.ForeignKey(Prelevement, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'prelevement_items'

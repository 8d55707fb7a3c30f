from django.db import models
from decimal import Decimal
from backend.locations.models import Warehouse
from backend.parties.models import Contact
from backend.sales.models import BaseDocument, TaxedDocument, BaseDocumentItem, DeliveryNote, PAYMENT_METHOD_CHOICES


class PurchaseOrder(BaseDocument):
    """Order sent to a supplier (Bon de Commande)"""
    DOCUMENT_TYPE = 'purchase_order'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('confirmed', 'Confirmed'),
        ('received', 'Received'),
        ('cancelled', 'Cancelled'),
    ]

    supplier = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='purchase_orders')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    # set the first time the order is received so stock is only added once
    stock_received_at = models.DateTimeField(blank=True, null=True)

    @property
    def total(self):
        return self.subtotal

    @property
    def movement_label(self):
        return f"Stock added from Purchase Order {self.document_id}"

    class Meta(BaseDocument.Meta):
        db_table = 'purchase_orders'
        indexes = [
            models.Index(fields=['status', '-date'], name='idx_po_status_date'),
            models.Index(fields=['supplier'], name='idx_po_supplier'),
        ]


class PurchaseOrderItem(BaseDocumentItem):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'purchase_order_items'


class PurchaseInvoice(TaxedDocument):
    """Supplier invoice (Facture Achat)"""
    DOCUMENT_TYPE = 'purchase_invoice'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('received', 'Received'),
        ('partially_paid', 'Partially Paid'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]

    supplier = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='purchase_invoices')
    due_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True, null=True)
    check_number = models.CharField(max_length=100, blank=True, null=True)
    bank_account = models.ForeignKey('treasury.BankAccount', on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_invoices')
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    attachment_url = models.CharField(max_length=500, blank=True, null=True)
    delivery_note = models.ForeignKey(DeliveryNote, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_invoices')

    @property
    def balance_due(self):
        return max(self.total - self.amount_paid, Decimal('0.00'))

    class Meta(TaxedDocument.Meta):
        db_table = 'purchase_invoices'
        indexes = [
            models.Index(fields=['status', '-date'], name='idx_pi_status_date'),
            models.Index(fields=['supplier'], name='idx_pi_supplier'),
            models.Index(fields=['delivery_note'], name='idx_pi_delivery_note'),
        ]


class PurchaseInvoiceItem(BaseDocumentItem):
    purchase_invoice = models.ForeignKey(PurchaseInvoice, on_delete=models.CASCADE, related_name='items')

    class Meta(BaseDocumentItem.Meta):
        db_table = 'purchase_invoice_items'

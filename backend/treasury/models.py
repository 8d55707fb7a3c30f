from decimal import Decimal

from django.db import models
from backend.locations.models import Warehouse


class BankAccount(models.Model):
    name = models.CharField(max_length=255)
    bank = models.CharField(max_length=255)
    account_number = models.CharField(max_length=100)
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.bank})"

    class Meta:
        db_table = 'treasury_bank_accounts'
        ordering = ['name']


class WarehouseCash(models.Model):
    """Cash held at a warehouse"""
    warehouse = models.OneToOneField(Warehouse, on_delete=models.CASCADE, related_name='cash')
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.warehouse.code}: {self.amount}"

    class Meta:
        db_table = 'treasury_warehouse_cash'
        verbose_name_plural = 'warehouse cash'


class Payment(models.Model):
    """Money received from a client (sales) or paid to a supplier (purchase)"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Espèces'),
        ('check', 'Chèque'),
        ('bank_transfer', 'Virement bancaire'),
    ]
    STATUS_CHOICES = [
        ('in-hand', 'In Hand'),
        ('deposited', 'Deposited'),
        ('cleared', 'Cleared'),
        ('bounced', 'Bounced'),
    ]
    PAYMENT_TYPE_CHOICES = [
        ('sales', 'Sales'),
        ('purchase', 'Purchase'),
    ]

    invoice_number = models.CharField(max_length=100, db_index=True)
    sales_invoice = models.ForeignKey('sales.Invoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    purchase_invoice = models.ForeignKey('purchasing.PurchaseInvoice', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    entity = models.CharField(max_length=255, help_text="Client or supplier name")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='bank_transfer')
    bank = models.CharField(max_length=255, blank=True, null=True)
    check_number = models.CharField(max_length=100, blank=True, null=True)
    maturity_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='in-hand')
    payment_date = models.DateField()
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES)
    bank_account = models.ForeignKey(BankAccount, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    warehouse = models.ForeignKey(Warehouse, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.invoice_number} {self.amount} ({self.status})"

    class Meta:
        db_table = 'treasury_payments'
        ordering = ['-payment_date', '-created_at']
        indexes = [
            models.Index(fields=['payment_type', 'status'], name='idx_payment_type_status'),
            models.Index(fields=['-payment_date'], name='idx_payment_date'),
        ]

"""Purchasing rules: receiving orders into stock and paying supplier invoices"""
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from backend.core.exceptions import BusinessRuleError
from backend.core.moroccan import round2
from backend.sales.services import move_items_stock
from backend.treasury.models import Payment
from backend.treasury.services import record_payment, delete_payments
from .models import PurchaseInvoice

logger = logging.getLogger(__name__)


@transaction.atomic
def receive_purchase_order(order, user=None):
    """Add the order's product lines to stock; only the first reception counts"""
    if order.stock_received_at is not None:
        logger.info(f"Purchase order {order.document_id} already received, stock unchanged")
        return False
    move_items_stock(order, list(order.items.select_related('product')), 1, user=user)
    order.stock_received_at = timezone.now()
    order.save(update_fields=['stock_received_at', 'updated_at'])
    return True


def check_delivery_note_not_invoiced(delivery_note, exclude_pk=None):
    """A delivery note may back only one live purchase invoice"""
    if delivery_note is None:
        return
    existing = PurchaseInvoice.objects.filter(delivery_note=delivery_note).exclude(status='cancelled')
    if exclude_pk is not None:
        existing = existing.exclude(pk=exclude_pk)
    existing = existing.first()
    if existing is not None:
        raise BusinessRuleError(
            f'An invoice ({existing.document_id}) already exists for this Delivery Note.',
            error='Duplicate Invoice',
            extra={'errorCode': 'DUPLICATE_INVOICE_FROM_BL', 'existingDocumentId': existing.document_id},
        )


def derive_purchase_invoice_status(amount_paid, total):
    if amount_paid >= total and total > 0:
        return 'paid'
    if amount_paid > 0:
        return 'partially_paid'
    return 'received'


def record_supplier_payment(invoice, amount):
    """Payment to a supplier; cleared payments are debited from the bank account"""
    return record_payment(
        payment_type='purchase',
        invoice_number=invoice.document_id,
        entity=invoice.supplier.display_name if invoice.supplier_id else 'Unknown Supplier',
        amount=round2(amount),
        payment_method=invoice.payment_method or 'cash',
        check_number=invoice.check_number,
        bank_account=invoice.bank_account,
        purchase_invoice=invoice,
    )


def purchase_invoice_payments(invoice):
    return Payment.objects.filter(
        Q(purchase_invoice=invoice) | Q(invoice_number=invoice.document_id, payment_type='purchase')
    )


@transaction.atomic
def delete_purchase_invoice(invoice):
    reverted = delete_payments(purchase_invoice_payments(invoice))
    document_id = invoice.document_id
    invoice.delete()
    logger.info(f"Purchase invoice {document_id} deleted ({reverted} payment(s) reverted)")


@transaction.atomic
def mark_purchase_invoice_paid(invoice):
    """Pay the remaining balance when a supplier invoice is marked paid"""
    outstanding = invoice.total - invoice.amount_paid
    if outstanding <= 0:
        return None
    payment = record_supplier_payment(invoice, outstanding)
    invoice.amount_paid = invoice.total
    invoice.save(update_fields=['amount_paid', 'updated_at'])
    return payment

"""
Business rules behind sales documents: totals, item replacement, stock
movements of delivery notes and prélèvements, invoice payments and estimate
conversion.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from backend.core.exceptions import BusinessRuleError
from backend.core.moroccan import calculate_invoice_totals, calculate_line_total, round2
from backend.core.numbering import generate_document_number
from backend.core.utils import create_notification
from backend.inventory.services import apply_stock_change
from backend.treasury.models import Payment
from backend.treasury.services import record_payment, delete_payments
from .models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)


def compute_totals(document, items):
    """Set subtotal (and VAT/total for taxed documents) from validated items"""
    if hasattr(document, 'vat_amount'):
        subtotal, vat_amount, total = calculate_invoice_totals(items, document.vat_rate)
        document.subtotal = subtotal
        document.vat_amount = vat_amount
        document.total = total
    else:
        document.subtotal, _, _ = calculate_invoice_totals(items, 0)
    return document


def replace_items(document, items):
    """Delete the document's lines and create ``items`` in their place"""
    item_model = document.items.model
    parent_field = document.items.field.name
    document.items.all().delete()
    created = []
    for item in items:
        product = item.get('product')
        created.append(item_model.objects.create(**{
            parent_field: document,
            'product': product,
            'description': item.get('description') or (product.name if product else ''),
            'quantity': item['quantity'],
            'unit_price': item['unit_price'],
            'total': calculate_line_total(item['quantity'], item['unit_price']),
        }))
    return created


def move_items_stock(document, items, direction, user=None):
    """
    Move stock for every product line: direction -1 takes stock out, +1 brings it in.

    ``items`` may be saved item rows or validated item dicts.
    """
    warehouse = getattr(document, 'warehouse', None)
    for item in items:
        product = item.get('product') if isinstance(item, dict) else item.product
        quantity = item['quantity'] if isinstance(item, dict) else item.quantity
        if product is None:
            continue
        apply_stock_change(
            product,
            Decimal(direction) * abs(Decimal(quantity)),
            warehouse=warehouse,
            reference=document.document_id,
            description=document.movement_label,
            user=user,
        )


def delivery_direction(delivery_note):
    return -1 if delivery_note.is_outgoing else 1


# Invoices

def derive_invoice_status(amount_paid, total, current_status):
    """Status implied by the amount paid, when the caller did not set one"""
    if amount_paid >= total and total > 0:
        return 'paid'
    if amount_paid > 0:
        return 'partially_paid'
    if current_status in ('paid', 'partially_paid'):
        return 'sent'
    return current_status


def record_invoice_payment(invoice, amount):
    """Treasury payment for money received on an invoice"""
    return record_payment(
        payment_type='sales',
        invoice_number=invoice.document_id,
        entity=invoice.client.display_name if invoice.client_id else 'Unknown Client',
        amount=round2(amount),
        payment_method=invoice.payment_method,
        check_number=invoice.check_number,
        bank_account=invoice.bank_account,
        warehouse=invoice.payment_warehouse,
        sales_invoice=invoice,
    )


def invoice_payments(invoice):
    return Payment.objects.filter(
        Q(sales_invoice=invoice) | Q(invoice_number=invoice.document_id, payment_type='sales')
    )


@transaction.atomic
def mark_invoice_paid(invoice):
    """Notify and record the outstanding amount when an invoice is marked paid"""
    create_notification(
        title='Payment Received',
        message=f"Invoice {invoice.document_id} has been marked as PAID.",
        type='success',
        action_url=f"/sales/invoices/{invoice.pk}",
        action_label='View Invoice',
    )
    if invoice_payments(invoice).exists():
        return None
    outstanding = invoice.total - invoice.amount_paid
    if outstanding <= 0:
        return None
    payment = record_invoice_payment(invoice, outstanding)
    invoice.amount_paid = invoice.total
    invoice.save(update_fields=['amount_paid', 'updated_at'])
    return payment


@transaction.atomic
def delete_invoice(invoice):
    """Delete an invoice, reversing its cleared payments first"""
    reverted = delete_payments(invoice_payments(invoice))
    document_id = invoice.document_id
    invoice.delete()
    logger.info(f"Invoice {document_id} deleted ({reverted} payment(s) reverted)")


@transaction.atomic
def convert_estimate(estimate, user=None, invoice_date=None):
    """Create a draft invoice from an estimate and mark the estimate accepted"""
    if estimate.converted_invoice_id:
        raise BusinessRuleError(
            'Estimate already converted to an invoice',
            status_code=409,
            extra={'invoiceId': estimate.converted_invoice_id,
                   'invoiceDocumentId': estimate.converted_invoice.document_id},
        )
    invoice_date = invoice_date or timezone.localdate()
    invoice = Invoice.objects.create(
        document_id=generate_document_number('invoice', invoice_date),
        client=estimate.client,
        date=invoice_date,
        note=estimate.note,
        vat_rate=estimate.vat_rate,
        subtotal=estimate.subtotal,
        vat_amount=estimate.vat_amount,
        total=estimate.total,
        status='draft',
        created_by=user if user is not None and user.is_authenticated else None,
    )
    for item in estimate.items.all():
        InvoiceItem.objects.create(
            invoice=invoice,
            product=item.product,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=item.total,
        )
    estimate.status = 'accepted'
    estimate.converted_invoice = invoice
    estimate.save(update_fields=['status', 'converted_invoice', 'updated_at'])
    logger.info(f"Estimate {estimate.document_id} converted to invoice {invoice.document_id}")
    return invoice

"""
Account statements (Relevé) for clients and suppliers.

A statement lists the contact's invoices as debits and the payments and
credit notes as credits, in date order, with a running balance of what is
still owed. Entries before ``date_from`` are folded into the opening balance.
"""
from decimal import Decimal

from django.utils import timezone

from backend.core.numbering import format_document_number

BILLABLE_INVOICE_EXCLUDED = ('draft', 'cancelled')
CREDIT_NOTE_STATUSES = ('sent', 'applied')


def _client_entries(contact):
    from backend.sales.models import Invoice, CreditNote
    from backend.treasury.models import Payment

    for invoice in Invoice.objects.filter(client=contact).exclude(status__in=BILLABLE_INVOICE_EXCLUDED):
        yield {
            'date': invoice.date,
            'type': 'invoice',
            'reference': invoice.document_id,
            'description': f"Facture {invoice.document_id}",
            'debit': invoice.total,
            'credit': Decimal('0.00'),
        }
    for credit_note in CreditNote.objects.filter(client=contact, status__in=CREDIT_NOTE_STATUSES):
        yield {
            'date': credit_note.date,
            'type': 'credit_note',
            'reference': credit_note.document_id,
            'description': f"Avoir {credit_note.document_id}",
            'debit': Decimal('0.00'),
            'credit': credit_note.total,
        }
    payments = Payment.objects.filter(payment_type='sales', sales_invoice__client=contact).exclude(status='bounced')
    for payment in payments:
        yield {
            'date': payment.payment_date,
            'type': 'payment',
            'reference': payment.invoice_number,
            'description': f"Règlement {payment.get_payment_method_display()}",
            'debit': Decimal('0.00'),
            'credit': payment.amount,
        }


def _supplier_entries(contact):
    from backend.purchasing.models import PurchaseInvoice
    from backend.treasury.models import Payment

    for invoice in PurchaseInvoice.objects.filter(supplier=contact).exclude(status__in=BILLABLE_INVOICE_EXCLUDED):
        yield {
            'date': invoice.date,
            'type': 'purchase_invoice',
            'reference': invoice.document_id,
            'description': f"Facture Achat {invoice.document_id}",
            'debit': invoice.total,
            'credit': Decimal('0.00'),
        }
    payments = Payment.objects.filter(payment_type='purchase', purchase_invoice__supplier=contact).exclude(status='bounced')
    for payment in payments:
        yield {
            'date': payment.payment_date,
            'type': 'payment',
            'reference': payment.invoice_number,
            'description': f"Règlement {payment.get_payment_method_display()}",
            'debit': Decimal('0.00'),
            'credit': payment.amount,
        }


def build_statement(contact, date_from=None, date_to=None):
    """Statement payload for ``contact`` between two dates (inclusive)"""
    date_to = date_to or timezone.localdate()
    source = _client_entries if contact.contact_type == 'client' else _supplier_entries
    # debits before credits on the same day
    entries = sorted(source(contact), key=lambda e: (e['date'], e['debit'] == 0, e['reference'] or ''))

    opening_balance = Decimal('0.00')
    lines = []
    total_debit = Decimal('0.00')
    total_credit = Decimal('0.00')
    for entry in entries:
        if entry['date'] > date_to:
            continue
        if date_from and entry['date'] < date_from:
            opening_balance += entry['debit'] - entry['credit']
            continue
        lines.append(entry)

    balance = opening_balance
    for entry in lines:
        balance += entry['debit'] - entry['credit']
        total_debit += entry['debit']
        total_credit += entry['credit']
        entry['balance'] = balance

    return {
        'statement_number': format_document_number('statement', date_to, contact.pk),
        'contact': {
            'id': contact.id,
            'name': contact.display_name,
            'contact_type': contact.contact_type,
            'ice': contact.ice,
            'address': contact.address,
            'city': contact.city,
        },
        'date_from': date_from,
        'date_to': date_to,
        'opening_balance': opening_balance,
        'entries': lines,
        'total_debit': total_debit,
        'total_credit': total_credit,
        'closing_balance': balance,
    }

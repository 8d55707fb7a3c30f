"""
VAT (TVA) and corporate tax (IS) summaries for a quarter or a year.

VAT collected comes from issued sales invoices, less the VAT of applied
credit notes; VAT paid comes from supplier invoices. A negative VAT due is
a VAT credit carried forward.
"""
import calendar
import logging
from datetime import date
from decimal import Decimal

from django.db.models import Sum

from backend.core.moroccan import calculate_corporate_tax, round2
from backend.sales.models import Invoice, CreditNote
from backend.purchasing.models import PurchaseInvoice

logger = logging.getLogger('backend.reports')

QUARTER_MONTHS = {
    'q1': (1, 3),
    'q2': (4, 6),
    'q3': (7, 9),
    'q4': (10, 12),
    'annual': (1, 12),
}

EXCLUDED_STATUSES = ('draft', 'cancelled')


def normalize_quarter(quarter):
    """'Q2', 'q2', '2' and 2 all mean q2; 'annual'/'year' mean the whole year"""
    value = str(quarter or '').strip().lower()
    if value in ('annual', 'year', 'all'):
        return 'annual'
    if value.isdigit():
        value = f'q{value}'
    if value not in QUARTER_MONTHS:
        raise ValueError(f"Invalid quarter: {quarter}")
    return value


def period_bounds(year, quarter):
    quarter = normalize_quarter(quarter)
    first_month, last_month = QUARTER_MONTHS[quarter]
    last_day = calendar.monthrange(int(year), last_month)[1]
    return date(int(year), first_month, 1), date(int(year), last_month, last_day)


def _sum(queryset, field):
    return queryset.aggregate(total=Sum(field))['total'] or Decimal('0.00')


def _document_rows(queryset, contact_field):
    rows = []
    for document in queryset.select_related(contact_field).order_by('date', 'document_id'):
        contact = getattr(document, contact_field)
        rows.append({
            'id': document.id,
            'document_id': document.document_id,
            'date': document.date.isoformat(),
            'contact': contact.display_name if contact else None,
            'subtotal': str(document.subtotal),
            'vat_amount': str(document.vat_amount),
            'total': str(document.total),
            'status': document.status,
        })
    return rows


def compute_tax_summary(year, quarter):
    """
    Tax figures for ``year``/``quarter``; amounts are strings so the result
    can be stored as-is in TaxReport.data.
    """
    quarter = normalize_quarter(quarter)
    start, end = period_bounds(year, quarter)

    sales = Invoice.objects.filter(date__range=(start, end)).exclude(status__in=EXCLUDED_STATUSES)
    purchases = PurchaseInvoice.objects.filter(date__range=(start, end)).exclude(status__in=EXCLUDED_STATUSES)
    credit_notes = CreditNote.objects.filter(date__range=(start, end), status='applied')

    credit_note_vat = _sum(credit_notes, 'vat_amount')
    credit_note_subtotal = _sum(credit_notes, 'subtotal')

    vat_collected = _sum(sales, 'vat_amount') - credit_note_vat
    vat_paid = _sum(purchases, 'vat_amount')
    vat_due = vat_collected - vat_paid

    gross_revenue = _sum(sales, 'subtotal') - credit_note_subtotal
    expenses = _sum(purchases, 'subtotal')
    net_profit = gross_revenue - expenses
    estimated_is = calculate_corporate_tax(net_profit)

    logger.debug(f"Tax summary {year} {quarter}: VAT due {vat_due}, profit {net_profit}")
    return {
        'year': int(year),
        'quarter': quarter,
        'period': {'start': start.isoformat(), 'end': end.isoformat()},
        'vat': {
            'collected': str(round2(vat_collected)),
            'paid': str(round2(vat_paid)),
            'due': str(round2(vat_due)),
            'credit_notes': str(round2(credit_note_vat)),
            'is_credit': vat_due < 0,
        },
        'revenue': {
            'gross_revenue': str(round2(gross_revenue)),
            'expenses': str(round2(expenses)),
            'net_profit': str(round2(net_profit)),
        },
        'estimated_is': str(round2(estimated_is)),
        'counts': {
            'sales_invoices': sales.count(),
            'purchase_invoices': purchases.count(),
            'credit_notes': credit_notes.count(),
        },
        'sales_invoices': _document_rows(sales, 'client'),
        'purchase_invoices': _document_rows(purchases, 'supplier'),
    }

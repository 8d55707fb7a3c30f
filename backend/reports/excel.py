"""Styled Excel exports (openpyxl): purple header, thin borders, zebra rows, frozen header."""
import io
import logging
from datetime import date, datetime
from decimal import Decimal

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from backend.catalog.models import Product
from backend.locations.models import Warehouse
from backend.purchasing.models import PurchaseOrder, PurchaseInvoice
from backend.sales.models import Invoice, Estimate, DeliveryNote, CreditNote
from backend.treasury.models import BankAccount

logger = logging.getLogger('backend.reports')

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

HEADER_FONT = Font(name='Arial', bold=True, size=11, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='5B2C6F', end_color='5B2C6F', fill_type='solid')
ZEBRA_FILL = PatternFill(start_color='F9F9F9', end_color='F9F9F9', fill_type='solid')
HEADER_BORDER = Border(
    left=Side(style='thin'), right=Side(style='thin'),
    top=Side(style='thin'), bottom=Side(style='thin')
)
BODY_BORDER = Border(
    left=Side(style='thin', color='D9D9D9'), right=Side(style='thin', color='D9D9D9'),
    top=Side(style='thin', color='D9D9D9'), bottom=Side(style='thin', color='D9D9D9')
)
MONEY_FORMAT = '#,##0.00 "DH"'
MONEY_KEYS = {'total', 'price', 'total_value', 'balance', 'amount'}
LOW_QUANTITY = 10


def _contact_name(contact):
    return contact.display_name if contact else ''


def _inventory_rows():
    for product in Product.objects.filter(is_deleted=False).order_by('name'):
        yield {
            'name': product.name,
            'sku': product.sku,
            'category': product.category,
            'quantity': product.stock,
            'price': product.price,
            'total_value': product.stock * product.price,
            'status': product.status,
            'created_at': product.created_at,
        }


def _document_rows(queryset, contact_field, extra=()):
    for document in queryset.select_related(contact_field).order_by('-date'):
        row = {
            'document_id': document.document_id,
            'contact': _contact_name(getattr(document, contact_field)),
            'date': document.date,
            'total': document.total,
            'status': document.status,
            'created_at': document.created_at,
        }
        for field in extra:
            row[field] = getattr(document, field)
        yield row


def _treasury_rows():
    for account in BankAccount.objects.order_by('bank', 'name'):
        yield {'account_type': 'bank', 'bank': account.bank, 'account_number': account.account_number,
               'balance': account.balance}
    for warehouse in Warehouse.objects.select_related('cash').order_by('city', 'name'):
        cash = getattr(warehouse, 'cash', None)
        if cash is None:
            continue
        yield {'account_type': 'warehouse', 'bank': warehouse.city or warehouse.name,
               'account_number': 'Warehouse Cash', 'balance': cash.amount}


def _columns(*specs):
    return [{'header': header, 'key': key, 'width': width} for header, key, width in specs]


DOCUMENT_COLUMNS = ('Date', 'date', 15), ('Total', 'total', 18), ('Status', 'status', 15), ('Created At', 'created_at', 20)

REPORT_CONFIGS = {
    'inventory': {
        'title': 'Inventory Report',
        'rows': _inventory_rows,
        'columns': _columns(
            ('Product Name', 'name', 30), ('SKU', 'sku', 15), ('Category', 'category', 20),
            ('Quantity', 'quantity', 12), ('Unit Price', 'price', 15), ('Total Value', 'total_value', 18),
            ('Status', 'status', 15), ('Date Added', 'created_at', 20),
        ),
    },
    'sales-invoice': {
        'title': 'Sales Invoices Report',
        'rows': lambda: _document_rows(Invoice.objects.all(), 'client', extra=('payment_method',)),
        'columns': _columns(('Invoice #', 'document_id', 15), ('Client', 'contact', 25), *DOCUMENT_COLUMNS,
                            ('Payment', 'payment_method', 15)),
    },
    'sales-estimate': {
        'title': 'Estimates Report',
        'rows': lambda: _document_rows(Estimate.objects.all(), 'client'),
        'columns': _columns(('Estimate #', 'document_id', 15), ('Client', 'contact', 25), *DOCUMENT_COLUMNS),
    },
    'sales-delivery_note': {
        'title': 'Delivery Notes Report',
        'rows': lambda: _document_rows(DeliveryNote.objects.filter(document_type='delivery_note', supplier__isnull=True), 'client'),
        'columns': _columns(('Note #', 'document_id', 15), ('Client', 'contact', 25), *DOCUMENT_COLUMNS),
    },
    'sales-divers': {
        'title': 'Divers Notes Report',
        'rows': lambda: _document_rows(DeliveryNote.objects.filter(document_type='divers'), 'client'),
        'columns': _columns(('Bon #', 'document_id', 15), ('Client', 'contact', 25), *DOCUMENT_COLUMNS),
    },
    'sales-credit_note': {
        'title': 'Credit Notes Report',
        'rows': lambda: _document_rows(CreditNote.objects.all(), 'client'),
        'columns': _columns(('Credit Note #', 'document_id', 15), ('Client', 'contact', 25), *DOCUMENT_COLUMNS),
    },
    'purchases-purchase_order': {
        'title': 'Purchase Orders Report',
        'rows': lambda: _document_rows(PurchaseOrder.objects.all(), 'supplier'),
        'columns': _columns(('Order #', 'document_id', 15), ('Supplier', 'contact', 25), *DOCUMENT_COLUMNS),
    },
    'purchases-invoice': {
        'title': 'Purchase Invoices Report',
        'rows': lambda: _document_rows(PurchaseInvoice.objects.all(), 'supplier', extra=('payment_method',)),
        'columns': _columns(('Invoice #', 'document_id', 15), ('Supplier', 'contact', 25), *DOCUMENT_COLUMNS,
                            ('Payment', 'payment_method', 15)),
    },
    'purchases-delivery_note': {
        'title': 'Purchase Delivery Notes Report',
        'rows': lambda: _document_rows(DeliveryNote.objects.filter(supplier__isnull=False), 'supplier'),
        'columns': _columns(('Note #', 'document_id', 15), ('Supplier', 'contact', 25), *DOCUMENT_COLUMNS),
    },
    'treasury': {
        'title': 'Treasury Report',
        'rows': _treasury_rows,
        'columns': _columns(
            ('Account Type', 'account_type', 18), ('Bank/Warehouse', 'bank', 30),
            ('Account Number', 'account_number', 25), ('Balance', 'balance', 18),
        ),
    },
}


def _cell_value(key, value):
    if value is None:
        return ''
    if key in ('created_at', 'date') and isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, Decimal):
        return float(value)
    return value


def build_workbook(columns, rows, title):
    """Workbook with one styled sheet; returns the .xlsx bytes"""
    workbook = Workbook()
    sheet = workbook.active
    # sheet titles are capped at 31 characters
    sheet.title = title[:31]

    for index, column in enumerate(columns, 1):
        cell = sheet.cell(row=1, column=index, value=column['header'])
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(vertical='center', horizontal='left')
        cell.border = HEADER_BORDER
        sheet.column_dimensions[get_column_letter(index)].width = column['width']
    sheet.row_dimensions[1].height = 24

    for row_number, row in enumerate(rows, 2):
        for index, column in enumerate(columns, 1):
            key = column['key']
            value = _cell_value(key, row.get(key))
            cell = sheet.cell(row=row_number, column=index, value=value)
            cell.border = BODY_BORDER
            if row_number % 2 == 1:
                cell.fill = ZEBRA_FILL
            if key == 'quantity' and isinstance(value, (int, float)) and value < LOW_QUANTITY:
                cell.font = Font(color='FF0000', bold=True)
            if key == 'status' and value == 'draft':
                cell.font = Font(color='808080', italic=True)
            if key in MONEY_KEYS:
                cell.number_format = MONEY_FORMAT
                cell.alignment = Alignment(horizontal='right')

    sheet.freeze_panes = 'A2'
    sheet.auto_filter.ref = f"A1:{get_column_letter(len(columns))}1"

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


def export_report(report_type):
    """(bytes, filename) for a configured report; KeyError for unknown types"""
    config = REPORT_CONFIGS[report_type]
    content = build_workbook(config['columns'], list(config['rows']()), config['title'])
    filename = f"{report_type}_Report_{date.today():%Y-%m-%d}.xlsx"
    logger.info(f"Excel export generated: {filename}")
    return content, filename


def export_tax_report(summary):
    """Tax summary as a two-column sheet followed by the invoice lists"""
    vat = summary['vat']
    revenue = summary['revenue']
    lines = [
        {'label': 'Période', 'amount': f"{summary['year']} {summary['quarter'].upper()}"},
        {'label': 'TVA collectée', 'amount': Decimal(vat['collected'])},
        {'label': 'TVA déductible', 'amount': Decimal(vat['paid'])},
        {'label': 'Crédit de TVA' if vat['is_credit'] else 'TVA à Payer', 'amount': Decimal(vat['due'])},
        {'label': "Chiffre d'affaires HT", 'amount': Decimal(revenue['gross_revenue'])},
        {'label': 'Charges HT', 'amount': Decimal(revenue['expenses'])},
        {'label': 'Résultat net', 'amount': Decimal(revenue['net_profit'])},
        {'label': 'IS estimé', 'amount': Decimal(summary['estimated_is'])},
    ]
    for document in summary['sales_invoices']:
        lines.append({'label': f"Vente {document['document_id']} ({document['contact'] or ''})",
                      'amount': Decimal(document['total'])})
    for document in summary['purchase_invoices']:
        lines.append({'label': f"Achat {document['document_id']} ({document['contact'] or ''})",
                      'amount': Decimal(document['total'])})
    columns = _columns(('Libellé', 'label', 45), ('Montant', 'amount', 20))
    content = build_workbook(columns, lines, 'Rapport Fiscal')
    return content, f"Tax_Report_{summary['year']}_{summary['quarter'].upper()}.xlsx"

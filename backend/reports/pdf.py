"""
PDF rendering with reportlab: commercial documents, tax reports and
account statements, all sharing the company header and footer.
"""
import base64
import binascii
import io
import logging

from django.http import HttpResponse
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from backend.core.models import CompanySettings
from backend.core.moroccan import format_mad_full

logger = logging.getLogger('backend.reports')

DOCUMENT_TITLES = {
    'invoice': 'FACTURE',
    'estimate': 'DEVIS',
    'delivery_note': 'BON DE LIVRAISON',
    'divers': 'BON DIVERS',
    'credit_note': 'AVOIR',
    'prelevement': 'PRÉLÈVEMENT',
    'purchase_order': 'BON DE COMMANDE',
    'purchase_invoice': 'FACTURE ACHAT',
}

DEFAULT_PRIMARY = '#5B2C6F'
DEFAULT_TITLE = '#1F2937'


def pdf_response(content, filename):
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _hex(value, default):
    try:
        return colors.HexColor(value or default)
    except ValueError:
        return colors.HexColor(default)


class _Theme:
    def __init__(self, company):
        self.company = company
        self.primary = _hex(getattr(company, 'pdf_primary_color', None), DEFAULT_PRIMARY)
        self.title = _hex(getattr(company, 'pdf_title_color', None), DEFAULT_TITLE)
        styles = getSampleStyleSheet()
        self.normal = ParagraphStyle('EvoNormal', parent=styles['Normal'], fontSize=9, leading=12)
        self.small = ParagraphStyle('EvoSmall', parent=self.normal, fontSize=8, textColor=colors.grey)
        self.heading = ParagraphStyle('EvoHeading', parent=styles['Heading1'], fontSize=18, textColor=self.title)
        self.section = ParagraphStyle('EvoSection', parent=styles['Heading3'], fontSize=11, textColor=self.primary)
        self.company_name = ParagraphStyle('EvoCompany', parent=styles['Heading2'], fontSize=14, textColor=self.primary)


def _logo(data_url):
    """Image flowable from a base64 data URL, or None"""
    if not data_url or ',' not in data_url:
        return None
    try:
        raw = base64.b64decode(data_url.split(',', 1)[1])
    except (binascii.Error, ValueError):
        logger.warning("Company logo is not valid base64, skipped")
        return None
    return Image(io.BytesIO(raw), width=30 * mm, height=30 * mm, kind='proportional')


def _legal_ids(company):
    parts = []
    for label, field in (('ICE', 'ice'), ('IF', 'if_number'), ('RC', 'rc'), ('TP', 'tp'),
                         ('Patente', 'patente'), ('CNSS', 'cnss')):
        value = getattr(company, field, None)
        if value:
            parts.append(f"{label}: {value}")
    return ' | '.join(parts)


def _header(theme, title, number, date_text):
    company = theme.company
    left = []
    if company is not None:
        left.append(Paragraph(company.name, theme.company_name))
        details = [company.legal_form, company.address, company.phone, company.email]
        left.append(Paragraph('<br/>'.join(d for d in details if d), theme.normal))
    right = [
        Paragraph(title, theme.heading),
        Paragraph(f"N° {number}", theme.normal),
        Paragraph(f"Date : {date_text}", theme.normal),
    ]
    logo = _logo(company.logo) if company is not None else None
    cells = [[logo, left, right]] if logo is not None else [[left, right]]
    widths = [35 * mm, 75 * mm, 70 * mm] if logo is not None else [110 * mm, 70 * mm]
    table = Table(cells, colWidths=widths)
    table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    return table


def _footer(theme):
    company = theme.company
    if company is None:
        return []
    lines = [line for line in (company.footer_text, _legal_ids(company)) if line]
    return [Spacer(1, 10 * mm)] + [Paragraph(line, theme.small) for line in lines]


def _grid(rows, theme, widths, money_columns=()):
    table = Table(rows, colWidths=widths, repeatRows=1)
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), theme.primary),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#D9D9D9')),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]
    for column in money_columns:
        style.append(('ALIGN', (column, 1), (column, -1), 'RIGHT'))
    table.setStyle(TableStyle(style))
    return table


def _totals_table(pairs, theme):
    table = Table(pairs, colWidths=[45 * mm, 40 * mm], hAlign='RIGHT')
    table.setStyle(TableStyle([
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, theme.primary),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
    ]))
    return table


def _build(story):
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=15 * mm, rightMargin=15 * mm,
                            topMargin=15 * mm, bottomMargin=15 * mm)
    doc.build(story)
    return buffer.getvalue()


def _contact_block(document, theme):
    contact = getattr(document, 'client', None) or getattr(document, 'supplier', None)
    if contact is None:
        return []
    label = 'Client' if getattr(document, 'client', None) is not None else 'Fournisseur'
    lines = [f"<b>{label} :</b> {contact.display_name}"]
    if contact.address or contact.city:
        lines.append(', '.join(p for p in (contact.address, contact.city) if p))
    if contact.ice:
        lines.append(f"ICE : {contact.ice}")
    return [Paragraph('<br/>'.join(lines), theme.normal), Spacer(1, 6 * mm)]


def render_document_pdf(document, company=None):
    """PDF bytes for any sales or purchasing document"""
    company = company if company is not None else CompanySettings.get_solo()
    theme = _Theme(company)
    title = DOCUMENT_TITLES.get(document.numbering_type, document.numbering_type.upper())

    story = [_header(theme, title, document.document_id, document.date.strftime('%d/%m/%Y')), Spacer(1, 8 * mm)]
    story += _contact_block(document, theme)

    rows = [['Désignation', 'Qté', 'P.U. HT', 'Total HT']]
    for item in document.items.all():
        rows.append([
            Paragraph(item.description or (item.product.name if item.product else ''), theme.normal),
            f"{item.quantity:g}",
            format_mad_full(item.unit_price),
            format_mad_full(item.total),
        ])
    story.append(_grid(rows, theme, [95 * mm, 20 * mm, 32 * mm, 33 * mm], money_columns=(2, 3)))
    story.append(Spacer(1, 6 * mm))

    if hasattr(document, 'vat_amount'):
        pairs = [
            ['Total HT', format_mad_full(document.subtotal)],
            [f"TVA ({document.vat_rate:g}%)", format_mad_full(document.vat_amount)],
            ['Total TTC', format_mad_full(document.total)],
        ]
    else:
        pairs = [['Total', format_mad_full(document.subtotal)]]
    story.append(_totals_table(pairs, theme))

    if document.note:
        story += [Spacer(1, 6 * mm), Paragraph(f"<b>Note :</b> {document.note}", theme.normal)]
    story += _footer(theme)
    return _build(story)


def render_tax_report_pdf(summary, company=None):
    """'RAPPORT FISCAL' with the VAT section, financial summary and estimated IS"""
    company = company if company is not None else CompanySettings.get_solo()
    theme = _Theme(company)
    period = f"{summary['period']['start']} / {summary['period']['end']}"
    story = [_header(theme, 'RAPPORT FISCAL', f"{summary['year']} {summary['quarter'].upper()}", period),
             Spacer(1, 8 * mm)]

    vat = summary['vat']
    story.append(Paragraph('TVA', theme.section))
    story.append(_totals_table([
        ['TVA collectée', format_mad_full(vat['collected'])],
        ['TVA déductible', format_mad_full(vat['paid'])],
        ['Crédit de TVA' if vat['is_credit'] else 'TVA à Payer', format_mad_full(vat['due'])],
    ], theme))

    revenue = summary['revenue']
    story.append(Paragraph('Synthèse financière', theme.section))
    story.append(_totals_table([
        ["Chiffre d'affaires HT", format_mad_full(revenue['gross_revenue'])],
        ['Charges HT', format_mad_full(revenue['expenses'])],
        ['Résultat net', format_mad_full(revenue['net_profit'])],
    ], theme))

    story.append(Paragraph('Impôt sur les Sociétés', theme.section))
    story.append(_totals_table([['IS estimé', format_mad_full(summary['estimated_is'])]], theme))

    counts = summary['counts']
    story.append(Spacer(1, 4 * mm))
    story.append(Paragraph(
        f"{counts['sales_invoices']} facture(s) de vente, {counts['purchase_invoices']} facture(s) d'achat.",
        theme.small))
    story += _footer(theme)
    return _build(story)


def render_statement_pdf(statement, company=None):
    """Relevé de compte with running balance"""
    company = company if company is not None else CompanySettings.get_solo()
    theme = _Theme(company)
    contact = statement['contact']
    story = [_header(theme, 'RELEVÉ DE COMPTE', statement['statement_number'],
                     statement['date_to'].strftime('%d/%m/%Y')), Spacer(1, 8 * mm)]

    lines = [f"<b>{contact['name']}</b>"]
    if contact.get('ice'):
        lines.append(f"ICE : {contact['ice']}")
    story += [Paragraph('<br/>'.join(lines), theme.normal), Spacer(1, 6 * mm)]

    rows = [['Date', 'Référence', 'Libellé', 'Débit', 'Crédit', 'Solde'],
            ['', '', 'Solde initial', '', '', format_mad_full(statement['opening_balance'])]]
    for entry in statement['entries']:
        rows.append([
            entry['date'].strftime('%d/%m/%Y'),
            entry['reference'] or '',
            Paragraph(entry['description'], theme.normal),
            format_mad_full(entry['debit']) if entry['debit'] else '',
            format_mad_full(entry['credit']) if entry['credit'] else '',
            format_mad_full(entry['balance']),
        ])
    story.append(_grid(rows, theme, [20 * mm, 30 * mm, 45 * mm, 28 * mm, 28 * mm, 29 * mm], money_columns=(3, 4, 5)))
    story.append(Spacer(1, 6 * mm))
    story.append(_totals_table([
        ['Total débit', format_mad_full(statement['total_debit'])],
        ['Total crédit', format_mad_full(statement['total_credit'])],
        ['Solde final', format_mad_full(statement['closing_balance'])],
    ], theme))
    story += _footer(theme)
    return _build(story)

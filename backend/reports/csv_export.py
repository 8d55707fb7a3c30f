"""CSV exports, UTF-8 with BOM so Excel opens accented text correctly."""
import csv
import io

from django.http import HttpResponse


def csv_response(header, rows, filename):
    buffer = io.StringIO()
    buffer.write('\ufeff')
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    response = HttpResponse(buffer.getvalue(), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _safe_name(document_id):
    return document_id.replace('/', '-')


def document_csv(document):
    """Items of one document followed by its totals"""
    rows = [[item.description, item.quantity, item.unit_price, item.total] for item in document.items.all()]
    rows.append([])
    rows.append(['Total HT', '', '', document.subtotal])
    if hasattr(document, 'vat_amount'):
        rows.append([f'TVA {document.vat_rate}%', '', '', document.vat_amount])
        rows.append(['Total TTC', '', '', document.total])
    header = ['Désignation', 'Quantité', 'Prix unitaire', 'Total']
    return csv_response(header, rows, f"{_safe_name(document.document_id)}.csv")


def report_csv(columns, rows, filename):
    """A configured report (see excel.REPORT_CONFIGS) as CSV"""
    header = [column['header'] for column in columns]
    keys = [column['key'] for column in columns]
    return csv_response(header, [[row.get(key, '') for key in keys] for row in rows], filename)


def tax_report_csv(summary):
    vat = summary['vat']
    revenue = summary['revenue']
    rows = [
        ['Période', f"{summary['period']['start']} - {summary['period']['end']}"],
        ['TVA collectée', vat['collected']],
        ['TVA déductible', vat['paid']],
        ['Crédit de TVA' if vat['is_credit'] else 'TVA à Payer', vat['due']],
        ["Chiffre d'affaires HT", revenue['gross_revenue']],
        ['Charges HT', revenue['expenses']],
        ['Résultat net', revenue['net_profit']],
        ['IS estimé', summary['estimated_is']],
    ]
    return csv_response(['Libellé', 'Montant'], rows, f"rapport_fiscal_{summary['year']}_{summary['quarter']}.csv")

"""
Comprehensive test suite for Reports module
Tests: Dashboard KPIs and charts, tax summaries, saved tax reports, Excel/CSV/PDF exports
"""
from datetime import date
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.purchasing.models import PurchaseInvoice
from backend.reports.models import TaxReport
from backend.reports.tax import compute_tax_summary, normalize_quarter, period_bounds
from backend.reports.dashboard import month_start, month_end
from backend.sales.models import CreditNote, DeliveryNote

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class DashboardTests(TestCase):
    """Dashboard endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_client()
        self.product = TestDataFactory.create_product(name='Scanner', price=Decimal('200.00'), stock=Decimal('10'),
                                                      category='Informatique')

    def test_month_helpers(self):
        self.assertEqual(month_start(date(2026, 3, 15)), date(2026, 3, 1))
        self.assertEqual(month_start(date(2026, 1, 15), 1), date(2025, 12, 1))
        self.assertEqual(month_end(date(2026, 2, 10)), date(2026, 2, 28))
        self.assertEqual(month_end(date(2026, 12, 10)), date(2026, 12, 31))

    def test_stats(self):
        TestDataFactory.create_invoice(self.customer, items=[(self.product, 2, Decimal('200.00'))], status='paid')
        TestDataFactory.create_invoice(self.customer, status='sent')
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        kpis = response.data['kpis']
        self.assertEqual(kpis['total_sales'], 480.0)
        self.assertEqual(kpis['total_orders'], 1)
        self.assertEqual(kpis['total_stock_value'], 2000.0)
        self.assertIn('previous', response.data['comparisons']['sales'])

    def test_stats_cache_dropped_on_invoice_change(self):
        self.client.get('/api/v1/dashboard/stats/')
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_invoice(self.customer, status='paid')
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.data['kpis']['total_orders'], 1)

    def test_revenue_chart_has_twelve_months(self):
        response = self.client.get('/api/v1/dashboard/revenue-chart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 12)

    def test_sales_chart(self):
        TestDataFactory.create_invoice(self.customer, status='paid')
        response = self.client.get('/api/v1/dashboard/sales-chart/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['value'], 120.0)

    def test_top_products(self):
        TestDataFactory.create_invoice(self.customer, items=[(self.product, 3, Decimal('200.00'))], status='paid')
        response = self.client.get('/api/v1/dashboard/top-products/?limit=5')
        self.assertEqual(response.data[0]['sku'], self.product.sku)
        self.assertEqual(response.data[0]['quantity'], 3.0)

    def test_recent_activity(self):
        TestDataFactory.create_invoice(self.customer)
        response = self.client.get('/api/v1/dashboard/recent-activity/')
        self.assertEqual(response.data[0]['type'], 'invoice')

    def test_stock_views(self):
        TestDataFactory.create_product(name='Toner', category='Consommables', stock=Decimal('1'), min_stock=Decimal('5'))
        response = self.client.get('/api/v1/dashboard/stock-by-category/')
        self.assertEqual({row['category'] for row in response.data}, {'Informatique', 'Consommables'})
        response = self.client.get('/api/v1/dashboard/stock-alerts/')
        self.assertEqual([row['name'] for row in response.data], ['Toner'])
        self.assertEqual(response.data[0]['status'], 'low_stock')


class TaxSummaryTests(TestCase):
    """VAT and IS computation"""

    def setUp(self):
        self.customer = TestDataFactory.create_client()
        self.supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_invoice(self.customer, status='paid', invoice_date=date(2026, 2, 10),
                                       items=[(None, 1, Decimal('10000.00'))])
        TestDataFactory.create_invoice(self.customer, status='draft', invoice_date=date(2026, 2, 11),
                                       items=[(None, 1, Decimal('999.00'))])
        TestDataFactory.create_invoice(self.customer, status='sent', invoice_date=date(2026, 5, 1),
                                       items=[(None, 1, Decimal('5000.00'))])
        PurchaseInvoice.objects.create(document_id='FA-03/26/0001', supplier=self.supplier, date=date(2026, 3, 1),
                                       status='received', subtotal=Decimal('4000.00'),
                                       vat_amount=Decimal('800.00'), total=Decimal('4800.00'))

    def test_normalize_quarter(self):
        self.assertEqual(normalize_quarter('Q2'), 'q2')
        self.assertEqual(normalize_quarter(3), 'q3')
        self.assertEqual(normalize_quarter('year'), 'annual')
        with self.assertRaises(ValueError):
            normalize_quarter('q5')

    def test_period_bounds(self):
        self.assertEqual(period_bounds(2026, 'q1'), (date(2026, 1, 1), date(2026, 3, 31)))
        self.assertEqual(period_bounds(2024, 'annual'), (date(2024, 1, 1), date(2024, 12, 31)))

    def test_quarter_summary(self):
        summary = compute_tax_summary(2026, 'q1')
        self.assertEqual(summary['vat']['collected'], '2000.00')
        self.assertEqual(summary['vat']['paid'], '800.00')
        self.assertEqual(summary['vat']['due'], '1200.00')
        self.assertFalse(summary['vat']['is_credit'])
        self.assertEqual(summary['revenue']['net_profit'], '6000.00')
        self.assertEqual(summary['estimated_is'], '600.00')
        self.assertEqual(summary['counts']['sales_invoices'], 1)

    def test_applied_credit_notes_reduce_vat(self):
        CreditNote.objects.create(document_id='AV-03/26/0001', client=self.customer, date=date(2026, 3, 5),
                                  status='applied', subtotal=Decimal('1000.00'), vat_amount=Decimal('200.00'),
                                  total=Decimal('1200.00'))
        summary = compute_tax_summary(2026, 'q1')
        self.assertEqual(summary['vat']['collected'], '1800.00')
        self.assertEqual(summary['vat']['credit_notes'], '200.00')
        self.assertEqual(summary['revenue']['gross_revenue'], '9000.00')

    def test_vat_credit(self):
        PurchaseInvoice.objects.create(document_id='FA-03/26/0002', supplier=self.supplier, date=date(2026, 3, 2),
                                       status='paid', subtotal=Decimal('10000.00'),
                                       vat_amount=Decimal('2000.00'), total=Decimal('12000.00'))
        summary = compute_tax_summary(2026, 'q1')
        self.assertTrue(summary['vat']['is_credit'])
        self.assertEqual(summary['vat']['due'], '-800.00')

    def test_annual_summary(self):
        summary = compute_tax_summary(2026, 'annual')
        self.assertEqual(summary['counts']['sales_invoices'], 2)
        self.assertEqual(summary['revenue']['gross_revenue'], '15000.00')


class TaxReportAPITests(TestCase):
    """Tax report endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_compute_endpoint(self):
        response = self.client.get('/api/v1/tax-reports/compute/?year=2026&quarter=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quarter'], 'q2')
        self.assertEqual(response.data['period']['start'], '2026-04-01')

    def test_compute_rejects_bad_quarter(self):
        response = self.client.get('/api/v1/tax-reports/compute/?year=2026&quarter=q9')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_year_out_of_range(self):
        response = self.client.get('/api/v1/tax-reports/compute/?year=0&quarter=q1')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Year out of range')
        response = self.client.get('/api/v1/tax-reports/export/?year=99999&quarter=annual')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_save_upserts(self):
        data = {'year': 2026, 'quarter': 'Q1', 'data': {'vat': {'due': '100.00'}}}
        response = self.client.post('/api/v1/tax-reports/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quarter'], 'q1')
        data['status'] = 'filed'
        response = self.client.post('/api/v1/tax-reports/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(TaxReport.objects.count(), 1)
        self.assertEqual(TaxReport.objects.get().status, 'filed')

    def test_save_requires_fields(self):
        response = self.client.post('/api/v1/tax-reports/', {'year': 2026}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Year, quarter and data are required')

    def test_list_and_detail(self):
        report = TaxReport.objects.create(year=2025, quarter='q4', data={'x': 1})
        TaxReport.objects.create(year=2026, quarter='q1', data={'x': 2})
        response = self.client.get('/api/v1/tax-reports/?year=2025')
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/v1/tax-reports/{report.id}/')
        self.assertEqual(response.data['data'], {'x': 1})
        self.assertEqual(self.client.get('/api/v1/tax-reports/999/').status_code, status.HTTP_404_NOT_FOUND)

    def test_exports(self):
        response = self.client.get('/api/v1/tax-reports/export/?year=2026&quarter=q1&export=csv')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertIn('TVA collectée', response.content.decode('utf-8-sig'))
        response = self.client.get('/api/v1/tax-reports/export/?year=2026&quarter=q1&export=excel')
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        self.assertTrue(response.content.startswith(b'PK'))
        response = self.client.get('/api/v1/tax-reports/export/?year=2026&quarter=q1')
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))


class ExportTests(TestCase):
    """Excel reports and per-document exports"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_client(name='Atlas')
        self.product = TestDataFactory.create_product(name='Onduleur', stock=Decimal('3'))
        self.invoice = TestDataFactory.create_invoice(self.customer, items=[(self.product, 2, Decimal('750.00'))])

    def test_inventory_excel(self):
        response = self.client.get('/api/v1/reports/export/?type=inventory')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        self.assertIn('inventory_Report_', response['Content-Disposition'])

    def test_sales_invoice_csv(self):
        response = self.client.get('/api/v1/reports/export/?type=sales-invoice&export=csv')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        content = response.content.decode('utf-8-sig')
        self.assertIn(self.invoice.document_id, content)
        self.assertIn('Atlas', content)

    def test_export_uses_company_name(self):
        self.customer.company = 'Atlas Distribution SARL'
        self.customer.save()
        response = self.client.get('/api/v1/reports/export/?type=sales-invoice&export=csv')
        self.assertIn('Atlas Distribution SARL', response.content.decode('utf-8-sig'))

    def test_document_export_respects_delivery_type(self):
        delivery_note = DeliveryNote.objects.create(document_id='BL-03/26/0001', client=self.customer,
                                                    date='2026-03-07', subtotal=Decimal('100.00'))
        response = self.client.get(f'/api/v1/documents/delivery_note/{delivery_note.id}/export/?export=csv')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/documents/divers/{delivery_note.id}/export/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_report_type(self):
        response = self.client.get('/api/v1/reports/export/?type=payroll')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('treasury', response.data['allowed'])

    def test_document_pdf(self):
        response = self.client.get(f'/api/v1/documents/invoice/{self.invoice.id}/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_document_csv(self):
        response = self.client.get(f'/api/v1/documents/invoice/{self.invoice.id}/export/?export=csv')
        content = response.content.decode('utf-8-sig')
        self.assertIn('Onduleur', content)
        self.assertIn('Total TTC', content)

    def test_document_not_found(self):
        response = self.client.get('/api/v1/documents/payslip/1/export/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/documents/invoice/999/export/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

"""
Comprehensive test suite for Sales module
Tests: Invoices, Estimates, Delivery Notes, Divers, Credit Notes, Prélèvements
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import AuditLog, Notification
from backend.catalog.models import Product
from backend.inventory.models import StockItem, StockMovement
from backend.sales.models import Invoice, Estimate, DeliveryNote, Prelevement
from backend.sales.services import derive_invoice_status
from backend.treasury.models import Payment


class SalesTestCase(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_client(name='Atlas Distribution')
        self.product = TestDataFactory.create_product(name='Imprimante', price=Decimal('1500.00'),
                                                      stock=Decimal('20'), min_stock=Decimal('2'))


class InvoiceAPITests(SalesTestCase):
    """Invoice CRUD, numbering and payments"""

    def _payload(self, **extra):
        data = {
            'client': self.customer.id,
            'date': '2026-03-15',
            'items': [
                {'product_id': self.product.id, 'quantity': '2', 'unit_price': '1500.00'},
                {'description': 'Installation', 'quantity': '1', 'unit_price': '500.00'},
            ],
        }
        data.update(extra)
        return data

    def test_create_invoice(self):
        response = self.client.post('/api/v1/invoices/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'FC-03/26/0001')
        self.assertEqual(Decimal(str(response.data['subtotal'])), Decimal('3500.00'))
        self.assertEqual(Decimal(str(response.data['vat_amount'])), Decimal('700.00'))
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('4200.00'))
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(len(response.data['items']), 2)
        self.assertEqual(response.data['items'][0]['description'], 'Imprimante')
        self.assertEqual(response.data['created_by'], self.user.id)
        self.assertTrue(AuditLog.objects.filter(model_name='Invoice', action='create').exists())

    def test_invoice_does_not_move_stock(self):
        self.client.post('/api/v1/invoices/', self._payload(), format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('20'))

    def test_numbers_increment(self):
        self.client.post('/api/v1/invoices/', self._payload(), format='json')
        response = self.client.post('/api/v1/invoices/', self._payload(), format='json')
        self.assertEqual(response.data['document_id'], 'FC-03/26/0002')

    def test_duplicate_number_conflicts(self):
        self.client.post('/api/v1/invoices/', self._payload(document_id='FC-03/26/0007'), format='json')
        response = self.client.post('/api/v1/invoices/', self._payload(document_id='FC-03/26/0007'), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['document_id'], 'FC-03/26/0007')

    def test_items_required(self):
        response = self.client.post('/api/v1/invoices/', self._payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_invalid_item_quantity(self):
        items = [{'description': 'Service', 'quantity': '0', 'unit_price': '10'}]
        response = self.client.post('/api/v1/invoices/', self._payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_ui_status_is_mapped(self):
        response = self.client.post('/api/v1/invoices/', self._payload(status='pending'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'sent')

    def test_unknown_status_rejected(self):
        response = self.client.post('/api/v1/invoices/', self._payload(status='archived'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_partial_payment_on_create(self):
        account = TestDataFactory.create_bank_account(balance=Decimal('1000.00'))
        data = self._payload(amount_paid='1000.00', payment_method='bank_transfer', bank_account=account.id)
        response = self.client.post('/api/v1/invoices/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'partially_paid')
        self.assertEqual(Decimal(str(response.data['balance_due'])), Decimal('3200.00'))
        payment = Payment.objects.get(invoice_number=response.data['document_id'])
        self.assertEqual(payment.status, 'cleared')
        account.refresh_from_db()
        self.assertEqual(account.balance, Decimal('2000.00'))

    def test_paid_on_create_records_total(self):
        data = self._payload(status='paid', payment_method='check', check_number='CHQ-1')
        response = self.client.post('/api/v1/invoices/', data, format='json')
        self.assertEqual(Decimal(str(response.data['amount_paid'])), Decimal('4200.00'))
        payment = Payment.objects.get(invoice_number=response.data['document_id'])
        self.assertEqual(payment.status, 'in-hand')
        self.assertEqual(payment.check_number, 'CHQ-1')

    def test_update_items_recomputes_totals(self):
        invoice = TestDataFactory.create_invoice(self.customer, self.user)
        items = [{'description': 'Maintenance', 'quantity': '3', 'unit_price': '200'}]
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/', {'items': items}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('720.00'))
        self.assertEqual(len(response.data['items']), 1)

    def test_update_without_items_keeps_lines(self):
        invoice = TestDataFactory.create_invoice(self.customer, self.user)
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/', {'note': 'Merci'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['note'], 'Merci')

    def test_amount_paid_update_derives_status(self):
        invoice = TestDataFactory.create_invoice(self.customer, self.user, status='sent')
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/', {'amount_paid': '120.00'}, format='json')
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(Payment.objects.filter(sales_invoice=invoice).count(), 1)

    def test_get_by_document_id(self):
        invoice = TestDataFactory.create_invoice(self.customer, invoice_date=date(2026, 4, 1))
        response = self.client.get(f'/api/v1/invoices/document/{invoice.document_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], invoice.id)
        response = self.client.get('/api/v1/invoices/document/FC-01/20/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters(self):
        TestDataFactory.create_invoice(self.customer, status='sent', invoice_date=date(2026, 1, 5))
        TestDataFactory.create_invoice(self.customer, status='paid', invoice_date=date(2026, 2, 5))
        other = TestDataFactory.create_client()
        TestDataFactory.create_invoice(other, status='sent', invoice_date=date(2026, 2, 6))
        response = self.client.get('/api/v1/invoices/?status=pending')
        self.assertEqual(len(response.data), 2)
        response = self.client.get(f'/api/v1/invoices/?clientId={self.customer.id}&startDate=2026-02-01')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/invoices/?page=1&limit=2')
        self.assertEqual(response.data['count'], 3)

    def test_status_endpoint_marks_paid(self):
        invoice = TestDataFactory.create_invoice(self.customer, self.user, status='sent')
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/status/', {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(Decimal(str(response.data['amount_paid'])), invoice.total)
        self.assertTrue(Notification.objects.filter(title='Payment Received').exists())
        self.assertEqual(Payment.objects.get(sales_invoice=invoice).amount, invoice.total)

    def test_status_endpoint_rejects_unknown(self):
        invoice = TestDataFactory.create_invoice(self.customer)
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('allowed', response.data)

    def test_delete_reverses_payments(self):
        account = TestDataFactory.create_bank_account()
        data = self._payload(amount_paid='4200.00', bank_account=account.id)
        response = self.client.post('/api/v1/invoices/', data, format='json')
        account.refresh_from_db()
        self.assertEqual(account.balance, Decimal('4200.00'))
        response = self.client.delete(f"/api/v1/invoices/{response.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        account.refresh_from_db()
        self.assertEqual(account.balance, Decimal('0.00'))
        self.assertFalse(Payment.objects.exists())

    def test_not_found(self):
        self.assertEqual(self.client.get('/api/v1/invoices/999/').status_code, status.HTTP_404_NOT_FOUND)

    def test_derive_invoice_status(self):
        self.assertEqual(derive_invoice_status(Decimal('100'), Decimal('100'), 'sent'), 'paid')
        self.assertEqual(derive_invoice_status(Decimal('10'), Decimal('100'), 'sent'), 'partially_paid')
        self.assertEqual(derive_invoice_status(Decimal('0'), Decimal('100'), 'paid'), 'sent')
        self.assertEqual(derive_invoice_status(Decimal('0'), Decimal('100'), 'draft'), 'draft')


class EstimateAPITests(SalesTestCase):
    """Estimates and conversion to invoices"""

    def _create_estimate(self):
        data = {
            'client': self.customer.id,
            'date': '2026-03-01',
            'items': [{'product': self.product.id, 'quantity': '1', 'unit_price': '1500.00'}],
        }
        response = self.client.post('/api/v1/estimates/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data

    def test_create_estimate(self):
        estimate = self._create_estimate()
        self.assertEqual(estimate['document_id'], 'DV-03/26/0001')
        self.assertEqual(Decimal(str(estimate['total'])), Decimal('1800.00'))

    def test_status_mapping(self):
        estimate = self._create_estimate()
        response = self.client.patch(f"/api/v1/estimates/{estimate['id']}/status/", {'status': 'cancelled'}, format='json')
        self.assertEqual(response.data['status'], 'rejected')

    def test_convert_to_invoice(self):
        estimate = self._create_estimate()
        response = self.client.post(f"/api/v1/estimates/{estimate['id']}/convert/", {'date': '2026-03-20'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'FC-03/26/0001')
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('1800.00'))
        self.assertEqual(len(response.data['items']), 1)
        converted = Estimate.objects.get(pk=estimate['id'])
        self.assertEqual(converted.status, 'accepted')
        self.assertEqual(converted.converted_invoice_id, response.data['id'])

    def test_convert_twice_conflicts(self):
        estimate = self._create_estimate()
        first = self.client.post(f"/api/v1/estimates/{estimate['id']}/convert/", {}, format='json')
        response = self.client.post(f"/api/v1/estimates/{estimate['id']}/convert/", {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['invoiceId'], first.data['id'])
        self.assertEqual(response.data['invoiceDocumentId'], first.data['document_id'])
        self.assertEqual(Invoice.objects.count(), 1)


class DeliveryNoteAPITests(SalesTestCase):
    """Delivery notes and divers documents move stock"""

    def setUp(self):
        super().setUp()
        self.warehouse = TestDataFactory.create_warehouse(code='casa')
        self.supplier = TestDataFactory.create_supplier()

    def _payload(self, **extra):
        data = {
            'date': '2026-03-10',
            'warehouse': self.warehouse.id,
            'items': [{'product': self.product.id, 'quantity': '5', 'unit_price': '1500.00'}],
        }
        data.update(extra)
        return data

    def test_client_delivery_takes_stock_out(self):
        response = self.client.post('/api/v1/delivery-notes/', self._payload(client=self.customer.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'BL-03/26/0001')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('15'))
        self.assertEqual(StockItem.objects.get(product=self.product, warehouse=self.warehouse).quantity, Decimal('-5'))
        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.type, 'out')
        self.assertEqual(movement.reference_id, 'BL-03/26/0001')

    def test_supplier_delivery_brings_stock_in(self):
        response = self.client.post('/api/v1/delivery-notes/', self._payload(supplier=self.supplier.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('25'))

    def test_divers_takes_stock_out(self):
        response = self.client.post('/api/v1/delivery-notes/', self._payload(document_type='divers'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'DIV-03/26/0001')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('15'))

    def test_client_and_supplier_rejected(self):
        data = self._payload(client=self.customer.id, supplier=self.supplier.id)
        response = self.client.post('/api/v1/delivery-notes/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delivery_note_needs_party(self):
        response = self.client.post('/api/v1/delivery-notes/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DeliveryNote.objects.exists())

    def test_update_items_moves_difference(self):
        created = self.client.post('/api/v1/delivery-notes/', self._payload(client=self.customer.id), format='json')
        items = [{'product': self.product.id, 'quantity': '8', 'unit_price': '1500.00'}]
        response = self.client.patch(f"/api/v1/delivery-notes/{created.data['id']}/",
                                     {'items': items, 'supplier': self.supplier.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['client'], self.customer.id)
        self.assertIsNone(response.data['supplier'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('12'))

    def test_delete_reverts_stock(self):
        created = self.client.post('/api/v1/delivery-notes/', self._payload(client=self.customer.id), format='json')
        response = self.client.delete(f"/api/v1/delivery-notes/{created.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('20'))
        self.assertEqual(StockItem.objects.get(product=self.product, warehouse=self.warehouse).quantity, Decimal('0'))

    def test_filter_by_document_type(self):
        self.client.post('/api/v1/delivery-notes/', self._payload(client=self.customer.id), format='json')
        self.client.post('/api/v1/delivery-notes/', self._payload(document_type='divers'), format='json')
        response = self.client.get('/api/v1/delivery-notes/?documentType=divers')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/delivery-notes/?warehouse=casa')
        self.assertEqual(len(response.data), 2)

    def test_status_in_transit_maps_to_draft(self):
        created = self.client.post('/api/v1/delivery-notes/', self._payload(client=self.customer.id), format='json')
        response = self.client.patch(f"/api/v1/delivery-notes/{created.data['id']}/status/", {'status': 'delivered'}, format='json')
        self.assertEqual(response.data['status'], 'delivered')
        response = self.client.patch(f"/api/v1/delivery-notes/{created.data['id']}/status/", {'status': 'in_transit'}, format='json')
        self.assertEqual(response.data['status'], 'draft')


class CreditNoteAPITests(SalesTestCase):
    """Credit notes (avoirs)"""

    def test_create_against_invoice(self):
        invoice = TestDataFactory.create_invoice(self.customer, status='sent')
        data = {
            'client': self.customer.id,
            'invoice': invoice.id,
            'date': '2026-03-12',
            'items': [{'description': 'Retour', 'quantity': '1', 'unit_price': '50.00'}],
        }
        response = self.client.post('/api/v1/credit-notes/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'AV-03/26/0001')
        self.assertEqual(response.data['invoice_document_id'], invoice.document_id)
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('60.00'))

    def test_invoice_of_other_client_rejected(self):
        invoice = TestDataFactory.create_invoice(TestDataFactory.create_client())
        data = {
            'client': self.customer.id,
            'invoice': invoice.id,
            'date': '2026-03-12',
            'items': [{'description': 'Retour', 'quantity': '1', 'unit_price': '50.00'}],
        }
        response = self.client.post('/api/v1/credit-notes/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('invoice', response.data)

    def test_approved_maps_to_applied(self):
        data = {
            'client': self.customer.id,
            'date': '2026-03-12',
            'items': [{'description': 'Geste commercial', 'quantity': '1', 'unit_price': '100.00'}],
        }
        created = self.client.post('/api/v1/credit-notes/', data, format='json')
        response = self.client.patch(f"/api/v1/credit-notes/{created.data['id']}/status/", {'status': 'approved'}, format='json')
        self.assertEqual(response.data['status'], 'applied')


class PrelevementAPITests(SalesTestCase):
    """Prélèvements take stock out"""

    def setUp(self):
        super().setUp()
        self.warehouse = TestDataFactory.create_warehouse(code='rabat')

    def _create(self, quantity='3'):
        data = {
            'date': '2026-03-18',
            'client': self.customer.id,
            'warehouse': self.warehouse.id,
            'items': [{'product': self.product.id, 'quantity': quantity, 'unit_price': '1500.00'}],
        }
        return self.client.post('/api/v1/prelevements/', data, format='json')

    def test_create_takes_stock_out(self):
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'PRL-03/26/0001')
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('4500.00'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('17'))
        self.assertEqual(StockMovement.objects.get(product=self.product).description,
                         'Prélèvement #PRL-03/26/0001')

    def test_low_stock_alert(self):
        self._create(quantity='19')
        product = Product.objects.get(pk=self.product.pk)
        self.assertEqual(product.status, 'low_stock')
        self.assertTrue(Notification.objects.filter(title='Low Stock Alert').exists())

    def test_delete_reverts_stock(self):
        created = self._create()
        self.client.delete(f"/api/v1/prelevements/{created.data['id']}/")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('20'))
        self.assertFalse(Prelevement.objects.exists())

    def test_validated_status(self):
        created = self._create()
        response = self.client.patch(f"/api/v1/prelevements/{created.data['id']}/status/", {'status': 'validated'}, format='json')
        self.assertEqual(response.data['status'], 'validated')


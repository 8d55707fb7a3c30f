"""
Comprehensive test suite for Purchasing module
Tests: Purchase orders, stock reception, supplier invoices, duplicate BL guard and supplier payments
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockItem, StockMovement
from backend.purchasing.models import PurchaseOrder, PurchaseInvoice
from backend.purchasing.services import receive_purchase_order, derive_purchase_invoice_status
from backend.sales.models import DeliveryNote
from backend.treasury.models import Payment


class PurchaseOrderTests(TestCase):
    """Purchase order CRUD and reception into stock"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier(name='Maghreb Informatique')
        self.warehouse = TestDataFactory.create_warehouse(code='casa')
        self.product = TestDataFactory.create_product(stock=Decimal('2'), min_stock=Decimal('5'))

    def _payload(self, **extra):
        data = {
            'supplier': self.supplier.id,
            'warehouse': self.warehouse.id,
            'date': '2026-03-05',
            'items': [{'product': self.product.id, 'quantity': '10', 'unit_price': '80.00'}],
        }
        data.update(extra)
        return data

    def test_create_purchase_order(self):
        """Test numbering and totals; a draft order does not touch stock"""
        response = self.client.post('/api/v1/purchase-orders/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'BC-03/26/0001')
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('800.00'))
        self.assertIsNone(response.data['stock_received_at'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('2'))

    def test_create_received_adds_stock(self):
        response = self.client.post('/api/v1/purchase-orders/', self._payload(status='received'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('12'))
        self.assertEqual(self.product.status, 'in_stock')
        self.assertIsNotNone(PurchaseOrder.objects.get().stock_received_at)

    def test_status_received_adds_stock_once(self):
        created = self.client.post('/api/v1/purchase-orders/', self._payload(), format='json')
        url = f"/api/v1/purchase-orders/{created.data['id']}/status/"
        response = self.client.patch(url, {'status': 'received'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['stock_received_at'])
        self.client.patch(url, {'status': 'confirmed'}, format='json')
        self.client.patch(url, {'status': 'received'}, format='json')
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('12'))
        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.description, 'Stock added from Purchase Order BC-03/26/0001')
        self.assertEqual(StockItem.objects.get(product=self.product, warehouse=self.warehouse).quantity, Decimal('10'))

    def test_shipped_maps_to_confirmed(self):
        created = self.client.post('/api/v1/purchase-orders/', self._payload(), format='json')
        response = self.client.patch(f"/api/v1/purchase-orders/{created.data['id']}/status/", {'status': 'shipped'}, format='json')
        self.assertEqual(response.data['status'], 'confirmed')

    def test_update_to_received(self):
        created = self.client.post('/api/v1/purchase-orders/', self._payload(), format='json')
        response = self.client.patch(f"/api/v1/purchase-orders/{created.data['id']}/", {'status': 'received'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('12'))

    def test_delete_keeps_stock(self):
        """Test deleting a received order leaves stock as it is"""
        created = self.client.post('/api/v1/purchase-orders/', self._payload(status='received'), format='json')
        response = self.client.delete(f"/api/v1/purchase-orders/{created.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('12'))

    def test_receive_service_is_idempotent(self):
        order = TestDataFactory.create_purchase_order(self.supplier, self.user, self.product, warehouse=self.warehouse)
        self.assertTrue(receive_purchase_order(order))
        self.assertFalse(receive_purchase_order(order))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('7'))

    def test_filter_by_supplier(self):
        TestDataFactory.create_purchase_order(self.supplier, self.user, self.product)
        TestDataFactory.create_purchase_order(TestDataFactory.create_supplier(), self.user, self.product)
        response = self.client.get(f'/api/v1/purchase-orders/?supplierId={self.supplier.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_not_found(self):
        response = self.client.get('/api/v1/purchase-orders/999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class PurchaseInvoiceTests(TestCase):
    """Supplier invoices (factures achat) and payments"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier(name='Sud Equipements')
        self.account = TestDataFactory.create_bank_account(balance=Decimal('10000.00'))

    def _payload(self, **extra):
        data = {
            'supplier': self.supplier.id,
            'date': '2026-03-08',
            'items': [{'description': 'Cartouches', 'quantity': '10', 'unit_price': '100.00'}],
        }
        data.update(extra)
        return data

    def _delivery_note(self):
        return DeliveryNote.objects.create(document_id='BL-03/26/0001', supplier=self.supplier,
                                           date='2026-03-07', subtotal=Decimal('1000.00'))

    def test_create_purchase_invoice(self):
        response = self.client.post('/api/v1/purchase-invoices/', self._payload(attachment_url='https://files.example.ma/fa.pdf'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['document_id'], 'FA-03/26/0001')
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('1200.00'))
        self.assertEqual(response.data['attachment_url'], 'https://files.example.ma/fa.pdf')

    def test_payment_debits_bank_account(self):
        data = self._payload(amount_paid='1200.00', payment_method='bank_transfer', bank_account=self.account.id)
        response = self.client.post('/api/v1/purchase-invoices/', data, format='json')
        self.assertEqual(response.data['status'], 'paid')
        payment = Payment.objects.get(payment_type='purchase')
        self.assertEqual(payment.status, 'cleared')
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('8800.00'))

    def test_supplier_payment_defaults_to_cash(self):
        response = self.client.post('/api/v1/purchase-invoices/', self._payload(amount_paid='200.00'), format='json')
        self.assertEqual(response.data['status'], 'partially_paid')
        payment = Payment.objects.get(payment_type='purchase')
        self.assertEqual(payment.payment_method, 'cash')
        self.assertEqual(payment.purchase_invoice_id, response.data['id'])

    def test_duplicate_delivery_note_rejected(self):
        delivery_note = self._delivery_note()
        first = self.client.post('/api/v1/purchase-invoices/', self._payload(delivery_note=delivery_note.id), format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/purchase-invoices/', self._payload(delivery_note=delivery_note.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Duplicate Invoice')
        self.assertEqual(response.data['errorCode'], 'DUPLICATE_INVOICE_FROM_BL')
        self.assertEqual(response.data['existingDocumentId'], first.data['document_id'])
        self.assertEqual(PurchaseInvoice.objects.count(), 1)

    def test_cancelled_invoice_frees_delivery_note(self):
        delivery_note = self._delivery_note()
        first = self.client.post('/api/v1/purchase-invoices/', self._payload(delivery_note=delivery_note.id), format='json')
        self.client.patch(f"/api/v1/purchase-invoices/{first.data['id']}/status/", {'status': 'cancelled'}, format='json')
        response = self.client.post('/api/v1/purchase-invoices/', self._payload(delivery_note=delivery_note.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_same_invoice_may_keep_its_delivery_note(self):
        delivery_note = self._delivery_note()
        first = self.client.post('/api/v1/purchase-invoices/', self._payload(delivery_note=delivery_note.id), format='json')
        response = self.client.patch(f"/api/v1/purchase-invoices/{first.data['id']}/",
                                     {'delivery_note': delivery_note.id, 'note': 'ok'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_mark_paid_records_outstanding(self):
        created = self.client.post('/api/v1/purchase-invoices/',
                                   self._payload(amount_paid='200.00', bank_account=self.account.id), format='json')
        response = self.client.patch(f"/api/v1/purchase-invoices/{created.data['id']}/status/", {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['amount_paid'])), Decimal('1200.00'))
        amounts = sorted(Payment.objects.filter(payment_type='purchase').values_list('amount', flat=True))
        self.assertEqual(amounts, [Decimal('200.00'), Decimal('1000.00')])
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('8800.00'))

    def test_delete_reverses_payments(self):
        created = self.client.post('/api/v1/purchase-invoices/',
                                   self._payload(amount_paid='1200.00', bank_account=self.account.id), format='json')
        response = self.client.delete(f"/api/v1/purchase-invoices/{created.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('10000.00'))
        self.assertFalse(Payment.objects.exists())

    def test_pending_maps_to_received(self):
        response = self.client.post('/api/v1/purchase-invoices/', self._payload(status='pending'), format='json')
        self.assertEqual(response.data['status'], 'received')

    def test_derive_status(self):
        self.assertEqual(derive_purchase_invoice_status(Decimal('0'), Decimal('100')), 'received')
        self.assertEqual(derive_purchase_invoice_status(Decimal('50'), Decimal('100')), 'partially_paid')
        self.assertEqual(derive_purchase_invoice_status(Decimal('100'), Decimal('100')), 'paid')

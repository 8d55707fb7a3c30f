"""
Comprehensive test suite for Treasury module
Tests: Bank accounts, warehouse cash, payment booking and reversal, check lifecycle, summary
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import AuditLog
from backend.treasury.models import BankAccount, WarehouseCash, Payment
from backend.treasury.services import (
    record_payment, change_payment_status, delete_payment, initial_payment_status, treasury_summary
)


class PaymentBookingTests(TestCase):
    """Only cleared payments move money"""

    def setUp(self):
        self.account = TestDataFactory.create_bank_account(balance=Decimal('1000.00'))
        self.warehouse = TestDataFactory.create_warehouse(code='casa')

    def test_initial_status(self):
        self.assertEqual(initial_payment_status('cash'), 'cleared')
        self.assertEqual(initial_payment_status('bank_transfer'), 'cleared')
        self.assertEqual(initial_payment_status('check'), 'in-hand')

    def test_sales_payment_credits_account(self):
        record_payment('sales', 'FC-03/26/0001', 'Atlas', Decimal('250.00'), 'bank_transfer', bank_account=self.account)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1250.00'))

    def test_purchase_payment_debits_account(self):
        record_payment('purchase', 'FA-03/26/0001', 'Sud', Decimal('400.00'), 'cash', bank_account=self.account)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('600.00'))

    def test_cash_without_account_goes_to_warehouse(self):
        record_payment('sales', 'FC-03/26/0002', 'Atlas', Decimal('90.00'), 'cash', warehouse=self.warehouse)
        self.assertEqual(WarehouseCash.objects.get(warehouse=self.warehouse).amount, Decimal('90.00'))

    def test_no_account_no_effect(self):
        payment = record_payment('sales', 'FC-03/26/0003', 'Atlas', Decimal('90.00'), 'cash')
        self.assertEqual(payment.status, 'cleared')
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1000.00'))
        self.assertFalse(WarehouseCash.objects.exists())

    def test_check_lifecycle(self):
        payment = record_payment('sales', 'FC-03/26/0004', 'Atlas', Decimal('300.00'), 'check',
                                 bank_account=self.account, check_number='0012345')
        self.assertEqual(payment.status, 'in-hand')
        self.assertEqual(payment.check_number, '0012345')
        change_payment_status(payment, 'deposited')
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1000.00'))
        change_payment_status(payment, 'cleared')
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1300.00'))
        change_payment_status(payment, 'bounced')
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1000.00'))

    def test_check_number_dropped_for_cash(self):
        payment = record_payment('sales', 'FC-03/26/0005', 'Atlas', Decimal('10.00'), 'cash', check_number='999')
        self.assertIsNone(payment.check_number)

    def test_delete_cleared_reverses(self):
        payment = record_payment('sales', 'FC-03/26/0006', 'Atlas', Decimal('500.00'), 'cash', bank_account=self.account)
        delete_payment(payment)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1000.00'))

    def test_delete_uncleared_check_no_effect(self):
        payment = record_payment('sales', 'FC-03/26/0007', 'Atlas', Decimal('500.00'), 'check', bank_account=self.account)
        delete_payment(payment)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('1000.00'))

    def test_summary(self):
        record_payment('sales', 'FC-1', 'A', Decimal('100.00'), 'check')
        deposited = record_payment('sales', 'FC-2', 'A', Decimal('40.00'), 'check')
        change_payment_status(deposited, 'deposited')
        record_payment('purchase', 'FA-1', 'S', Decimal('70.00'), 'check')
        bounced = record_payment('sales', 'FC-3', 'A', Decimal('15.00'), 'check')
        change_payment_status(bounced, 'bounced')
        WarehouseCash.objects.create(warehouse=self.warehouse, amount=Decimal('55.00'))
        result = treasury_summary()
        self.assertEqual(result['total_bank_balance'], Decimal('1000.00'))
        self.assertEqual(result['total_warehouse_cash'], Decimal('55.00'))
        self.assertEqual(result['checks_in_hand'], Decimal('100.00'))
        self.assertEqual(result['checks_deposited'], Decimal('40.00'))
        self.assertEqual(result['pending_supplier_checks'], Decimal('70.00'))
        self.assertEqual(result['bounced_checks'], 1)


class TreasuryAPITests(TestCase):
    """Treasury endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.account = TestDataFactory.create_bank_account(name='CIH Principal', balance=Decimal('5000.00'))
        self.warehouse = TestDataFactory.create_warehouse(code='agadir')

    def test_bank_account_crud(self):
        data = {'name': 'BMCE Pro', 'bank': 'Bank of Africa', 'account_number': '011780000012345', 'balance': '250.00'}
        response = self.client.post('/api/v1/treasury/bank-accounts/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        pk = response.data['id']
        response = self.client.patch(f'/api/v1/treasury/bank-accounts/{pk}/', {'balance': '300.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(BankAccount.objects.get(pk=pk).balance, Decimal('300.00'))
        response = self.client.delete(f'/api/v1/treasury/bank-accounts/{pk}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(len(self.client.get('/api/v1/treasury/bank-accounts/').data), 1)

    def test_warehouse_cash_set(self):
        response = self.client.put('/api/v1/treasury/warehouse-cash/agadir/', {'amount': '1200.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['warehouse_code'], 'agadir')
        response = self.client.get('/api/v1/treasury/warehouse-cash/')
        self.assertEqual(len(response.data), 1)

    def test_warehouse_cash_requires_amount(self):
        response = self.client.put('/api/v1/treasury/warehouse-cash/agadir/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_payment_links_invoice(self):
        customer = TestDataFactory.create_client()
        invoice = TestDataFactory.create_invoice(customer, status='sent')
        data = {
            'invoice_number': invoice.document_id,
            'entity': customer.name,
            'amount': '120.00',
            'payment_method': 'bank_transfer',
            'payment_type': 'sales',
            'bank_account': self.account.id,
        }
        response = self.client.post('/api/v1/treasury/payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sales_invoice'], invoice.id)
        self.assertEqual(response.data['status'], 'cleared')
        self.assertIsNotNone(response.data['payment_date'])
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('5120.00'))
        self.assertTrue(AuditLog.objects.filter(action='payment_add').exists())

    def test_create_payment_rejects_zero_amount(self):
        data = {'invoice_number': 'FC-X', 'entity': 'A', 'amount': '0', 'payment_type': 'sales'}
        response = self.client.post('/api/v1/treasury/payments/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_cleared_payment_rebooks(self):
        payment = record_payment('sales', 'FC-9', 'A', Decimal('100.00'), 'cash', bank_account=self.account)
        response = self.client.patch(f'/api/v1/treasury/payments/{payment.id}/', {'amount': '150.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('5150.00'))

    def test_status_endpoint(self):
        payment = record_payment('sales', 'FC-10', 'A', Decimal('80.00'), 'check', bank_account=self.account)
        response = self.client.patch(f'/api/v1/treasury/payments/{payment.id}/status/', {'status': 'cleared'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('5080.00'))
        response = self.client.patch(f'/api/v1/treasury/payments/{payment.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_payment_reverses(self):
        payment = record_payment('purchase', 'FA-2', 'S', Decimal('1000.00'), 'bank_transfer', bank_account=self.account)
        response = self.client.delete(f'/api/v1/treasury/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('5000.00'))

    def test_payments_by_invoice_number(self):
        record_payment('sales', 'FC-03/26/0011', 'A', Decimal('30.00'), 'cash', bank_account=self.account)
        record_payment('sales', 'FC-03/26/0011', 'A', Decimal('20.00'), 'cash', bank_account=self.account)
        response = self.client.get('/api/v1/treasury/payments/invoice/FC-03/26/0011/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['amount'])), Decimal('30.00'))
        response = self.client.delete('/api/v1/treasury/payments/invoice/FC-03/26/0011/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Payment.objects.exists())
        self.account.refresh_from_db()
        self.assertEqual(self.account.balance, Decimal('5000.00'))
        response = self.client.get('/api/v1/treasury/payments/invoice/FC-03/26/0011/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_by_type(self):
        record_payment('sales', 'FC-1', 'A', Decimal('10.00'), 'check')
        record_payment('purchase', 'FA-1', 'S', Decimal('10.00'), 'check')
        response = self.client.get('/api/v1/treasury/payments/?paymentType=purchase')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['payment_type'], 'purchase')

    def test_summary_endpoint(self):
        response = self.client.get('/api/v1/treasury/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['total_bank_balance'])), Decimal('5000.00'))
        self.assertEqual(response.data['bounced_checks'], 0)

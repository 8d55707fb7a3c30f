"""
Test suite for Parties module
Tests: Contact CRUD, filters, identifier validation, deletion guard and statements
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Contact
from backend.parties.statements import build_statement
from backend.sales.models import CreditNote
from backend.treasury.services import record_payment


class ContactAPITests(TestCase):
    """Contact endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_client(self):
        data = {'name': 'Karim Alaoui', 'company': 'Atlas Distribution', 'contact_type': 'client',
                'ice': '001234567000089', 'if_number': '12345678'}
        response = self.client.post('/api/v1/contacts/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['display_name'], 'Atlas Distribution')
        self.assertEqual(response.data['status'], 'active')

    def test_invalid_ice(self):
        data = {'name': 'Bad ICE', 'contact_type': 'client', 'ice': '12AB'}
        response = self.client.post('/api/v1/contacts/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ice', response.data)

    def test_contact_type_required(self):
        response = self.client.post('/api/v1/contacts/', {'name': 'Nobody'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_client_and_supplier_lists(self):
        TestDataFactory.create_client(name='Client A')
        TestDataFactory.create_supplier(name='Supplier B')
        clients = self.client.get('/api/v1/contacts/clients/')
        suppliers = self.client.get('/api/v1/contacts/suppliers/')
        self.assertEqual([c['name'] for c in clients.data], ['Client A'])
        self.assertEqual([c['name'] for c in suppliers.data], ['Supplier B'])

    def test_filters(self):
        TestDataFactory.create_client(name='Sara Bennani')
        inactive = TestDataFactory.create_client(name='Omar Tazi')
        inactive.status = 'inactive'
        inactive.save()
        TestDataFactory.create_supplier(name='Sarl Fournitures')
        response = self.client.get('/api/v1/contacts/?search=sar')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/contacts/?contactType=client&status=active')
        self.assertEqual([c['name'] for c in response.data], ['Sara Bennani'])

    def test_update_contact(self):
        contact = TestDataFactory.create_client(name='Old Name')
        response = self.client.patch(f'/api/v1/contacts/{contact.id}/', {'city': 'Fès'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['city'], 'Fès')

    def test_delete_unused_contact(self):
        contact = TestDataFactory.create_client()
        response = self.client.delete(f'/api/v1/contacts/{contact.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Contact.objects.filter(pk=contact.pk).exists())

    def test_delete_contact_with_documents_conflicts(self):
        contact = TestDataFactory.create_client()
        TestDataFactory.create_invoice(contact)
        response = self.client.delete(f'/api/v1/contacts/{contact.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Contact.objects.filter(pk=contact.pk).exists())


class StatementTests(TestCase):
    """Relevé de compte with running balance"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.contact = TestDataFactory.create_client(name='Atlas')
        self.invoice_jan = TestDataFactory.create_invoice(
            self.contact, status='sent', invoice_date=date(2026, 1, 10),
            items=[(None, 1, Decimal('1000.00'))])
        self.invoice_feb = TestDataFactory.create_invoice(
            self.contact, status='sent', invoice_date=date(2026, 2, 5),
            items=[(None, 1, Decimal('500.00'))])
        TestDataFactory.create_invoice(self.contact, status='draft', invoice_date=date(2026, 2, 6))
        record_payment(payment_type='sales', invoice_number=self.invoice_jan.document_id, entity='Atlas',
                       amount=Decimal('600.00'), payment_method='cash', payment_date=date(2026, 2, 1),
                       sales_invoice=self.invoice_jan)

    def test_entries_and_balance(self):
        statement = build_statement(self.contact, date_to=date(2026, 2, 28))
        self.assertEqual([e['type'] for e in statement['entries']], ['invoice', 'payment', 'invoice'])
        self.assertEqual(statement['total_debit'], Decimal('1800.00'))
        self.assertEqual(statement['total_credit'], Decimal('600.00'))
        self.assertEqual(statement['closing_balance'], Decimal('1200.00'))
        self.assertEqual(statement['entries'][1]['balance'], Decimal('600.00'))

    def test_opening_balance_folds_earlier_entries(self):
        statement = build_statement(self.contact, date_from=date(2026, 2, 2), date_to=date(2026, 2, 28))
        self.assertEqual(statement['opening_balance'], Decimal('600.00'))
        self.assertEqual(len(statement['entries']), 1)
        self.assertEqual(statement['closing_balance'], Decimal('1200.00'))

    def test_credit_notes_are_credits(self):
        CreditNote.objects.create(document_id='AV-02/26/0001', client=self.contact, date=date(2026, 2, 10),
                                  status='applied', subtotal=Decimal('100.00'), vat_amount=Decimal('20.00'),
                                  total=Decimal('120.00'))
        statement = build_statement(self.contact, date_to=date(2026, 2, 28))
        self.assertEqual(statement['closing_balance'], Decimal('1080.00'))

    def test_statement_number(self):
        statement = build_statement(self.contact, date_to=date(2026, 2, 28))
        self.assertEqual(statement['statement_number'], f'RL-02/26/{self.contact.pk:04d}')

    def test_statement_endpoint(self):
        response = self.client.get(f'/api/v1/contacts/{self.contact.id}/statement/?date_to=2026-02-28')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['contact']['name'], 'Atlas')
        self.assertEqual(len(response.data['entries']), 3)

    def test_statement_rejects_inverted_range(self):
        response = self.client.get(f'/api/v1/contacts/{self.contact.id}/statement/?date_from=2026-03-01&date_to=2026-02-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_statement_pdf(self):
        response = self.client.get(f'/api/v1/contacts/{self.contact.id}/statement/?date_to=2026-02-28&export=pdf')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_supplier_statement(self):
        supplier = TestDataFactory.create_supplier()
        statement = build_statement(supplier, date_to=date(2026, 2, 28))
        self.assertEqual(statement['entries'], [])
        self.assertEqual(statement['closing_balance'], Decimal('0.00'))

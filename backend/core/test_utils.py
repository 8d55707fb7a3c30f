"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.locations.models import Warehouse
from backend.catalog.models import Product
from backend.parties.models import Contact
from backend.inventory.models import StockItem
from backend.treasury.models import BankAccount
from backend.sales.models import Invoice, InvoiceItem
from backend.purchasing.models import PurchaseOrder, PurchaseOrderItem
from backend.core.numbering import generate_document_number
from backend.core.moroccan import calculate_invoice_totals
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role='manager', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not email:
            email = f'testuser_{TestDataFactory.random_string(6).lower()}@test.com'
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_admin(email=None, password='testpass123'):
        return TestDataFactory.create_user(email=email, password=password, role='admin', is_staff=True)

    @staticmethod
    def create_warehouse(name=None, code=None, city='Casablanca'):
        """Create a test warehouse"""
        if not name:
            name = f'Depot {TestDataFactory.random_string(6)}'
        if not code:
            code = f'wh-{TestDataFactory.random_string(6).lower()}'
        return Warehouse.objects.create(name=name, code=code, city=city)

    @staticmethod
    def create_product(name=None, sku=None, price=Decimal('100.00'), stock=Decimal('0.00'),
                       min_stock=Decimal('0.00'), category='Informatique'):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU-{TestDataFactory.random_string(8).upper()}'
        return Product.objects.create(
            name=name,
            sku=sku,
            category=category,
            price=price,
            stock=stock,
            min_stock=min_stock,
        )

    @staticmethod
    def create_stock_item(product, warehouse, quantity=Decimal('0.00'), min_quantity=Decimal('0.00')):
        return StockItem.objects.create(
            product=product,
            warehouse=warehouse,
            quantity=quantity,
            min_quantity=min_quantity,
        )

    @staticmethod
    def create_client(name=None, email=None, ice=None):
        """Create a test client contact"""
        if not name:
            name = f'Client_{TestDataFactory.random_string(6)}'
        return Contact.objects.create(
            name=name,
            email=email or f'{name.lower()}@client.ma',
            phone='0612345678',
            ice=ice,
            contact_type='client',
        )

    @staticmethod
    def create_supplier(name=None, email=None):
        """Create a test supplier contact"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Contact.objects.create(
            name=name,
            email=email or f'{name.lower()}@supplier.ma',
            phone='0522334455',
            contact_type='supplier',
        )

    @staticmethod
    def create_bank_account(name=None, balance=Decimal('0.00')):
        return BankAccount.objects.create(
            name=name or f'Compte {TestDataFactory.random_string(4)}',
            bank='Attijariwafa Bank',
            account_number=TestDataFactory.random_string(12).upper(),
            balance=balance,
        )

    @staticmethod
    def create_invoice(client, user=None, items=None, status='draft', invoice_date=None, vat_rate=Decimal('20.00')):
        """
        Create an invoice directly (no treasury side effects).

        ``items`` is a list of (product_or_None, quantity, unit_price).
        """
        invoice_date = invoice_date or timezone.localdate()
        items = items or [(None, Decimal('1'), Decimal('100.00'))]
        lines = [{'product': p, 'quantity': Decimal(q), 'unit_price': Decimal(u)} for p, q, u in items]
        subtotal, vat_amount, total = calculate_invoice_totals(lines, vat_rate)
        invoice = Invoice.objects.create(
            document_id=generate_document_number('invoice', invoice_date),
            client=client,
            date=invoice_date,
            status=status,
            vat_rate=vat_rate,
            subtotal=subtotal,
            vat_amount=vat_amount,
            total=total,
            created_by=user,
        )
        for line in lines:
            InvoiceItem.objects.create(
                invoice=invoice,
                product=line['product'],
                description=line['product'].name if line['product'] else 'Service',
                quantity=line['quantity'],
                unit_price=line['unit_price'],
                total=line['quantity'] * line['unit_price'],
            )
        return invoice

    @staticmethod
    def create_purchase_order(supplier, user=None, product=None, quantity=Decimal('5'), unit_price=Decimal('50.00'),
                              warehouse=None, status='draft'):
        order_date = timezone.localdate()
        order = PurchaseOrder.objects.create(
            document_id=generate_document_number('purchase_order', order_date),
            supplier=supplier,
            warehouse=warehouse,
            date=order_date,
            status=status,
            subtotal=quantity * unit_price,
            created_by=user,
        )
        PurchaseOrderItem.objects.create(
            purchase_order=order,
            product=product,
            description=product.name if product else 'Article',
            quantity=quantity,
            unit_price=unit_price,
            total=quantity * unit_price,
        )
        return order


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()

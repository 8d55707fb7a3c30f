"""
Comprehensive test suite for Inventory module
Tests: apply_stock_change, warehouse stock items, movements log
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import AuditLog, Notification
from backend.inventory.models import StockItem, StockMovement
from backend.inventory.services import apply_stock_change


class ApplyStockChangeTests(TestCase):
    """Stock changes keep product, stock item and movement log consistent"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.warehouse = TestDataFactory.create_warehouse(code='casa')
        self.product = TestDataFactory.create_product(stock=Decimal('10'), min_stock=Decimal('4'))

    def test_stock_in_with_warehouse(self):
        product = apply_stock_change(self.product, Decimal('5'), warehouse=self.warehouse,
                                     reference='BC-01/26/0001', description='Réception', user=self.user)
        self.assertEqual(product.stock, Decimal('15'))
        item = StockItem.objects.get(product=self.product, warehouse=self.warehouse)
        self.assertEqual(item.quantity, Decimal('5'))
        self.assertEqual(item.movement, 'up')
        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.type, 'in')
        self.assertEqual(movement.reference_id, 'BC-01/26/0001')
        self.assertEqual(movement.created_by, self.user)

    def test_stock_out_updates_status_and_notifies(self):
        product = apply_stock_change(self.product, Decimal('-7'), warehouse=self.warehouse)
        self.assertEqual(product.stock, Decimal('3'))
        self.assertEqual(product.status, 'low_stock')
        self.assertEqual(StockItem.objects.get(product=self.product).movement, 'down')
        self.assertEqual(StockMovement.objects.get(product=self.product).type, 'out')
        self.assertTrue(Notification.objects.filter(title='Low Stock Alert').exists())

    def test_zero_change_is_noop(self):
        apply_stock_change(self.product, 0)
        self.assertFalse(StockMovement.objects.exists())

    def test_without_warehouse_no_stock_item(self):
        apply_stock_change(self.product, Decimal('2'))
        self.assertFalse(StockItem.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('12'))
        self.assertIsNotNone(self.product.last_movement)

    def test_negative_stock_allowed(self):
        product = apply_stock_change(self.product, Decimal('-12'))
        self.assertEqual(product.stock, Decimal('-2'))
        self.assertEqual(product.status, 'out_of_stock')

    def test_running_out_sends_no_low_stock_alert(self):
        """Test draining stock to zero gives out_of_stock without a low-stock alert"""
        product = apply_stock_change(self.product, Decimal('-10'), warehouse=self.warehouse)
        self.assertEqual(product.status, 'out_of_stock')
        self.assertFalse(Notification.objects.filter(title='Low Stock Alert').exists())


class StockItemAPITests(TestCase):
    """Warehouse stock item endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.casa = TestDataFactory.create_warehouse(name='Casa', code='casa')
        self.rabat = TestDataFactory.create_warehouse(name='Rabat', code='rabat')
        self.product = TestDataFactory.create_product()

    def test_list_and_filter(self):
        TestDataFactory.create_stock_item(self.product, self.casa, Decimal('4'))
        TestDataFactory.create_stock_item(self.product, self.rabat, Decimal('6'))
        response = self.client.get('/api/v1/products/stock-items/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/products/stock-items/?warehouse=rabat')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['warehouse_code'], 'rabat')

    def test_product_stock_items(self):
        TestDataFactory.create_stock_item(self.product, self.casa, Decimal('4'))
        response = self.client.get(f'/api/v1/products/{self.product.id}/stock-items/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['product_sku'], self.product.sku)

    def test_upsert_creates(self):
        url = f'/api/v1/products/{self.product.id}/stock-items/casa/'
        response = self.client.put(url, {'quantity': '8', 'min_quantity': '2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(StockItem.objects.get(product=self.product, warehouse=self.casa).quantity, Decimal('8'))
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust', model_name='StockItem').exists())

    def test_upsert_updates(self):
        TestDataFactory.create_stock_item(self.product, self.casa, Decimal('4'))
        url = f'/api/v1/products/{self.product.id}/stock-items/casa/'
        response = self.client.put(url, {'min_quantity': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item = StockItem.objects.get(product=self.product, warehouse=self.casa)
        self.assertEqual(item.quantity, Decimal('4'))
        self.assertEqual(item.min_quantity, Decimal('1'))

    def test_create_requires_quantity(self):
        url = f'/api/v1/products/{self.product.id}/stock-items/casa/'
        response = self.client.put(url, {'min_quantity': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(StockItem.objects.exists())

    def test_unknown_warehouse(self):
        url = f'/api/v1/products/{self.product.id}/stock-items/nowhere/'
        response = self.client.put(url, {'quantity': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class StockMovementAPITests(TestCase):
    """Movement log endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(stock=Decimal('20'))
        self.other = TestDataFactory.create_product(stock=Decimal('20'))
        apply_stock_change(self.product, Decimal('-2'), reference='BL-01/26/0001')
        apply_stock_change(self.product, Decimal('3'), reference='BC-01/26/0001')
        apply_stock_change(self.other, Decimal('-1'), reference='BL-01/26/0002')

    def test_latest_first(self):
        response = self.client.get('/api/v1/products/movements/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)
        self.assertEqual(response.data[0]['reference_id'], 'BL-01/26/0002')

    def test_filters(self):
        response = self.client.get(f'/api/v1/products/movements/?product={self.product.id}')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/products/movements/?reference=BC-01/26/0001')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['type'], 'in')
        response = self.client.get('/api/v1/products/movements/?limit=1')
        self.assertEqual(len(response.data), 1)

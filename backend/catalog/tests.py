"""
Comprehensive test suite for Catalog module
Tests: Product CRUD, soft delete, status derivation, filters, stock correction and low-stock alerts
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import Notification
from backend.catalog.models import Product
from backend.inventory.models import StockMovement


class ProductStatusTests(TestCase):
    """Status follows stock and min_stock on every save"""

    def test_compute_status(self):
        self.assertEqual(Product.compute_status(0, 5), 'out_of_stock')
        self.assertEqual(Product.compute_status(-2, 0), 'out_of_stock')
        self.assertEqual(Product.compute_status(5, 5), 'low_stock')
        self.assertEqual(Product.compute_status(6, 5), 'in_stock')
        self.assertEqual(Product.compute_status(3, 0), 'in_stock')

    def test_status_refreshed_on_save(self):
        product = TestDataFactory.create_product(stock=Decimal('10'), min_stock=Decimal('2'))
        self.assertEqual(product.status, 'in_stock')
        product.stock = Decimal('1')
        product.save()
        self.assertEqual(product.status, 'low_stock')

    def test_active_manager_hides_deleted(self):
        product = TestDataFactory.create_product()
        product.is_deleted = True
        product.save()
        self.assertFalse(Product.active.filter(pk=product.pk).exists())
        self.assertTrue(Product.objects.filter(pk=product.pk).exists())


class ProductAPITests(TestCase):
    """Product endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product(self):
        data = {'sku': 'LAP-001', 'name': 'Laptop HP', 'category': 'Informatique', 'price': '7500.00',
                'stock': '10', 'min_stock': '2'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'in_stock')
        self.assertIsNotNone(response.data['last_movement'])
        self.assertEqual(Decimal(str(response.data['stock_value'])), Decimal('75000.00'))

    def test_create_low_product_notifies(self):
        data = {'sku': 'CBL-01', 'name': 'Câble HDMI', 'price': '50', 'stock': '1', 'min_stock': '5'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'low_stock')
        notification = Notification.objects.get(title='Low Stock Alert')
        self.assertIn('created with low stock', notification.message)

    def test_duplicate_sku_case_insensitive(self):
        TestDataFactory.create_product(sku='ABC-1')
        data = {'sku': 'abc-1', 'name': 'Other', 'price': '10'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_negative_price_rejected(self):
        data = {'sku': 'NEG-1', 'name': 'Negative', 'price': '-1'}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_product(name='Souris Logitech', sku='SOU-1', category='Accessoires', stock=Decimal('50'))
        TestDataFactory.create_product(name='Clavier', sku='CLA-1', category='Accessoires', stock=Decimal('1'), min_stock=Decimal('3'))
        TestDataFactory.create_product(name='Ecran', sku='ECR-1', category='Informatique', stock=Decimal('5'))
        response = self.client.get('/api/v1/products/?category=accessoires')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/products/?search=sou')
        self.assertEqual([p['sku'] for p in response.data], ['SOU-1'])
        response = self.client.get('/api/v1/products/?low_stock=true')
        self.assertEqual([p['sku'] for p in response.data], ['CLA-1'])

    def test_paginated_list(self):
        for i in range(3):
            TestDataFactory.create_product(name=f'Item {i}', sku=f'IT-{i}')
        response = self.client.get('/api/v1/products/?page=1&limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['next'], 2)
        self.assertEqual(response.data['total_pages'], 2)

    def test_low_stock_endpoint(self):
        TestDataFactory.create_product(sku='OK-1', stock=Decimal('10'), min_stock=Decimal('2'))
        TestDataFactory.create_product(sku='LOW-1', stock=Decimal('2'), min_stock=Decimal('2'))
        TestDataFactory.create_product(sku='NOMIN-1', stock=Decimal('0'))
        response = self.client.get('/api/v1/products/low-stock/')
        self.assertEqual([p['sku'] for p in response.data], ['LOW-1'])

    def test_get_by_sku(self):
        TestDataFactory.create_product(sku='SKU-42')
        response = self.client.get('/api/v1/products/sku/SKU-42/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/products/sku/MISSING/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Product not found')

    def test_update_product(self):
        product = TestDataFactory.create_product(price=Decimal('100.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '120.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal('120.00'))

    def test_update_keeps_own_sku(self):
        product = TestDataFactory.create_product(sku='KEEP-1')
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'sku': 'KEEP-1', 'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_soft_delete(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        product.refresh_from_db()
        self.assertTrue(product.is_deleted)
        self.assertEqual(self.client.get(f'/api/v1/products/{product.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/v1/products/').data, [])


class ProductStockUpdateTests(TestCase):
    """PUT /products/<pk>/stock/"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(stock=Decimal('10'), min_stock=Decimal('5'))

    def test_set_stock_logs_movement(self):
        response = self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': 25}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data['stock'])), Decimal('25'))
        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.type, 'in')
        self.assertEqual(movement.quantity, Decimal('15'))
        self.assertEqual(movement.description, 'Ajustement manuel')

    def test_set_stock_low_notifies(self):
        response = self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'low_stock')
        notification = Notification.objects.get(title='Low Stock Alert')
        self.assertIn('manually updated', notification.message)

    def test_low_stock_alert_not_duplicated_while_unread(self):
        self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': 3}, format='json')
        self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': 2}, format='json')
        self.assertEqual(Notification.objects.filter(title='Low Stock Alert').count(), 1)

    def test_set_stock_to_zero_no_low_stock_alert(self):
        response = self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': 0}, format='json')
        self.assertEqual(response.data['status'], 'out_of_stock')
        self.assertFalse(Notification.objects.filter(title='Low Stock Alert').exists())

    def test_non_finite_quantity_rejected(self):
        for value in ('NaN', 'Infinity', '-inf'):
            response = self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': value}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, Decimal('10'))

    def test_quantity_required(self):
        response = self.client.put(f'/api/v1/products/{self.product.id}/stock/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quantity_must_be_numeric(self):
        response = self.client.put(f'/api/v1/products/{self.product.id}/stock/', {'quantity': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

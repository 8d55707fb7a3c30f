"""
Test suite for Locations module
Tests: Warehouse slug codes, CRUD by code and role restrictions
"""
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.locations.models import Warehouse, slugify_warehouse_name


class WarehouseCodeTests(TestCase):

    def test_slugify(self):
        self.assertEqual(slugify_warehouse_name('Dépôt Casa 2'), 'dpt-casa-2')
        self.assertEqual(slugify_warehouse_name('  Main   Store '), 'main-store')
        self.assertEqual(slugify_warehouse_name(None), '')

    def test_code_derived_on_save(self):
        warehouse = Warehouse.objects.create(name='Agadir Nord')
        self.assertEqual(warehouse.code, 'agadir-nord')


class WarehouseAPITests(TestCase):
    """Warehouse endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role='manager')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_create_warehouse(self):
        response = self.client.post('/api/v1/settings/warehouses/', {'name': 'Dépôt Casa', 'city': 'Casablanca'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'dpt-casa')

    def test_code_is_not_writable(self):
        response = self.client.post('/api/v1/settings/warehouses/', {'name': 'Rabat', 'code': 'custom'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'rabat')

    def test_duplicate_code_conflicts(self):
        TestDataFactory.create_warehouse(name='Tanger', code='tanger')
        response = self.client.post('/api/v1/settings/warehouses/', {'name': 'TANGER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_name_without_letters_rejected(self):
        response = self.client.post('/api/v1/settings/warehouses/', {'name': 'éé'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_viewer_cannot_create(self):
        viewer = TestDataFactory.create_user(role='viewer')
        self.client.authenticate_user(viewer)
        response = self.client.post('/api/v1/settings/warehouses/', {'name': 'Fes'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/settings/warehouses/').status_code, status.HTTP_200_OK)

    def test_rename_keeps_code(self):
        warehouse = TestDataFactory.create_warehouse(name='Marrakech', code='marrakech')
        response = self.client.patch(f'/api/v1/settings/warehouses/{warehouse.code}/', {'name': 'Marrakech Centre'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Marrakech Centre')
        self.assertEqual(response.data['code'], 'marrakech')

    def test_delete_warehouse(self):
        warehouse = TestDataFactory.create_warehouse(name='Oujda', code='oujda')
        response = self.client.delete('/api/v1/settings/warehouses/oujda/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Warehouse.objects.filter(pk=warehouse.pk).exists())

    def test_unknown_code(self):
        response = self.client.get('/api/v1/settings/warehouses/nowhere/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

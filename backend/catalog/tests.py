"""
Test suite for the catalog module
Tests: service item CRUD and validation
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.catalog.models import ServiceItem


class ServiceItemAPITests(TestCase):
    """Test service catalog endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_service(self):
        """Test creating a service; currency is upper-cased"""
        data = {'name': 'Customs Clearance', 'price': '250.00', 'currency': 'rwf', 'vat': True}
        response = self.client.post('/api/services/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['service']['currency'], 'RWF')
        self.assertEqual(response.data['service']['price'], Decimal('250.00'))
        self.assertTrue(response.data['service']['vat'])

    def test_create_service_defaults(self):
        """Test currency defaults to USD and VAT to off"""
        response = self.client.post('/api/services/', {'name': 'Handling', 'price': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['service']['currency'], 'USD')
        self.assertFalse(response.data['service']['vat'])

    def test_create_service_negative_price(self):
        """Test negative prices are rejected"""
        response = self.client.post('/api/services/', {'name': 'Bad', 'price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data['details'])

    def test_create_service_missing_price(self):
        """Test price is required"""
        response = self.client.post('/api/services/', {'name': 'No Price'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ServiceItem.objects.count(), 0)

    def test_list_services_by_currency(self):
        """Test filtering services by currency"""
        TestDataFactory.create_service(currency='USD')
        TestDataFactory.create_service(currency='RWF')
        response = self.client.get('/api/services/?currency=rwf')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['services'][0]['currency'], 'RWF')

    def test_update_and_delete_service(self):
        """Test updating then deleting a service"""
        service = TestDataFactory.create_service(price=Decimal('10.00'))
        response = self.client.patch(f'/api/services/?id={service.id}', {'price': '12.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['service']['price'], Decimal('12.50'))
        response = self.client.delete(f'/api/services/{service.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['service']['id'], service.id)
        self.assertFalse(ServiceItem.objects.filter(id=service.id).exists())

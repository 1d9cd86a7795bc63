"""
Test suite for the parties module
Tests: client and supplier CRUD, search, delete guards and denormalised names
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Client, Supplier
from backend.expenses.models import Expense


class ClientAPITests(TestCase):
    """Test client endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_client(self):
        """Test creating a client"""
        data = {'name': 'Kigali Traders', 'email': 'info@kt.rw', 'tin': '101234567'}
        response = self.client.post('/api/clients/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Client created successfully')
        self.assertEqual(response.data['client']['name'], 'Kigali Traders')
        self.assertEqual(response.data['client']['job_count'], 0)

    def test_create_client_without_name(self):
        """Test creating a client without a name fails"""
        response = self.client.post('/api/clients/', {'email': 'a@b.rw'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data['error'])
        self.assertEqual(Client.objects.count(), 0)

    def test_list_clients_with_counts(self):
        """Test the list carries job and invoice counts"""
        client = TestDataFactory.create_client(name='Counted')
        TestDataFactory.create_job(client=client)
        TestDataFactory.create_invoice(client=client)
        response = self.client.get('/api/clients/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['clients'][0]['job_count'], 1)
        self.assertEqual(response.data['clients'][0]['invoice_count'], 1)

    def test_search_clients(self):
        """Test searching clients by name"""
        TestDataFactory.create_client(name='Alpha Freight')
        TestDataFactory.create_client(name='Beta Cargo')
        response = self.client.get('/api/clients/?search=alpha')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['clients'][0]['name'], 'Alpha Freight')

    def test_get_client_by_query_id(self):
        """Test fetching a client through ?id="""
        client = TestDataFactory.create_client()
        response = self.client.get(f'/api/clients/?id={client.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['client']['id'], client.id)

    def test_update_client(self):
        """Test partially updating a client"""
        client = TestDataFactory.create_client()
        response = self.client.patch(f'/api/clients/{client.id}/', {'contact_person': 'Jean'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        client.refresh_from_db()
        self.assertEqual(client.contact_person, 'Jean')

    def test_delete_client(self):
        """Test deleting a client returns the deleted record"""
        client = TestDataFactory.create_client()
        response = self.client.delete(f'/api/clients/?id={client.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['client']['id'], client.id)
        self.assertFalse(Client.objects.filter(id=client.id).exists())

    def test_delete_client_with_jobs_is_blocked(self):
        """Test clients with jobs cannot be deleted"""
        client = TestDataFactory.create_client()
        TestDataFactory.create_job(client=client)
        response = self.client.delete(f'/api/clients/{client.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details']['jobs_count'], 1)
        self.assertTrue(Client.objects.filter(id=client.id).exists())

    def test_delete_without_id(self):
        """Test DELETE without an id fails"""
        response = self.client.delete('/api/clients/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Client ID is required')

    def test_unknown_client(self):
        """Test an unknown id gives 404"""
        response = self.client.get('/api/clients/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Client not found')


class SupplierAPITests(TestCase):
    """Test supplier endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_supplier(self):
        """Test creating a supplier"""
        response = self.client.post('/api/suppliers/', {'name': 'RwandAir Cargo', 'contact': '0788'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['supplier']['name'], 'RwandAir Cargo')

    def test_supplier_detail_lists_expenses(self):
        """Test supplier detail includes its expenses"""
        supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_expense(supplier=supplier, amount=Decimal('75.00'))
        response = self.client.get(f'/api/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['supplier']['expense_count'], 1)
        self.assertEqual(len(response.data['supplier']['expenses']), 1)

    def test_rename_supplier_updates_expenses(self):
        """Test renaming a supplier updates supplier_name on its expenses"""
        supplier = TestDataFactory.create_supplier(name='Old Name')
        expense = TestDataFactory.create_expense(supplier=supplier)
        response = self.client.put(f'/api/suppliers/{supplier.id}/', {'name': 'New Name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        expense.refresh_from_db()
        self.assertEqual(expense.supplier_name, 'New Name')

    def test_delete_supplier_keeps_expenses(self):
        """Test deleting a supplier unlinks its expenses but keeps the name"""
        supplier = TestDataFactory.create_supplier(name='Gone Supplier')
        expense = TestDataFactory.create_expense(supplier=supplier)
        response = self.client.delete(f'/api/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Supplier.objects.filter(id=supplier.id).exists())
        expense = Expense.objects.get(id=expense.id)
        self.assertIsNone(expense.supplier_id)
        self.assertEqual(expense.supplier_name, 'Gone Supplier')
